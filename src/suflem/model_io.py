# -*- coding: utf8 -*-
"""Reading and writing suffix model tables in tab separated text format.

File layout::

    <max_suffix_size>\t<trimmed 0|1>
    <number of lemma suffixes>
    <lemma suffix>\t<true positives>\t<false positives>
    ...
    <number of inflected suffixes>
    <inflected suffix>\t<true positives>\t<false positives>
    ...
    <number of replacement groups>
    <inflected suffix>\t<number of lemma suffixes>
    <lemma suffix>\t<true positives>\t<false positives>
    ...

Numeric fields are split off from the right, so a suffix may hold a tab
and still be read back as it was written.
"""


from os.path import dirname

from suflem.codepoints import ENCODING, ENCODING_ERRORS
from suflem.utils import create_folder


TAB = b'\t'
NEWLINE = b'\n'


class FormatError(ValueError):
    """Model file does not have the expected shape."""


def _encode_key(key):
    return key.encode(ENCODING, ENCODING_ERRORS)


def _decode_key(key):
    return key.decode(ENCODING, ENCODING_ERRORS)


def _write_record(f, *fields):
    f.write(TAB.join(fields) + NEWLINE)


def _write_counts(f, key, counts):
    _write_record(f, _encode_key(key),
                  b'%d' % counts[0], b'%d' % counts[1])


def save_tables(path, max_suffix_size, trimmed,
                lemma_counts, inflection_counts, replacements):
    """Write model tables to file.

    Tables are written in their iteration order.

    Args:
        path (str): Model save path. Missing folders are created.
        max_suffix_size (int): Maximum suffix size of the model.
        trimmed (bool): Whether the model has been trimmed.
        lemma_counts (dict): Lemma suffix -> (tp, fp).
        inflection_counts (dict): Inflected suffix -> (tp, fp).
        replacements (dict): Inflected suffix -> lemma suffix -> (tp, fp).

    Raises:
        OSError: If the file could not be written.
    """
    create_folder(dirname(path))
    with open(path, 'wb') as f:
        _write_record(f, b'%d' % max_suffix_size, b'%d' % int(trimmed))
        for table in [lemma_counts, inflection_counts]:
            _write_record(f, b'%d' % len(table))
            for key, counts in table.items():
                _write_counts(f, key, counts)
        _write_record(f, b'%d' % len(replacements))
        for inf_suffix, candidates in replacements.items():
            _write_record(f, _encode_key(inf_suffix),
                          b'%d' % len(candidates))
            for lem_suffix, counts in candidates.items():
                _write_counts(f, lem_suffix, counts)


class _RecordReader(object):
    """Reads tab separated records from a binary file, counting lines."""

    def __init__(self, f):
        self.f = f
        self.line_nb = 0

    def _read_line(self, what):
        line = self.f.readline()
        self.line_nb += 1
        if not line:
            raise FormatError("Unexpected end of file at line %d, "
                              "expected %s" % (self.line_nb, what))
        if line.endswith(NEWLINE):
            line = line[:-1]
        return line

    def _parse_int(self, field, what):
        if not field.isdigit():
            raise FormatError("Invalid %s %r at line %d" % \
                              (what, field, self.line_nb))
        return int(field)

    def read_numbers(self, n, what):
        """Read a record of n non-negative integers."""
        fields = self._read_line(what).split(TAB)
        if len(fields) != n:
            raise FormatError("Expected %d fields at line %d, found %d" % \
                              (n, self.line_nb, len(fields)))
        return [self._parse_int(field, what) for field in fields]

    def read_keyed(self, n, what):
        """Read a record of a key followed by n non-negative integers."""
        fields = self._read_line(what).rsplit(TAB, n)
        if len(fields) != n+1:
            raise FormatError("Expected %d fields at line %d, found %d" % \
                              (n+1, self.line_nb, len(fields)))
        numbers = [self._parse_int(field, what) for field in fields[1:]]
        return [_decode_key(fields[0])] + numbers

    def read_rest(self):
        return self.f.read()


def load_tables(path):
    """Read model tables from file.

    Args:
        path (str): Path to an existing model file.

    Returns:
        Dictionary with keys 'max_suffix_size' (int), 'trimmed' (bool),
        'lemma_counts' and 'inflection_counts' (lists of (suffix, tp, fp)
        records in file order) and 'replacements' (list of
        (inflected suffix, list of (lemma suffix, tp, fp)) groups).

    Raises:
        OSError: If the file could not be opened or read.
        FormatError: If the file content is malformed.
    """
    with open(path, 'rb') as f:
        reader = _RecordReader(f)
        max_suffix_size, trimmed = reader.read_numbers(
            2, 'max suffix size and trimmed state')
        if trimmed not in (0, 1):
            raise FormatError("Trimmed state must be 0 or 1, found %d" % \
                              trimmed)

        tables = {}
        for name in ['lemma_counts', 'inflection_counts']:
            n_entries, = reader.read_numbers(1, 'number of %s' % name)
            tables[name] = [tuple(reader.read_keyed(2, 'counts'))
                            for _ in range(n_entries)]

        replacements = []
        n_groups, = reader.read_numbers(1, 'number of replacement groups')
        for _ in range(n_groups):
            inf_suffix, n_candidates = reader.read_keyed(
                1, 'number of replacements')
            candidates = [tuple(reader.read_keyed(2, 'counts'))
                          for _ in range(n_candidates)]
            replacements.append((inf_suffix, candidates))

        if reader.read_rest().strip():
            raise FormatError("Unexpected content after line %d" % \
                              reader.line_nb)

    return({
        'max_suffix_size': max_suffix_size,
        'trimmed': bool(trimmed),
        'lemma_counts': tables['lemma_counts'],
        'inflection_counts': tables['inflection_counts'],
        'replacements': replacements})
