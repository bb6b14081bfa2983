# -*- coding: utf8 -*-
"""Statistical suffix replacement model for lemmatization."""


import logging
import os

from collections import namedtuple

from suflem.codepoints import (DecodeError, scan_codepoints,
                               common_prefix_size, encode, decode)
from suflem.data_utils import (FILE_BATCH_SIZE, TrainError, ValidationError,
                               read_corpus)
from suflem.model_io import FormatError, save_tables, load_tables


START_SENTINEL = '$'
DEFAULT_MAX_SUFFIX_SIZE = 8
MIN_SUFFIX_SIZE = 1
MAX_SUFFIX_SIZE = 1024

logger = logging.getLogger(__name__)

FrequencyPair = namedtuple('FrequencyPair',
                           ['true_positive', 'false_positive'])
ZERO_PAIR = FrequencyPair(0, 0)


class ConfigError(ValueError):
    """Model parameter out of its allowed range."""


class ForbiddenOperation(RuntimeError):
    """Operation not allowed in the current model state."""


def load_model(load_path):
    """Load an existing SuffixModel.

    Args:
        load_path (str): Path to a saved model.

    Returns:
        SuffixModel object.

    Raises:
        FileNotFoundError: If the model path doesn't exist.
        FormatError: If the model file is malformed.
    """
    tables = load_tables(load_path)
    try:
        model = SuffixModel(tables['max_suffix_size'])
    except ConfigError as e:
        raise FormatError("Invalid model file %s: %s" % (load_path, e)) from e

    for suffix, tp, fp in tables['lemma_counts']:
        model._update_lemma(suffix, tp, fp)
    for suffix, tp, fp in tables['inflection_counts']:
        model._update_inflected(suffix, tp, fp)
    for inf_suffix, candidates in tables['replacements']:
        # groups without candidates only exist in hand edited files
        model.replacements.setdefault(inf_suffix, {})
        for lem_suffix, tp, fp in candidates:
            model._update_replacement(inf_suffix, lem_suffix, tp, fp)

    model.state = SuffixModel.TRIMMED if tables['trimmed'] \
                    else SuffixModel.TRAINED
    logger.info('Model loaded from "%s" (%s)', load_path, model.summary())
    return(model)


def save_model(model, save_path):
    """Save SuffixModel object to file.

    Args:
        model (SuffixModel): Model to save.
        save_path (str): Model save path.

    Raises:
        OSError: If the model could not be written.
    """
    save_tables(save_path,
                model.max_suffix_size,
                model.is_trimmed(),
                model.lemma_counts,
                model.inflection_counts,
                model.replacements)
    logger.info('Model saved to "%s" (%s)', save_path, model.summary())


def _probability(pair):
    """Share of true positives in a FrequencyPair, zero if it is empty."""
    total = pair.true_positive + pair.false_positive
    if total == 0:
        return 0.0
    return pair.true_positive / total


def _add(table, key, tp, fp):
    counts = table.get(key, ZERO_PAIR)
    table[key] = FrequencyPair(counts.true_positive + tp,
                               counts.false_positive + fp)


def _remove_unconfirmed(table):
    """Remove entries without true positives, return the number removed."""
    to_remove = [key for key, counts in table.items()
                 if counts.true_positive == 0]
    for key in to_remove:
        del table[key]
    return len(to_remove)


class SuffixModel(object):
    """Suffix replacement statistics learned from (inflected, lemma) pairs.

    Every training pair is split into inflected and lemma suffixes of all
    lengths up to max_suffix_size. A pair of suffixes cut at a point inside
    the common prefix of the two words is a correct replacement (true
    positive), others are false positives. Lemmatization replaces the
    longest known suffix of a word with its best scoring lemma suffix.

    Args:
        max_suffix_size (int): Maximum suffix size to collect in training,
            between 1 and 1024. Defaults to 8.

    Attributes:
        max_suffix_size (int): Maximum suffix size, fixed at creation.
        replacements (dict): Inflected suffix -> lemma suffix ->
            FrequencyPair of the replacement.
        lemma_counts (dict): Suffix -> FrequencyPair of the suffix
            appearing as a lemma suffix.
        inflection_counts (dict): Suffix -> FrequencyPair of the suffix
            appearing as an inflected suffix.
        state (str): One of FRESH, TRAINED or TRIMMED.

    Raises:
        ConfigError: If max_suffix_size is out of range.

    Examples:
        Train a model from a corpus file:
        >>> model = SuffixModel.train('corpus.tsv', max_suffix_size=8)

        Or update it pair by pair:
        >>> model = SuffixModel(max_suffix_size=2)
        >>> model.update('cats', 'cat', 5)
        >>> model.update('dogs', 'dog', 3)

        Trim the model after training to reduce its size:
        >>> model.trim() # Model can not be updated anymore

        Lemmatize words:
        >>> model.lemmatize('bats')
        'bat'

        Save and load the model:
        >>> model.save('model.suflem') # or using save_model -function
        >>> model = load_model('model.suflem')
    """

    FRESH = 'fresh'
    TRAINED = 'trained'
    TRIMMED = 'trimmed'

    def __init__(self, max_suffix_size=DEFAULT_MAX_SUFFIX_SIZE):
        if not MIN_SUFFIX_SIZE <= max_suffix_size <= MAX_SUFFIX_SIZE:
            raise ConfigError("must be %d <= max_suffix_size <= %d, got %r" % \
                              (MIN_SUFFIX_SIZE, MAX_SUFFIX_SIZE,
                               max_suffix_size))
        self._max_suffix_size = max_suffix_size
        self.replacements = {}
        self.lemma_counts = {}
        self.inflection_counts = {}
        self.state = self.FRESH

    @property
    def max_suffix_size(self):
        return self._max_suffix_size

    def is_trimmed(self):
        """Is the model trimmed."""
        return self.state == self.TRIMMED

    def summary(self):
        """Number of entries in each table."""
        n_replacements = sum(len(candidates)
                             for candidates in self.replacements.values())
        return({
            'state': self.state,
            'max_suffix_size': self.max_suffix_size,
            'lemma_suffixes': len(self.lemma_counts),
            'inflected_suffixes': len(self.inflection_counts),
            'replacement_groups': len(self.replacements),
            'replacements': n_replacements})

    def _update_replacement(self, inf_suffix, lem_suffix, tp, fp):
        _add(self.replacements.setdefault(inf_suffix, {}), lem_suffix, tp, fp)

    def _update_inflected(self, inf_suffix, tp, fp):
        _add(self.inflection_counts, inf_suffix, tp, fp)

    def _update_lemma(self, lem_suffix, tp, fp):
        _add(self.lemma_counts, lem_suffix, tp, fp)

    def update(self, inflected, lemma, count):
        """Add a training pair to the model.

        Args:
            inflected (str): Inflected form of a word.
            lemma (str): Lemma of the inflected form.
            count (int): Number of occurrences of the pair, positive.

        Raises:
            ForbiddenOperation: If the model has been trimmed.
            ValidationError: If count is not positive.
            DecodeError: If either word is not valid utf-8. The model is
                left unchanged.
        """
        if self.is_trimmed():
            raise ForbiddenOperation("Cannot update a trimmed model.")
        if count <= 0:
            raise ValidationError("count must be positive, got %r" % count)

        inf = encode(START_SENTINEL + inflected)
        lem = encode(START_SENTINEL + lemma)
        inf_offsets = scan_codepoints(inf)
        lem_offsets = scan_codepoints(lem)
        prefix_size = common_prefix_size(inf, lem, inf_offsets, lem_offsets)

        # mark the end of both strings
        inf_offsets.append(len(inf))
        lem_offsets.append(len(lem))

        n = max(len(inf_offsets), len(lem_offsets))
        m = max(n - (self.max_suffix_size + 1), 0)
        for i in range(n-2, m-1, -1):
            inf_suffix = decode(inf[inf_offsets[min(len(inf_offsets)-1, i)]:])
            lem_suffix = decode(lem[lem_offsets[min(len(lem_offsets)-1, i)]:])
            # the first i characters are shared, so the replacement is correct
            if i <= prefix_size:
                self._update_replacement(inf_suffix, lem_suffix, count, 0)
            else:
                self._update_replacement(inf_suffix, lem_suffix, 0, count)
            self._update_lemma(lem_suffix, count, 0)
            self._update_lemma(inf_suffix, 0, count)
            self._update_inflected(inf_suffix, count, 0)
            self._update_inflected(lem_suffix, 0, count)

        self.state = self.TRAINED

    def trim(self):
        """Remove entries that were never seen as true positives.

        Note:
            The model can not be updated after trimming.
        """
        if self.is_trimmed():
            return
        n_lemmas = _remove_unconfirmed(self.lemma_counts)
        n_inflections = _remove_unconfirmed(self.inflection_counts)
        n_replacements = 0
        for inf_suffix in list(self.replacements.keys()):
            candidates = self.replacements[inf_suffix]
            n_replacements += _remove_unconfirmed(candidates)
            if len(candidates) == 0:
                del self.replacements[inf_suffix]
        self.state = self.TRIMMED
        logger.debug('Trimmed %d lemma suffixes, %d inflected suffixes '
                     'and %d replacements',
                     n_lemmas, n_inflections, n_replacements)
        logger.info('Model trimmed (%s)', self.summary())

    def lemmatize(self, inflected):
        """Lemmatize a word.

        Suffixes of the word are tried from the longest to the shortest.
        The first suffix with any scoring replacement is replaced with its
        best lemma suffix; shorter suffixes are not considered after that.

        Args:
            inflected (str): Inflected form of a word.

        Returns:
            Lemma of the word, or the word unchanged if no replacement
            applies.

        Raises:
            DecodeError: If the word is not valid utf-8.
        """
        inf = encode(START_SENTINEL + inflected.strip())
        offsets = scan_codepoints(inf)
        offsets.append(len(inf))

        for offset in offsets:
            inf_suffix = decode(inf[offset:])
            inf_counts = self.inflection_counts.get(inf_suffix)
            if inf_counts is None:
                continue
            pr_b = _probability(inf_counts)
            if pr_b == 0:
                continue
            candidates = self.replacements.get(inf_suffix)
            if candidates is None:
                continue

            best_suffix = None
            best_prob = 0.0
            for lem_suffix, counts in candidates.items():
                lem_counts = self.lemma_counts.get(lem_suffix)
                if lem_counts is None:
                    continue
                pr_a = _probability(lem_counts)
                pr_ba = _probability(counts)
                pr_ab = (pr_ba * pr_a) / pr_b
                if pr_ab > best_prob:
                    best_suffix = lem_suffix
                    best_prob = pr_ab

            if best_suffix is not None:
                lemma = decode(inf[:offset]) + best_suffix
                return lemma[len(START_SENTINEL):]

        return inflected

    @classmethod
    def train(cls, source, max_suffix_size=DEFAULT_MAX_SUFFIX_SIZE,
              file_batch_size=FILE_BATCH_SIZE):
        """Train a new model.

        Args:
            source: Path to a corpus file or folder, or an iterable of
                (inflected, lemma, count) tuples.
            max_suffix_size (int): Maximum suffix size. Defaults to 8.
            file_batch_size (int): Number of corpus lines to read in-memory
                at a time. Defaults to 8192.

        Returns:
            Untrimmed SuffixModel.

        Raises:
            ConfigError: If max_suffix_size is out of range.
            TrainError: If the corpus could not be read or holds words
                that are not valid utf-8.
            ValidationError: If a corpus line has an empty token or a
                non-positive count.
        """
        model = cls(max_suffix_size)
        if isinstance(source, (str, os.PathLike)):
            entries = read_corpus(source, file_batch_size=file_batch_size)
        else:
            entries = source

        n_entries = 0
        for entry in entries:
            inflected, lemma, count = entry[:3]
            try:
                model.update(inflected, lemma, count)
            except DecodeError as e:
                where = 'entry %d' % (n_entries + 1)
                if hasattr(entry, 'line_nb'):
                    where = 'line %d of %s' % (entry.line_nb, entry.filename)
                raise TrainError("%s on %s" % (e, where)) from e
            n_entries += 1

        logger.info('Model trained with %d entries (%s)',
                    n_entries, model.summary())
        return(model)

    @classmethod
    def load(cls, load_path):
        """Load a model from file. See load_model."""
        return load_model(load_path)

    def save(self, save_path):
        """Save model to file. See save_model."""
        save_model(self, save_path)
