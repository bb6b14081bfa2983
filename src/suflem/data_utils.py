# -*- coding: utf8 -*-
"""Reading tab separated corpora in batches."""


import csv
import logging

from collections import namedtuple

import pandas as pd

from suflem.utils import get_path_files


FILE_BATCH_SIZE = 8192
CORPUS_COLUMNS = ['inflected', 'lemma', 'count']
EXTRA_COLUMN = '_extra'

logger = logging.getLogger(__name__)

CorpusEntry = namedtuple('CorpusEntry',
                         ['inflected', 'lemma', 'count', 'filename', 'line_nb'])


class CorpusError(ValueError):
    """Tab separated file could not be parsed."""


class TrainError(ValueError):
    """Training corpus could not be read or applied."""


class ValidationError(TrainError):
    """Training record with an empty token or a non-positive count."""


def read_file_batched(filename, file_batch_size=FILE_BATCH_SIZE, names=None):
    """Read a tab separated file in batches.

    Every physical line, blank lines included, becomes one row, so row
    numbers match line numbers. Only '\\n' ends a line. All values are read
    as stripped strings, missing values as empty strings. Invalid utf-8 is
    kept with the surrogateescape error handler.

    Args:
        filename (str): File to read.
        file_batch_size (int): Number of rows per batch.
        names (list): Column names. Defaults to None, in which case the
            number of columns is taken from the first line.

    Yields:
        pandas.DataFrame of at most file_batch_size rows.

    Raises:
        CorpusError: If a row has more fields than expected.
    """
    # one spare column catches rows with too many fields
    read_names = names + [EXTRA_COLUMN] if names is not None else None
    line_nb = 0
    try:
        batch_iterator = pd.read_csv(filename,
                                     sep='\t',
                                     lineterminator='\n',
                                     header=None,
                                     names=read_names,
                                     index_col=False,
                                     dtype=str,
                                     quoting=csv.QUOTE_NONE,
                                     keep_default_na=False,
                                     skip_blank_lines=False,
                                     chunksize=file_batch_size,
                                     encoding='utf-8',
                                     encoding_errors='surrogateescape')
        for batch_df in batch_iterator:
            if read_names is not None:
                extra = batch_df[EXTRA_COLUMN].notna().to_numpy()
                if extra.any():
                    raise CorpusError(
                        "Expected %d fields on line %d of %s" % \
                        (len(names), line_nb + extra.argmax() + 1, filename))
                batch_df = batch_df.drop(columns=EXTRA_COLUMN)
            line_nb += len(batch_df)
            yield batch_df.fillna('').apply(lambda col: col.str.strip())
    except pd.errors.EmptyDataError:
        logger.warning('File %s is empty', filename)
    except pd.errors.ParserError as e:
        raise CorpusError("Could not parse %s: %s" % (filename, e)) from e


def parse_corpus_row(row, filename, line_nb):
    """Validate one training corpus row.

    Args:
        row (tuple): Stripped (inflected, lemma, count) strings.
        filename (str): File the row was read from.
        line_nb (int): Line number of the row, starting from 1.

    Returns:
        CorpusEntry with the count converted to int.

    Raises:
        ValidationError: If a token is empty or the count is not a
            positive integer.
    """
    inflected, lemma, count = row
    if not inflected or not lemma:
        raise ValidationError("Zero-length string on line %d of %s" % \
                              (line_nb, filename))
    try:
        count = int(count)
    except ValueError:
        raise ValidationError("Invalid count %r on line %d of %s" % \
                              (count, line_nb, filename))
    if count <= 0:
        raise ValidationError("count<=0 on line %d of %s" % \
                              (line_nb, filename))
    return CorpusEntry(inflected, lemma, count, filename, line_nb)


def read_corpus(path, file_batch_size=FILE_BATCH_SIZE):
    """Read training corpus entries from a file or a folder of files.

    Each line holds an inflected form, its lemma and the number of
    occurrences, separated by tabs. Blank lines are skipped.

    Args:
        path (str): Corpus file or folder.
        file_batch_size (int): Number of lines to read in-memory at a time.

    Yields:
        CorpusEntry, one at a time.

    Raises:
        FileNotFoundError: If the path doesn't exist.
        TrainError: If a file could not be parsed.
        ValidationError: If a line has an empty token or a bad count.
    """
    for filename in get_path_files(path):
        logger.info('Reading corpus file %s', filename)
        batches = read_file_batched(filename,
                                    file_batch_size=file_batch_size,
                                    names=CORPUS_COLUMNS)
        line_nb = 0
        try:
            for batch_nb, batch_df in enumerate(batches):
                for row in batch_df.itertuples(index=False, name=None):
                    line_nb += 1
                    if not any(row):
                        continue
                    yield parse_corpus_row(row, filename, line_nb)
                logger.debug('Batch %d of %s read (%d lines so far)',
                             batch_nb, filename, line_nb)
        except CorpusError as e:
            raise TrainError(str(e)) from e
