# -*- coding: utf8 -*-
"""Lemmatization with a trained SuffixModel."""


import argparse
import logging
import sys

from os.path import dirname

import numpy as np

from suflem.codepoints import DecodeError, encode, decode
from suflem.data_utils import FILE_BATCH_SIZE, read_file_batched
from suflem.model import load_model
from suflem.utils import create_folder, init_logger


logger = logging.getLogger(__name__)

parser = argparse.ArgumentParser('Model decoding')

# Path parameters (required)
parser.add_argument("--model-path", required=True,
                    type=str, action='store',
                    help='Path to a trained model')

# Path parameters (optional)
parser.add_argument("--source-data-path", default=None,
                    type=str, action='store',
                    help='Tab separated file with words to lemmatize in the '
                    'first column, and optionally their lemmas and counts '
                    'in the next ones. Whitespace separated words are read '
                    'from stdin if not given')
parser.add_argument("--decoded-data-path", default=None,
                    type=str, action='store',
                    help='Output file for lemmatized words, defaults to '
                    'stdout')

# Decoder parameters (optional)
parser.add_argument("--flush", default=False,
                    action='store_true',
                    help='Flush the output after each lemmatized word')
parser.add_argument("--file-batch-size", default=FILE_BATCH_SIZE,
                    type=int, action='store',
                    help='Number of rows to read in-memory at a time')

# Logging parameters (optional)
parser.add_argument("--log-path", default=None,
                    type=str, action='store',
                    help='Log file to append to, defaults to stderr')
parser.add_argument("--verbose", default=False,
                    action='store_true',
                    help='Log debug messages')


def lemmatize_token(model, token, token_nb=None):
    """Lemmatize a token, returning it unchanged if it can't be decoded."""
    try:
        return model.lemmatize(token)
    except DecodeError as e:
        logger.warning('Could not lemmatize token %s (%r): %s',
                       token_nb, token, e)
        return token


def write_line(fout, *fields):
    fout.write(encode("\t".join(fields) + '\n'))


def decode_tokens(model, fin, fout, flush=False):
    """Lemmatize whitespace separated tokens.

    Args:
        model (SuffixModel): Model to lemmatize with.
        fin: Binary input stream.
        fout: Binary output stream, one lemma per line.
        flush (bool): Flush fout after each line. Defaults to False.

    Returns:
        Number of lemmatized tokens.
    """
    token_nb = 0
    for line in fin:
        # ascii whitespace only, other separators stay inside tokens
        for token in map(decode, line.split()):
            token_nb += 1
            write_line(fout, lemmatize_token(model, token, token_nb))
            if flush:
                fout.flush()
    fout.flush()
    return token_nb


def row_weight(count, line_nb, filename):
    """Weight of a gold row, zero with a warning if the count is invalid."""
    try:
        weight = int(count)
    except ValueError:
        weight = -1
    if weight < 0:
        logger.warning('Invalid count %r on line %d of %s, weighting it 0',
                       count, line_nb, filename)
        return 0
    return weight


def decode_file(model, filename, fout, file_batch_size=FILE_BATCH_SIZE,
                flush=False):
    """Lemmatize the first column of a tab separated file.

    With a single column, 'source' and 'prediction' columns are written.
    With two or three columns (inflected form, lemma and optionally count),
    the 'target' column is written as well and accuracy is computed.

    Args:
        model (SuffixModel): Model to lemmatize with.
        filename (str): Tab separated file to lemmatize.
        fout: Binary output stream.
        file_batch_size (int): Number of rows to read in-memory at a time.
        flush (bool): Flush fout after each line. Defaults to False.

    Returns:
        Dictionary with the number of lemmatized words, and 'accuracy' and
        'weighted_accuracy' when targets (and valid counts) are present.

    Raises:
        ValueError: If the number of columns is not in [1,2,3].
    """
    correct = []
    weights = []
    n_cols = None
    word_nb = 0
    line_nb = 0
    for batch_nb, batch_df in enumerate(
            read_file_batched(filename, file_batch_size=file_batch_size)):

        if batch_nb == 0:
            n_cols = batch_df.shape[1]
            if n_cols not in [1, 2, 3]:
                raise ValueError("Number of columns found %d not in [1,2,3]" \
                                 % n_cols)
            header = ['source', 'target', 'prediction'] if n_cols > 1 \
                        else ['source', 'prediction']
            write_line(fout, *header)

        for row in batch_df.itertuples(index=False, name=None):
            line_nb += 1
            source = row[0]
            if not source:
                continue
            word_nb += 1
            prediction = lemmatize_token(model, source, word_nb)
            if n_cols == 1:
                write_line(fout, source, prediction)
            else:
                write_line(fout, source, row[1], prediction)
                correct.append(prediction == row[1])
                if n_cols == 3:
                    weights.append(row_weight(row[2], line_nb, filename))
            if flush:
                fout.flush()

        logger.debug('Batch number %d lemmatized (%d words)', batch_nb, word_nb)

    fout.flush()
    results = {'words': word_nb}
    if len(correct) > 0:
        correct = np.array(correct, dtype=np.float64)
        results['accuracy'] = float(np.mean(correct))
        if sum(weights) > 0:
            results['weighted_accuracy'] = float(
                np.average(correct, weights=np.array(weights)))
    return results


def decode_model(args):
    """Lemmatize stdin or a file with a saved model."""
    model = load_model(args.model_path)

    if args.decoded_data_path is not None:
        create_folder(dirname(args.decoded_data_path))
        fout = open(args.decoded_data_path, 'wb')
    else:
        fout = sys.stdout.buffer

    try:
        if args.source_data_path is None:
            n_tokens = decode_tokens(model, sys.stdin.buffer, fout,
                                     flush=args.flush)
            logger.info('Lemmatized %d tokens', n_tokens)
        else:
            results = decode_file(model, args.source_data_path, fout,
                                  file_batch_size=args.file_batch_size,
                                  flush=args.flush)
            logger.info('Lemmatized %s: %s', args.source_data_path, results)
    finally:
        if fout is not sys.stdout.buffer:
            fout.close()


def main(argv=None):
    args = parser.parse_args(argv)
    init_logger(args.log_path,
                level=logging.DEBUG if args.verbose else logging.INFO)
    decode_model(args)


if __name__=='__main__':
    main()
