# -*- coding: utf8 -*-
"""Training a SuffixModel from file(s)."""


import argparse
import logging

from suflem.data_utils import FILE_BATCH_SIZE
from suflem.model import SuffixModel, DEFAULT_MAX_SUFFIX_SIZE
from suflem.utils import init_logger


logger = logging.getLogger(__name__)

parser = argparse.ArgumentParser('Model training')

# Path params (required)
parser.add_argument("--model-path", required=True,
                    type=str, action='store',
                    help='Model save path after training')
parser.add_argument("--train-data-path", required=True,
                    type=str, action='store',
                    help='Training data folder or file, with lines of '
                    'tab separated inflected form, lemma and count')

# Model params (optional)
parser.add_argument("--max-suffix-size", default=DEFAULT_MAX_SUFFIX_SIZE,
                    type=int, action='store',
                    help='Maximum suffix size to store, between 1 and 1024')
parser.add_argument("--no-trim", default=False,
                    action='store_true',
                    help='Save the model without trimming it. An untrimmed '
                    'model can be trained further')

# Training params (optional)
parser.add_argument("--file-batch-size", default=FILE_BATCH_SIZE,
                    type=int, action='store',
                    help='Number of lines to read in-memory at a time')

# Logging params (optional)
parser.add_argument("--log-path", default=None,
                    type=str, action='store',
                    help='Log file to append to, defaults to stderr')
parser.add_argument("--verbose", default=False,
                    action='store_true',
                    help='Log debug messages')


def train_model(args):
    """Train, trim and save a SuffixModel."""
    logger.info('Training model from dataset %s', args.train_data_path)
    model = SuffixModel.train(args.train_data_path,
                              max_suffix_size=args.max_suffix_size,
                              file_batch_size=args.file_batch_size)
    if not args.no_trim:
        logger.info('Trimming model')
        model.trim()
    model.save(args.model_path)
    return model


def main(argv=None):
    args = parser.parse_args(argv)
    init_logger(args.log_path,
                level=logging.DEBUG if args.verbose else logging.INFO)
    train_model(args)


if __name__=='__main__':
    main()
