# -*- coding: utf8 -*-
"""Basic utilities and helper functions."""


import logging

from os import makedirs, walk
from os.path import isfile, exists, join


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def init_logger(log_path=None, level=logging.INFO):
    """Initialize logging for command line use.

    Args:
        log_path (str): Log file to append to. Defaults to None, in which
            case log records are written to stderr.
        level (int): Logging level. Defaults to logging.INFO.
    """
    if log_path is not None:
        logging.basicConfig(filename=log_path, filemode='a',
                            format=LOG_FORMAT, level=level)
        logger.info('Logger initialized at "%s"', log_path)
    else:
        logging.basicConfig(format=LOG_FORMAT, level=level)


def get_path_files(path):
    """Returns file or files in a path.

    Args:
        path (str): File path to get files from.

    Returns:
        List of files, if provided path is a folder, otherwise file in a list.

    Raises:
        FileNotFoundError: If the path doesn't exist.
    """
    if isfile(path):
        files = [path]
    elif exists(path):
        files = list_files_in_folder(path)
    else:
        raise FileNotFoundError("Path %s doesn't exist" % path)
    return files


def create_folder(folder):
    """Creates a folder if it doesn't already exist."""
    if folder and not exists(folder):
        makedirs(folder)
        logger.info('Created folder %s', folder)


def list_files_in_folder(folder):
    """Lists all files in a folder and its subfolders.

    Args:
        folder (str): Name of the folder

    Returns:
        Sorted list of files found in the folder and/or its subfolders.
    """
    files_list = []
    for path, _, files in walk(folder):
        for name in files:
            files_list.append(join(path, name))
    return(sorted(files_list))
