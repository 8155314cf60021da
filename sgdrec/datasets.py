"""
Reading and splitting rating data.
"""

import logging
from pathlib import Path

import pandas as pd
import seedbank

_log = logging.getLogger(__name__)


def _read(path, names, sep):
    path = Path(path)
    if path.suffix == '.parquet':
        _log.info('reading %s', path)
        return pd.read_parquet(path)
    else:
        _log.info('reading delimited file %s', path)
        return pd.read_csv(path, sep=sep, header=None, names=names)


def read_ratings(path, sep=','):
    """
    Read ratings from a Parquet file, or from a delimited text file with
    ``user``, ``item`` and ``rating`` columns and no header.
    """
    return _read(path, ['user', 'item', 'rating'], sep)


def read_side_info(path, key, sep=','):
    """
    Read long-format side information from a Parquet file, or from a
    delimited text file with the key column(s), ``feature`` and ``value``.

    Args:
        key(str or list): the key column name(s).
    """
    if isinstance(key, str):
        key = [key]
    return _read(path, list(key) + ['feature', 'value'], sep)


def split_ratings(ratings, test=0.15, validation=0.10, rng_spec=None):
    """
    Randomly split ratings into train, validation and test sets.  Each rating
    goes to the test set with probability ``test``, to the validation set
    with probability ``validation``, and otherwise to the training set.

    Returns:
        tuple: the ``(train, validation, test)`` frames.
    """
    if test < 0 or validation < 0 or test + validation > 1:
        raise ValueError(f'invalid split fractions test={test}, validation={validation}')
    rng = seedbank.numpy_rng(rng_spec)
    draws = rng.uniform(size=len(ratings))
    test_mask = draws < test
    val_mask = ~test_mask & (draws < test + validation)
    train_mask = ~(test_mask | val_mask)
    _log.info('split %d ratings into %d train, %d validation, %d test',
              len(ratings), train_mask.sum(), val_mask.sum(), test_mask.sum())
    return ratings[train_mask], ratings[val_mask], ratings[test_mask]


def shift_ratings(offset):
    """
    Make a rating map that subtracts ``offset`` from every rating, e.g. 1 to
    turn 1-5 star ratings into the class labels 0-4.
    """
    def shift(ratings):
        return ratings - offset
    return shift
