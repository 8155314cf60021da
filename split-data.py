#!/usr/bin/env python3
"""
Split rating data into training, validation and test sets.

Usage:
    split-data.py [options] FILE

Options:
    -o DIR, --output=DIR
        Write the split to DIR [default: data/ratings-split].
    --sep SEP
        Field separator for delimited rating files [default: ,].
    --test FRAC
        Put FRAC of the ratings in the test set [default: 0.15].
    --validation FRAC
        Put FRAC of the ratings in the validation set [default: 0.10].
    -s N, --seed N
        Use random seed N.
    FILE
        The ratings (Parquet, or delimited user, item, rating).
"""
import logging
from pathlib import Path
from docopt import docopt
import seedbank

from sgdrec.datasets import read_ratings, split_ratings

_log = logging.getLogger('split-data')


def main(args):
    logging.basicConfig(level=logging.INFO)
    if args['--seed']:
        seedbank.initialize(int(args['--seed']))
    elif Path('params.yaml').exists():
        seedbank.init_file('params.yaml')

    ratings = read_ratings(args['FILE'], sep=args['--sep'])
    train, val, test = split_ratings(ratings, float(args['--test']), float(args['--validation']))

    split = Path(args['--output'])
    _log.info('saving to %s', split)
    split.mkdir(parents=True, exist_ok=True)
    train.to_parquet(split / 'train.parquet', index=False)
    val.to_parquet(split / 'validation.parquet', index=False)
    test.to_parquet(split / 'test.parquet', index=False)


if __name__ == '__main__':
    args = docopt(__doc__)
    main(args)
