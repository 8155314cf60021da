#!/usr/bin/env python3
"""
Train an online factorization learner and score it.

Usage:
    run-learner.py [options] ALGO

Options:
    -d DIR, --data=DIR
        Use split data in DIR [default: data/ratings-split].
    --validation
        Score on the validation set instead of the test set.
    --params FILE
        Load parameters from FILE.
    --user-side FILE
        Load user side information from FILE.
    --item-side FILE
        Load item side information from FILE.
    --dynamic-side FILE
        Load user-item side information from FILE.
    --sep SEP
        Field separator for delimited side information files [default: ,].
    --convergence
        Score after every epoch.
    --rating-offset N
        Subtract N from every rating, e.g. 1 to turn 1-5 stars into classes 0-4.
    --user-based
        Average RMSE and MAE over users instead of over ratings.
    -s N, --seed N
        Use random seed N.
    -o FILE
        Save predictions to FILE.
    -v, --verbose
        Use verbose logging.
    ALGO
        The algorithm to run (OLS, POISSON, LOGISTIC, SOFTMAX or ORDINAL).
"""
import json
import logging
from pathlib import Path
import pandas as pd
from docopt import docopt
import seedbank

from sgdrec.algo_specs import algorithms
from sgdrec.algorithms.vectors import cardinality
from sgdrec.datasets import read_side_info, shift_ratings
from sgdrec.sideinfo import vectors_from_frame
from sgdrec.experiment import Experiment

_log = logging.getLogger('run-learner')


def load_side(opts, name, key):
    fn = opts[f'--{name}-side']
    if not fn:
        return None
    _log.info('loading %s side information from %s', name, fn)
    frame = read_side_info(fn, key, sep=opts['--sep'])
    return vectors_from_frame(frame, key)


def side_size(vecs):
    if not vecs:
        return 0
    return cardinality(next(iter(vecs.values())))


def main():
    opts = docopt(__doc__)
    level = logging.DEBUG if opts['--verbose'] else logging.INFO
    logging.basicConfig(level=level)

    if opts['--seed']:
        seedbank.initialize(int(opts['--seed']))
    elif Path('params.yaml').exists():
        seedbank.init_file('params.yaml')

    data = Path(opts['--data'])
    train = pd.read_parquet(data / 'train.parquet')
    tname = 'validation' if opts['--validation'] else 'test'
    test = pd.read_parquet(data / f'{tname}.parquet')
    _log.info('loaded %d training and %d %s ratings', len(train), len(test), tname)

    xs = load_side(opts, 'user', 'user')
    ts = load_side(opts, 'item', 'item')
    zs = load_side(opts, 'dynamic', ['user', 'item'])

    algo_name = opts['ALGO']
    _log.info('using algorithm %s', algo_name)
    algo_mod = algorithms[algo_name]
    params = {}
    pfn = opts['--params']
    if pfn:
        _log.info('using parameters from %s', pfn)
        params = json.loads(Path(pfn).read_text())
    if xs or ts or zs:
        params.update(side_info=True, user_side_size=side_size(xs),
                      item_side_size=side_size(ts), dynamic_side_size=side_size(zs))

    if params:
        algo = algo_mod.from_params(**params)
    else:
        algo = algo_mod.default()

    side_info = dict(user_side=xs, item_side=ts, dynamic_side=zs)
    rating_map = None
    if opts['--rating-offset']:
        rating_map = shift_ratings(float(opts['--rating-offset']))
    exp = Experiment(algo, train, test, epochs=algo.epochs,
                     predicts_ratings=getattr(algo_mod, 'predicts_ratings', False),
                     n_classes=algo.model.number_of_classes(),
                     see_convergence=opts['--convergence'], side_info=side_info,
                     rating_map=rating_map, user_based=opts['--user-based'])
    exp.run()

    out = opts['-o']
    if out:
        _log.info('saving predictions to %s', out)
        exp.predictions().to_parquet(out, index=False)


if __name__ == '__main__':
    main()
