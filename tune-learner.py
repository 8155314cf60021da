#!/usr/bin/env python3
"""
Tune hyperparameters for a learner by random search.

Usage:
    tune-learner.py [options] ALGO DIR

Options:
    -v, --verbose
        Increase logging verbosity.
    -r FILE, --record=FILE
        Record individual points to FILE.
    -o FILE
        Save parameters to FILE.
    -n N, --num-points=N
        Test N points in hyperparameter space [default: 60].
    -s N, --seed N
        Use random seed N.
    --rating-offset N
        Subtract N from every rating, e.g. 1 to turn 1-5 stars into classes 0-4.
    --points-only
        Print the points that would be used, without testing.
    ALGO
        The algorithm to tune.
    DIR
        The split data directory; points are scored on its validation set.
"""

import sys
from pathlib import Path
import logging
import json
import csv

from docopt import docopt
import pandas as pd
import numpy as np
import seedbank

from sgdrec import algo_specs
from sgdrec.datasets import shift_ratings
from sgdrec.experiment import Experiment

_log = logging.getLogger('tune-learner')


def sample(space, state):
    "Sample a single point from a search space."
    return {
        name: np.asarray(dist.rvs(random_state=state)).item()
        for (name, dist) in space
    }


def evaluate(algo_mod, train, test, point, rating_map=None):
    "Evaluate a learner at a point."
    algo = algo_mod.from_params(**point)
    _log.info('evaluating %s', algo)
    exp = Experiment(algo, train, test, epochs=algo.epochs,
                     predicts_ratings=getattr(algo_mod, 'predicts_ratings', False),
                     n_classes=algo.model.number_of_classes(), rating_map=rating_map)
    return exp.run()


def main(args):
    level = logging.DEBUG if args['--verbose'] else logging.INFO
    logging.basicConfig(level=level, stream=sys.stderr)

    if args['--seed']:
        seedbank.initialize(int(args['--seed']))
    elif Path('params.yaml').exists():
        seedbank.init_file('params.yaml')

    algo_name = args['ALGO']
    _log.info('loading algorithm %s', algo_name)
    algo_mod = algo_specs.algorithms[algo_name]
    if getattr(algo_mod, 'predicts_ratings', False):
        metric, maximize = 'RMSE', False
    else:
        metric, maximize = 'recall', True

    data = Path(args['DIR'])
    _log.info('loading data from %s', data)
    train = pd.read_parquet(data / 'train.parquet')
    test = pd.read_parquet(data / 'validation.parquet')

    rating_map = None
    if args['--rating-offset']:
        rating_map = shift_ratings(float(args['--rating-offset']))

    state = seedbank.numpy_random_state()

    record_fn = args['--record']
    if record_fn:
        rcols = [name for (name, _dist) in algo_mod.space]
        rcols += ['RMSE', 'MAE'] if metric == 'RMSE' else ['precision', 'recall']
        recfile = open(record_fn, 'w')
        record = csv.DictWriter(recfile, rcols)
        record.writeheader()
    else:
        record = None

    npts = int(args['--num-points'])
    _log.info('evaluating at %d points', npts)
    points = []
    for i in range(npts):
        point = sample(algo_mod.space, state)
        _log.info('point %d: %s', i, point)
        if args['--points-only']:
            continue

        res = evaluate(algo_mod, train, test, point, rating_map)
        _log.info('%s: %s=%.4f', point, metric, res[metric])
        point.update(res)
        points.append(point)
        if record:
            record.writerow(point)
            recfile.flush()

    if record:
        recfile.close()

    if not points:
        return

    points = sorted(points, key=lambda p: p[metric], reverse=maximize)
    best_point = points[0]
    _log.info('finished with %s %.3f', metric, best_point[metric])
    for p, v in best_point.items():
        _log.info('best %s: %s', p, v)

    fn = args['-o']
    if fn:
        _log.info('saving params to %s', fn)
        Path(fn).write_text(json.dumps(best_point))


if __name__ == '__main__':
    args = docopt(__doc__)
    main(args)
