"""
Train-and-evaluate experiments.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from . import evaluation

_log = logging.getLogger(__name__)


@dataclass
class Experiment:
    """
    Train a recommender for a number of epochs and score it on test data.

    Rating predictors are scored with RMSE and MAE; class predictors with
    per-class precision and recall, averaged over the classes.  With
    ``user_based``, RMSE and MAE are computed per user and then averaged.

    ``rating_map``, if given, is applied to the ``rating`` column of both the
    training and the test data before anything else; use it to turn raw
    ratings into class labels (see :func:`sgdrec.datasets.shift_ratings`).
    """
    recommender: object
    train: pd.DataFrame
    test: pd.DataFrame
    epochs: int = 1
    predicts_ratings: bool = True
    n_classes: int = 1
    see_convergence: bool = False
    side_info: dict = field(default_factory=dict)
    rating_map: Optional[Callable] = None
    user_based: bool = False

    def __post_init__(self):
        if self.rating_map is not None:
            self.train = self.train.assign(rating=self.rating_map(self.train['rating']))
            self.test = self.test.assign(rating=self.rating_map(self.test['rating']))

    def train_model(self):
        self.recommender.prepare(self.train, **self.side_info)
        for epoch in tqdm(range(self.epochs), desc='epochs', leave=False):
            self.recommender.partial_fit(self.train)
            if self.see_convergence:
                score = self.score()
                _log.info('epoch %d: %s', epoch + 1,
                          ', '.join(f'{k}={v:.4f}' for (k, v) in score.items()))

    def predictions(self):
        "Get the test ratings with a ``prediction`` column."
        parts = []
        for user, udf in self.test.groupby('user', sort=False):
            preds = self.recommender.predict_for_user(user, udf['item'])
            parts.append(udf.assign(prediction=preds.values))
        if parts:
            return pd.concat(parts)
        else:
            return self.test.assign(prediction=np.nan)

    def score(self):
        preds = self.predictions()
        missing = preds['prediction'].isna()
        if missing.any():
            _log.debug('%d test ratings have no prediction', missing.sum())
        preds = preds[~missing]

        if self.predicts_ratings and self.user_based:
            return {
                'RMSE': evaluation.user_scores(preds, evaluation.rmse).mean(),
                'MAE': evaluation.user_scores(preds, evaluation.mae).mean(),
            }
        elif self.predicts_ratings:
            return {
                'RMSE': evaluation.rmse(preds['prediction'], preds['rating']),
                'MAE': evaluation.mae(preds['prediction'], preds['rating']),
            }
        else:
            pr = evaluation.class_precision_recall(preds, self.n_classes)
            return {
                'precision': pr['precision'].mean(),
                'recall': pr['recall'].mean(),
            }

    def run(self):
        "Train the model and score it."
        self.train_model()
        score = self.score()
        for k, v in score.items():
            _log.info('%s: %.4f', k, v)
        return score
