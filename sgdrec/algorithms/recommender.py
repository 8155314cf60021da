"""
Recommender interface around an online learner.
"""

import logging

import numpy as np
import pandas as pd

from ..errors import UnsupportedOperation
from ..sideinfo import SideInfoSetup

_log = logging.getLogger(__name__)


def score_on_target_class(distribution, target):
    "Use the score of the target class (or the point prediction) as the estimate."
    return float(distribution[target])


def most_probable_class(distribution, target):
    """
    Use the most probable class as the estimate.  Ties go to the later
    class.  The target class is ignored.
    """
    if len(distribution) == 1:
        raise UnsupportedOperation('most probable class needs a class distribution, not a point prediction')
    rev = np.asarray(distribution)[::-1]
    return int(len(rev) - 1 - np.argmax(rev))


class OnlineFactorizationRecommender:
    """
    Rating predictor and recommender backed by an online learner.

    Args:
        learner(OnlineRecommenderLearner): the learner.
        epochs(int): the number of passes :meth:`fit` makes over the ratings.
        class_index(int):
            The class whose score ranks items; defaults to the last (highest)
            class.
        strategy:
            A function ``(distribution, class_index) -> estimate`` that turns
            a predicted distribution into a rating estimate.
    """

    def __init__(self, learner, *, epochs=1, class_index=None, strategy=score_on_target_class):
        self.learner = learner
        self.epochs = epochs
        if class_index is None:
            class_index = learner.model.number_of_classes() - 1
        self.class_index = class_index
        self.strategy = strategy
        self.rated_ = {}

    @property
    def model(self):
        return self.learner.model

    def prepare(self, ratings, *, user_side=None, item_side=None, dynamic_side=None):
        """
        Initialize factors for every user and item in the ratings, and attach
        side information.

        Args:
            ratings(pandas.DataFrame): ratings with ``user``, ``item`` and ``rating`` columns.
            user_side(dict): user side information vectors, keyed by user.
            item_side(dict): item side information vectors, keyed by item.
            dynamic_side(dict): dynamic side information vectors, keyed by ``(user, item)``.
        """
        for u in ratings['user'].unique():
            self.learner.initialize_user_if_needed(u)
        for i in ratings['item'].unique():
            self.learner.initialize_item_if_needed(i)

        setup = SideInfoSetup(self.model)
        if user_side:
            setup.set_xs(user_side)
        if item_side:
            setup.set_ts(item_side)
        if dynamic_side:
            setup.set_zs(dynamic_side)

        _log.info('prepared model with %d users and %d items', self.model.n_users, self.model.n_items)
        return self

    def fit(self, ratings, **kwargs):
        """
        Train on a set of ratings.  Keyword arguments are passed to :meth:`prepare`.
        """
        self.prepare(ratings, **kwargs)
        for epoch in range(self.epochs):
            _log.info('training epoch %d of %d', epoch + 1, self.epochs)
            self.partial_fit(ratings)
        return self

    def partial_fit(self, ratings):
        "Make one pass over a set of ratings."
        for u, i, r in zip(ratings['user'], ratings['item'], ratings['rating']):
            self.add_rating(u, i, r)
        return self

    def add_rating(self, user, item, rating):
        self.rated_.setdefault(user, set()).add(item)
        self.learner.train(user, item, rating)

    def predict_all(self, user, item):
        "Get the full predicted distribution for a user-item pair."
        return self.learner.predict_full(user, item)

    def estimate_preference(self, user, item):
        return self.strategy(self.predict_all(user, item), self.class_index)

    def predict_for_user(self, user, items):
        """
        Estimate a user's preferences for items.  Unknown users and items get
        no estimate (NaN).

        Returns:
            pandas.Series: the estimates, indexed by item.
        """
        if not self.model.check_user(user):
            return pd.Series(np.nan, index=items)

        scores = [self.estimate_preference(user, i) if self.model.check_item(i) else np.nan
                  for i in items]
        return pd.Series(scores, index=items)

    def recommend(self, user, n=10, candidates=None):
        """
        Recommend the top ``n`` items for a user, ranked on the score of the
        target class.  Items the user has rated are excluded.

        Returns:
            pandas.DataFrame: the ``item`` and ``score`` of each recommendation.
        """
        if candidates is None:
            candidates = self.model.item_ids()
        rated = self.rated_.get(user, set())
        candidates = [i for i in candidates if i not in rated and self.model.check_item(i)]

        if not self.model.check_user(user) or not candidates:
            return pd.DataFrame({'item': pd.Series([], dtype='object'), 'score': pd.Series([], dtype='float64')})

        scores = [score_on_target_class(self.predict_all(user, i), self.class_index) for i in candidates]
        recs = pd.DataFrame({'item': candidates, 'score': scores})
        recs = recs.sort_values('score', ascending=False, kind='stable')
        return recs.head(n).reset_index(drop=True)

    def __str__(self):
        return 'OnlineFactorizationRecommender({}, epochs={})'.format(self.learner.hypothesis.kind.name, self.epochs)
