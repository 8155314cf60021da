"""
Online learners that update a :class:`FeatureVectorModel` one rating at a
time with stochastic gradient descent.
"""

import logging
from typing import NamedTuple

import numpy as np

from .model import USER_INTERCEPT, ITEM_INTERCEPT
from . import vectors

_log = logging.getLogger(__name__)

# smallest cut increment kept by clamping; a zero increment gives a class no probability mass
MIN_CUT_INCREMENT = 1.0e-6


class LambdaTable(NamedTuple):
    """
    Regularization rates for a parameter family.  The reserved bias slots
    get their own rate; everything else uses the default.
    """
    default: float
    bias: float = 0.0
    bias_indices: tuple = ()

    def rate(self, index):
        return self.bias if index in self.bias_indices else self.default


class OnlineRecommenderLearner:
    """
    Base class for the online learners.

    A training step fetches the parameters for a user-item pair, computes the
    linear combination and prediction, computes updates for every parameter
    family, and then writes the new parameters back.  Nothing is written
    until all updates have been computed, so a failed step leaves the model
    untouched.  The target is checked before anything is fetched, so a bad
    target does not create factors for a new user or item either.

    Args:
        gradient(StochasticGradient): the gradient.
        hypothesis(Hypothesis): the hypothesis.
        model(FeatureVectorModel): the parameter store.
        cuts_lambda(float): the regularization rate for the ordinal cuts.
        clamp_cuts(bool):
            Whether to keep the cut increments (all cuts but the first)
            positive after each update, so the thresholds stay ordered.
    """

    def __init__(self, gradient, hypothesis, model, *, cuts_lambda=0.0, clamp_cuts=True):
        self.gradient = gradient
        self.hypothesis = hypothesis
        self.model = model
        self.cuts_lambda = cuts_lambda
        self.clamp_cuts = clamp_cuts

    def initialize_user_if_needed(self, user):
        self.model.initialize_user_if_needed(user)

    def initialize_item_if_needed(self, item):
        self.model.initialize_item_if_needed(item)

    def train(self, user, item, y):
        "Learn from a single observation."
        raise NotImplementedError()

    def linear_combination(self, user, item):
        raise NotImplementedError()

    def predict(self, user, item):
        return self.hypothesis.predict(self.linear_combination(user, item))

    def predict_full(self, user, item):
        return self.hypothesis.predict_full(self.linear_combination(user, item))

    def updated_cuts(self, y, cuts, lc):
        "Compute new cuts from the current ones."
        cuts = np.asarray(cuts, dtype=np.float64)
        new = cuts + self.gradient.cuts_gradient(y, cuts, lc, self.cuts_lambda)
        if self.clamp_cuts and len(new) > 1:
            new[1:] = np.maximum(new[1:], MIN_CUT_INCREMENT)
        return new

    def updated_terms(self, params, features, y, prediction, lambdas, except_index=None):
        """
        Compute new parameter vectors.  Only the indices where the feature
        vector (or any of the per-class feature vectors) is nonzero are
        updated; the rest are copied unchanged.

        Args:
            params(list): the current parameter vectors, one per class.
            features: the paired feature vector, or one per class.
            y(float): the observed value.
            prediction(numpy.ndarray): the current prediction.
            lambdas(LambdaTable): the regularization rates.
            except_index(int): an index to leave unchanged.

        Returns:
            list: the new parameter vectors.
        """
        if isinstance(features, (list, tuple)):
            fvs = features
        else:
            fvs = [features]
        for p in params:
            for f in fvs:
                if vectors.cardinality(p) != vectors.cardinality(f):
                    raise ValueError('parameter cardinality {} does not match feature cardinality {}'.format(
                        vectors.cardinality(p), vectors.cardinality(f)))

        indices = np.unique(np.concatenate([vectors.nonzero_indices(f) for f in fvs]))
        new = [vectors.copy(p) for p in params]
        for i in indices:
            if i == except_index:
                continue
            grad = self.gradient.gradient(i, y, params, features, prediction, lambdas.rate(i))
            for c, p in enumerate(params):
                vectors.put(new[c], i, vectors.get(p, i) + grad[c])
        return new


class FactorLearner(OnlineRecommenderLearner):
    """
    Learner that only uses the user and item factors (and the ordinal cuts).
    Each side's factors serve as the features for the other side.

    Args:
        bias_lambda(float): the regularization rate for the bias slots.
        factor_lambda(float): the regularization rate for the latent factors.
    """

    def __init__(self, gradient, hypothesis, model, *, bias_lambda=0.0, factor_lambda=0.0, **kwargs):
        super().__init__(gradient, hypothesis, model, **kwargs)
        self.bias_lambda = bias_lambda
        self.factor_lambda = factor_lambda
        self.factor_lambdas = LambdaTable(factor_lambda, bias_lambda, (USER_INTERCEPT, ITEM_INTERCEPT))
        _log.info('factor learner with %s, bias lambda=%g, factor lambda=%g',
                  hypothesis, bias_lambda, factor_lambda)

    def linear_combination(self, user, item):
        cuts = self.model.get_cuts()
        alphas = self.model.get_alphas(user)
        betas = self.model.get_betas(item)
        return self.hypothesis.linear_combination(cuts, alphas, betas)

    def train(self, user, item, y):
        self.gradient.check_label(y, self.model.number_of_classes())
        cuts = self.model.get_cuts()
        alphas = self.model.get_alphas(user)
        betas = self.model.get_betas(item)

        lc = self.hypothesis.linear_combination(cuts, alphas, betas)
        prediction = self.hypothesis.predict(lc)
        _log.debug('user %s, item %s: y=%s, prediction=%s', user, item, y, prediction)

        new_cuts = self.updated_cuts(y, cuts, lc)
        new_alphas = self.updated_terms(alphas, betas, y, prediction, self.factor_lambdas, USER_INTERCEPT)
        new_betas = self.updated_terms(betas, alphas, y, prediction, self.factor_lambdas, ITEM_INTERCEPT)

        self.model.set_cuts(new_cuts)
        self.model.set_alphas(user, new_alphas)
        self.model.set_betas(item, new_betas)


class SideInfoLearner(FactorLearner):
    """
    Learner that also uses user (``x``), item (``t``) and dynamic user-item
    (``z``) side information.  Users get parameters for ``t`` and ``z``;
    items get parameters for ``x`` and ``z``.  Side-information parameters
    have no bias slots.

    Args:
        user_side_lambda(float): the regularization rate for the item parameters on ``x``.
        item_side_lambda(float): the regularization rate for the user parameters on ``t``.
        dynamic_side_lambda(float): the regularization rate for parameters on ``z``.
    """

    def __init__(self, gradient, hypothesis, model, *, user_side_lambda=0.0, item_side_lambda=0.0,
                 dynamic_side_lambda=0.0, **kwargs):
        super().__init__(gradient, hypothesis, model, **kwargs)
        self.user_side_lambdas = LambdaTable(user_side_lambda)
        self.item_side_lambdas = LambdaTable(item_side_lambda)
        self.dynamic_side_lambdas = LambdaTable(dynamic_side_lambda)
        _log.info('side info lambdas: user=%g, item=%g, dynamic=%g',
                  user_side_lambda, item_side_lambda, dynamic_side_lambda)

    def _fetch(self, user, item):
        x = self.model.get_x(user)
        t = self.model.get_t(item)
        z = self.model.get_z(user, item)
        thetas_t = self.model.get_thetas_on_t(user)
        thetas_z = self.model.get_thetas_on_z(user)
        gammas_x = self.model.get_gammas_on_x(item)
        gammas_z = self.model.get_gammas_on_z(item)
        return x, t, z, thetas_t, thetas_z, gammas_x, gammas_z

    def linear_combination(self, user, item):
        cuts = self.model.get_cuts()
        alphas = self.model.get_alphas(user)
        betas = self.model.get_betas(item)
        x, t, z, thetas_t, thetas_z, gammas_x, gammas_z = self._fetch(user, item)
        others = [(thetas_t, t), (thetas_z, z), (gammas_x, x), (gammas_z, z)]
        return self.hypothesis.linear_combination(cuts, alphas, betas, others)

    def train(self, user, item, y):
        self.gradient.check_label(y, self.model.number_of_classes())
        cuts = self.model.get_cuts()
        alphas = self.model.get_alphas(user)
        betas = self.model.get_betas(item)
        x, t, z, thetas_t, thetas_z, gammas_x, gammas_z = self._fetch(user, item)

        others = [(thetas_t, t), (thetas_z, z), (gammas_x, x), (gammas_z, z)]
        lc = self.hypothesis.linear_combination(cuts, alphas, betas, others)
        prediction = self.hypothesis.predict(lc)
        _log.debug('user %s, item %s: y=%s, prediction=%s', user, item, y, prediction)

        new_cuts = self.updated_cuts(y, cuts, lc)
        new_alphas = self.updated_terms(alphas, betas, y, prediction, self.factor_lambdas, USER_INTERCEPT)
        new_betas = self.updated_terms(betas, alphas, y, prediction, self.factor_lambdas, ITEM_INTERCEPT)
        new_thetas_t = self.updated_terms(thetas_t, t, y, prediction, self.item_side_lambdas)
        new_thetas_z = self.updated_terms(thetas_z, z, y, prediction, self.dynamic_side_lambdas)
        new_gammas_x = self.updated_terms(gammas_x, x, y, prediction, self.user_side_lambdas)
        new_gammas_z = self.updated_terms(gammas_z, z, y, prediction, self.dynamic_side_lambdas)

        self.model.set_cuts(new_cuts)
        self.model.set_alphas(user, new_alphas)
        self.model.set_betas(item, new_betas)
        self.model.set_thetas_on_t(user, new_thetas_t)
        self.model.set_thetas_on_z(user, new_thetas_z)
        self.model.set_gammas_on_x(item, new_gammas_x)
        self.model.set_gammas_on_z(item, new_gammas_z)
