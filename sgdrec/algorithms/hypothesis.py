"""
Hypothesis functions: turn linear combinations of factors and side
information into predictions.
"""

from enum import Enum

import numpy as np
from scipy.special import expit, softmax

from ..errors import UnsupportedOperation
from . import vectors


class HypothesisKind(Enum):
    OLS = 'ols'
    LOGISTIC = 'logistic'
    SOFTMAX = 'softmax'
    ORDINAL = 'ordinal'
    POISSON = 'poisson'

    @classmethod
    def parse(cls, kind):
        "Look up a kind from a member, a name or a value (case-insensitive)."
        if isinstance(kind, cls):
            return kind
        key = str(kind).lower()
        for member in cls:
            if key == member.value:
                return member
        raise ValueError(f'unknown hypothesis {kind}')


def _ols(lc):
    return np.array(lc, dtype=np.float64)


def _logistic(lc):
    return np.array([expit(lc[0])])


def _logistic_full(lc):
    p = expit(lc[0])
    return np.array([1 - p, p])


def _softmax(lc):
    if len(lc) < 3:
        raise ValueError('softmax needs at least 3 classes, use the logistic hypothesis for 2')
    return softmax(np.asarray(lc, dtype=np.float64))


def _ordinal(lc):
    # lc holds the K-1 cumulative logits; class probabilities are the
    # differences of adjacent cumulative probabilities
    cum = expit(np.asarray(lc, dtype=np.float64))
    return np.diff(cum, prepend=0.0, append=1.0)


def _poisson(lc):
    return np.array([np.exp(lc[0])])


_predictors = {
    HypothesisKind.OLS: (_ols, _ols),
    HypothesisKind.LOGISTIC: (_logistic, _logistic_full),
    HypothesisKind.SOFTMAX: (_softmax, _softmax),
    HypothesisKind.ORDINAL: (_ordinal, _ordinal),
    HypothesisKind.POISSON: (_poisson, _poisson),
}


class Hypothesis:
    """
    A hypothesis (link function and linear-combination rule) for one of the
    supported response distributions.

    Args:
        kind(HypothesisKind or str): the response distribution.
    """

    def __init__(self, kind):
        self.kind = HypothesisKind.parse(kind)
        self._predict, self._predict_full = _predictors[self.kind]

    @property
    def ordinal(self):
        return self.kind == HypothesisKind.ORDINAL

    def predict(self, linear_combination):
        """
        Apply the hypothesis to a linear combination (one value per class,
        or per threshold for the ordinal hypothesis).
        """
        return self._predict(linear_combination)

    def predict_full(self, linear_combination):
        """
        Like :meth:`predict`, but always return the whole class distribution.
        Logistic hypotheses return ``[1-p, p]``; OLS and Poisson return a
        single point prediction.
        """
        return self._predict_full(linear_combination)

    def linear_combination(self, cuts, alphas, betas, others=None):
        """
        Compute the linear combination for a user-item pair.

        Args:
            cuts(numpy.ndarray): the ordinal cuts (ignored by non-ordinal hypotheses).
            alphas(list): the user factor vectors, one per class.
            betas(list): the item factor vectors, one per class.
            others(list):
                ``(parameters, feature)`` pairs, where ``parameters`` is a
                per-class list of side-information parameter vectors and
                ``feature`` is the side-information vector they apply to.

        Returns:
            numpy.ndarray: one value per class, or per cut for ordinal.
        """
        if others is None:
            others = []

        if self.ordinal:
            score = vectors.dot(alphas[0], betas[0])
            for params, feature in others:
                score += vectors.dot(params[0], feature)
            return np.cumsum(np.asarray(cuts, dtype=np.float64)) - score

        if len(alphas) != len(betas):
            raise ValueError(f'{len(alphas)} user vectors but {len(betas)} item vectors')
        lc = np.zeros(len(alphas))
        for c in range(len(alphas)):
            lc[c] = vectors.dot(alphas[c], betas[c])
            for params, feature in others:
                lc[c] += vectors.dot(params[c], feature)
        return lc

    def predict_features(self, xs, thetas):
        """
        Predict from per-class feature and parameter vectors.

        Raises:
            ValueError: if the two lists have different lengths.
            UnsupportedOperation: for the ordinal hypothesis, which needs cuts.
        """
        if self.ordinal:
            raise UnsupportedOperation('ordinal hypothesis cannot predict without cuts')
        if len(xs) != len(thetas):
            raise ValueError(f'{len(xs)} feature vectors but {len(thetas)} parameter vectors')
        lc = [vectors.dot(x, t) for (x, t) in zip(xs, thetas)]
        return self.predict(lc)

    def __repr__(self):
        return f'Hypothesis({self.kind.name})'
