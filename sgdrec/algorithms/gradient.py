"""
Stochastic gradients of the regularized log-likelihood.

Each gradient is computed for a single parameter index at a time, and
returns one (learning-rate scaled) update per class.  Index 0 is the
intercept and is never regularized.
"""

import logging
from enum import Enum

import numpy as np

from ..errors import UnsupportedOperation
from .hypothesis import HypothesisKind
from . import vectors

_log = logging.getLogger(__name__)


class GradientKind(Enum):
    DEFAULT = 'default'
    SOFTMAX = 'softmax'
    ORDINAL = 'ordinal'


_gradient_kinds = {
    HypothesisKind.OLS: GradientKind.DEFAULT,
    HypothesisKind.LOGISTIC: GradientKind.DEFAULT,
    HypothesisKind.POISSON: GradientKind.DEFAULT,
    HypothesisKind.SOFTMAX: GradientKind.SOFTMAX,
    HypothesisKind.ORDINAL: GradientKind.ORDINAL,
}


def indicator(i, y):
    "1 if class ``i`` is the observed label ``y``, 0 otherwise."
    return 1.0 if i == int(y) else 0.0


def cumulative_probs(prediction):
    "Prefix sums of a class distribution."
    return np.cumsum(np.asarray(prediction, dtype=np.float64))


def _class_features(feature, n):
    # a single feature vector is shared by all classes
    if isinstance(feature, (list, tuple)):
        if len(feature) != n:
            raise ValueError(f'{len(feature)} feature vectors for {n} parameter vectors')
        return feature
    else:
        return [feature] * n


class StochasticGradient:
    """
    A stochastic gradient for one of the supported hypotheses.

    Args:
        kind(GradientKind or str): the gradient rule.
        hypothesis(Hypothesis):
            The hypothesis; used by the ordinal cuts gradient and by
            :meth:`factor_gradient`.
        learning_rate(float): the learning rate that scales every update.
    """

    def __init__(self, kind, hypothesis, learning_rate):
        if not isinstance(kind, GradientKind):
            kind = GradientKind(str(kind).lower())
        self.kind = kind
        self.hypothesis = hypothesis
        self.learning_rate = learning_rate
        _log.info('%s gradient with learning rate %g', kind.name.lower(), learning_rate)

    @classmethod
    def for_hypothesis(cls, hypothesis, learning_rate):
        "Create the gradient that matches a hypothesis."
        return cls(_gradient_kinds[hypothesis.kind], hypothesis, learning_rate)

    def gradient(self, index, y, parameter, feature, prediction, lam):
        """
        Compute the update for one parameter index.

        Args:
            index(int): the parameter index.
            y(float): the observed value (or class label).
            parameter(list): the parameter vectors, one per class.
            feature:
                The feature vector paired with the parameters, or a list of
                them with one per class.
            prediction(numpy.ndarray): the current prediction.
            lam(float): the regularization rate for this index.

        Returns:
            numpy.ndarray: the update for each parameter vector.
        """
        features = _class_features(feature, len(parameter))
        if self.kind == GradientKind.DEFAULT:
            return self._default(index, y, parameter, features, prediction, lam)
        elif self.kind == GradientKind.SOFTMAX:
            return self._softmax(index, y, parameter, features, prediction, lam)
        else:
            return self._ordinal(index, y, parameter, features, prediction, lam)

    def factor_gradient(self, index, y, alphas, betas, lam):
        """
        Compute the update for a user factor index, predicting from the
        factors themselves.
        """
        if self.kind == GradientKind.ORDINAL:
            raise UnsupportedOperation('ordinal gradients need cuts to predict')
        prediction = self.hypothesis.predict_features(alphas, betas)
        return self.gradient(index, y, alphas, betas, prediction, lam)

    def cuts_gradient(self, y, cuts, linear_combination, lam):
        """
        Compute the update for the ordinal cuts.  Non-ordinal gradients have
        no cuts, so their update is all zeros.
        """
        cuts = np.asarray(cuts, dtype=np.float64)
        if self.kind != GradientKind.ORDINAL:
            return np.zeros(len(cuts))

        probs = self.hypothesis.predict(linear_combination)
        cum = cumulative_probs(probs)
        c = self._label(y, probs)
        p_c = probs[c]
        d_c = cum[c] * (1 - cum[c])
        d_prev = cum[c-1] * (1 - cum[c-1]) if c > 0 else 0.0

        grad = np.zeros(len(cuts))
        grad[:c] = (d_c - d_prev) / p_c
        if c != len(linear_combination):
            grad[c] = d_c / p_c

        return self.learning_rate * (grad - lam * cuts)

    def check_label(self, y, n_classes):
        """
        Check that an observed value is usable as a training target: a class
        index below ``n_classes`` for softmax and ordinal gradients, and a
        value in [0, 1] for the logistic hypothesis.

        Raises:
            ValueError: if the value is out of range.
        """
        if self.kind != GradientKind.DEFAULT:
            if y != int(y) or int(y) < 0 or int(y) >= n_classes:
                raise ValueError(f'label {y} outside of {n_classes} classes')
        elif self.hypothesis.kind == HypothesisKind.LOGISTIC and not 0 <= y <= 1:
            raise ValueError(f'logistic target {y} outside of [0, 1]')

    def _label(self, y, prediction):
        c = int(y)
        if c < 0 or c >= len(prediction):
            raise ValueError(f'label {y} outside of {len(prediction)} classes')
        return c

    def _default(self, index, y, parameter, features, prediction, lam):
        if len(parameter) != 1:
            raise UnsupportedOperation(f'default gradient needs 1 parameter vector, got {len(parameter)}')
        err = y - prediction[0]
        if index == 0:
            g = err
        else:
            g = vectors.get(features[0], index) * err - lam * vectors.get(parameter[0], index)
        return np.array([self.learning_rate * g])

    def _softmax(self, index, y, parameter, features, prediction, lam):
        if len(parameter) == 1:
            raise UnsupportedOperation('softmax gradient needs more than one class')
        label = self._label(y, prediction)
        grad = np.zeros(len(parameter))
        for c in range(len(parameter)):
            err = indicator(c, label) - prediction[c]
            if index == 0:
                grad[c] = err
            else:
                grad[c] = vectors.get(features[c], index) * err - lam * vectors.get(parameter[c], index)
        return self.learning_rate * grad

    def _ordinal(self, index, y, parameter, features, prediction, lam):
        cum = cumulative_probs(prediction)
        c = self._label(y, prediction)
        f = vectors.get(features[0], index)
        d_c = cum[c] * (1 - cum[c]) * -f
        d_prev = cum[c-1] * (1 - cum[c-1]) * -f if c > 0 else 0.0
        g = (d_c - d_prev) / prediction[c]
        if index != 0:
            g -= lam * vectors.get(parameter[0], index)
        return np.array([self.learning_rate * g])

    def __repr__(self):
        return f'StochasticGradient({self.kind.name}, lr={self.learning_rate})'
