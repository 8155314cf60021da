import numpy as np
from unittest.mock import create_autospec
from pytest import approx, raises

from sgdrec.algorithms.hypothesis import Hypothesis
from sgdrec.algorithms.gradient import StochasticGradient, GradientKind, cumulative_probs, indicator
from sgdrec.algorithms.vectors import dense, sparse_vector
from sgdrec.errors import UnsupportedOperation


def _theta():
    return sparse_vector(8, {0: 3, 1: 4, 5: 5, 7: 2})


def _t():
    return sparse_vector(8, {0: 1, 1: 2, 5: 4, 7: 3})


def _mock_hypothesis(prediction):
    h = create_autospec(Hypothesis, instance=True)
    h.predict.return_value = np.array(prediction)
    h.predict_features.return_value = np.array(prediction)
    return h


def test_for_hypothesis():
    assert StochasticGradient.for_hypothesis(Hypothesis('ols'), 0.1).kind == GradientKind.DEFAULT
    assert StochasticGradient.for_hypothesis(Hypothesis('poisson'), 0.1).kind == GradientKind.DEFAULT
    assert StochasticGradient.for_hypothesis(Hypothesis('logistic'), 0.1).kind == GradientKind.DEFAULT
    assert StochasticGradient.for_hypothesis(Hypothesis('softmax'), 0.1).kind == GradientKind.SOFTMAX
    assert StochasticGradient.for_hypothesis(Hypothesis('ordinal'), 0.1).kind == GradientKind.ORDINAL


def test_indicator():
    assert indicator(2, 2.0) == 1
    assert indicator(1, 2) == 0


class TestDefault:
    def test_intercept_factors(self):
        h = _mock_hypothesis([10])
        g = StochasticGradient('default', h, 0.1)
        grad = g.factor_gradient(0, 20, [dense([1, 2, 3])], [dense([3, 2, 1])], 0.01)
        assert list(grad) == approx([1.0])
        h.predict_features.assert_called_once()

    def test_intercept_unregularized(self):
        g = StochasticGradient('default', Hypothesis('ols'), 0.1)
        grad = g.gradient(0, 20, [dense([1, 2, 3])], dense([3, 2, 1]), [10], 1000)
        assert list(grad) == approx([1.0])

    def test_sparse(self):
        g = StochasticGradient('default', Hypothesis('ols'), 0.1)
        assert g.gradient(0, 20, [_theta()], _t(), [34], 0.01)[0] == approx(-1.4)
        assert g.gradient(5, 20, [_theta()], _t(), [34], 0.01)[0] == approx(-5.605)

    def test_sparse_exact_prediction(self):
        g = StochasticGradient('default', Hypothesis('ols'), 0.1)
        # only the (small) regularization remains
        assert g.gradient(5, 20, [_theta()], _t(), [20], 0.01)[0] == approx(0, abs=0.01)

    def test_logistic(self):
        g = StochasticGradient('default', Hypothesis('logistic'), 0.1)
        grad = g.gradient(1, 0, [dense([1, 2, 3])], [dense([3, 2, 1])], [0.98], 0.01)
        assert grad[0] == approx(-0.194, abs=0.01)
        grad = g.gradient(7, 0, [_theta()], _t(), [0.98], 0.01)
        assert grad[0] == approx(-0.292, abs=0.01)

    def test_poisson(self):
        g = StochasticGradient('default', Hypothesis('poisson'), 0.1)
        grad = g.gradient(2, 10, [dense([1, 2, 3])], dense([3, 2, 1]), [np.exp(10)], 0.01)
        assert grad[0] == approx(-2201.5, abs=5)
        grad = g.gradient(1, 10, [_theta()], _t(), [np.exp(3)], 0.01)
        assert grad[0] == approx(-2.012, abs=0.02)

    def test_multiple_vectors_unsupported(self):
        g = StochasticGradient('default', Hypothesis('ols'), 0.1)
        with raises(UnsupportedOperation):
            g.gradient(1, 1, [dense([1, 2]), dense([1, 2])], dense([1, 1]), [1], 0.01)

    def test_no_cuts(self):
        g = StochasticGradient('default', Hypothesis('ols'), 0.1)
        assert list(g.cuts_gradient(3, [0.1, 0.2], [1.0], 0.01)) == [0, 0]


class TestSoftmax:
    alphas = [dense([1, 2]), dense([3, 4]), dense([5, 6])]
    betas = [dense([2, 1]), dense([4, 3]), dense([6, 5])]
    prediction = [0.001, 0.001, 0.999]

    def test_factors(self):
        g = StochasticGradient('softmax', Hypothesis('softmax'), 0.1)
        grad = g.gradient(1, 0, self.alphas, self.betas, self.prediction, 0.01)
        assert grad == approx([0.0979, -0.0043, -0.5055], abs=1.0e-4)

    def test_sparse(self):
        g = StochasticGradient('softmax', Hypothesis('softmax'), 0.1)
        thetas = [sparse_vector(8, {3: 2, 7: 1}), sparse_vector(8, {3: 1, 7: 4}), sparse_vector(8, {3: -1, 7: 1})]
        t = sparse_vector(8, {3: 2, 7: -2})
        grad = g.gradient(3, 1, thetas, t, self.prediction, 0.01)
        assert grad == approx([-0.0022, 0.1988, -0.1988], abs=1.0e-4)

    def test_intercept(self):
        g = StochasticGradient('softmax', Hypothesis('softmax'), 0.1)
        grad = g.gradient(0, 2, self.betas, self.alphas, self.prediction, 0.01)
        assert grad == approx([-0.0001, -0.0001, 0.0001], abs=1.0e-6)

    def test_single_class_unsupported(self):
        g = StochasticGradient('softmax', Hypothesis('softmax'), 0.1)
        with raises(UnsupportedOperation):
            g.gradient(1, 0, [dense([1, 2])], dense([2, 1]), [1.0], 0.01)

    def test_label_out_of_range(self):
        g = StochasticGradient('softmax', Hypothesis('softmax'), 0.1)
        with raises(ValueError):
            g.gradient(1, 3, self.alphas, self.betas, self.prediction, 0.01)
        with raises(ValueError):
            g.gradient(0, -1, self.alphas, self.betas, self.prediction, 0.01)

    def test_factor_gradient(self):
        g = StochasticGradient('softmax', Hypothesis('softmax'), 0.1)
        pred = Hypothesis('softmax').predict([4, 24, 60])
        grad = g.factor_gradient(1, 0, self.alphas, self.betas, 0.01)
        assert grad[0] == approx(0.1 * (1 * (1 - pred[0]) - 0.01 * 2))


class TestOrdinal:
    def test_cumulative_probs(self):
        assert cumulative_probs([0.1, 0.4, 0.2, 0.3]) == approx([0.1, 0.5, 0.7, 1.0])

    def test_cuts(self):
        h = _mock_hypothesis([0.1, 0.2, 0.6, 0.1])
        g = StochasticGradient('ordinal', h, 1)
        grad = g.cuts_gradient(2, [0.1, 0.2, 0.1], [2, 3, 4], 0.001)
        low = (1 / 0.6) * (0.09 - 0.21)
        assert grad == approx([low - 0.0001, low - 0.0002, (1 / 0.6) * 0.09 - 0.0001])

    def test_cuts_last_class(self):
        h = _mock_hypothesis([0.1, 0.2, 0.3, 0.4])
        g = StochasticGradient('ordinal', h, 1)
        grad = g.cuts_gradient(3, [0.0, 0.0, 0.0], [2, 3, 4], 0.0)
        # F_3 = 1, so only the previous class term remains
        assert grad == approx([-(0.6 * 0.4) / 0.4] * 3)

    def test_gradient(self):
        g = StochasticGradient('ordinal', Hypothesis('ordinal'), 1)
        f = dense([2, 3])
        assert g.gradient(0, 2, [f], f, [0.3, 0.6, 0.1], 0.001)[0] == approx(1.8)
        assert g.gradient(1, 2, [f], f, [0.3, 0.6, 0.1], 0.001)[0] == approx(2.697)

    def test_label_out_of_range(self):
        g = StochasticGradient('ordinal', Hypothesis('ordinal'), 1)
        with raises(ValueError):
            g.gradient(0, 3, [dense([1])], dense([1]), [0.3, 0.6, 0.1], 0.001)

    def test_factor_gradient_unsupported(self):
        g = StochasticGradient('ordinal', Hypothesis('ordinal'), 1)
        with raises(UnsupportedOperation):
            g.factor_gradient(0, 1, [dense([1])], [dense([1])], 0.0)


def test_check_label():
    g = StochasticGradient('softmax', Hypothesis('softmax'), 0.1)
    g.check_label(4, 5)
    g.check_label(0.0, 5)
    with raises(ValueError):
        g.check_label(5, 5)
    with raises(ValueError):
        g.check_label(1.5, 5)

    g = StochasticGradient('ordinal', Hypothesis('ordinal'), 0.1)
    with raises(ValueError):
        g.check_label(-1, 5)

    g = StochasticGradient.for_hypothesis(Hypothesis('logistic'), 0.1)
    g.check_label(1, 2)
    with raises(ValueError):
        g.check_label(5, 2)

    # numeric targets are not labels
    StochasticGradient.for_hypothesis(Hypothesis('ols'), 0.1).check_label(42.5, 1)
