import numpy as np
from pytest import mark

from sgdrec.algo_specs import algorithms
from sgdrec.algorithms.recommender import OnlineFactorizationRecommender


@mark.parametrize('name', sorted(algorithms.keys()))
def test_default(name):
    algo = algorithms[name].default()
    assert isinstance(algo, OnlineFactorizationRecommender)
    assert algo.learner.hypothesis.kind.name == name


@mark.parametrize('name', sorted(algorithms.keys()))
def test_sampled_params(name):
    mod = algorithms[name]
    state = np.random.RandomState(42)
    point = {pn: np.asarray(dist.rvs(random_state=state)).item() for (pn, dist) in mod.space}
    algo = mod.from_params(**point)
    assert algo.learner.model.factor_size == point['factor_size']
    assert algo.epochs == point['epochs']
    assert algo.learner.gradient.learning_rate == point['learning_rate']


@mark.parametrize('name', sorted(algorithms.keys()))
def test_params_hypothesis_overridden(name):
    # a saved parameter file may carry another algorithm's hypothesis
    other = 'poisson' if name == 'OLS' else 'ols'
    algo = algorithms[name].from_params(hypothesis=other, factor_size=4)
    assert algo.learner.hypothesis.kind.name == name
    assert algo.learner.model.factor_size == 4
