"""
Online factorization for count data (Poisson regression).
"""
from scipy.stats import zipfian, loguniform, randint
from ..config import LearnerConfig, build_recommender

predicts_ratings = True

space = [
    ('factor_size', zipfian(1, 246, loc=4)),
    # exp link, keep the steps small
    ('learning_rate', loguniform(1.0e-5, 0.01)),
    ('bias_lambda', loguniform(1.0e-5, 0.1)),
    ('factor_lambda', loguniform(1.0e-5, 0.1)),
    ('epochs', randint(5, 50)),
]

def default():
    return build_recommender(LearnerConfig(hypothesis='poisson', learning_rate=0.001))

def from_params(**kwargs):
    kwargs['hypothesis'] = 'poisson'
    return build_recommender(LearnerConfig.from_params(**kwargs))
