"""
Online factorization for numeric ratings (squared loss).
"""
from scipy.stats import zipfian, loguniform, randint
from ..config import LearnerConfig, build_recommender

predicts_ratings = True

space = [
    # log-uniform (Zipf) distribution [5, 250]
    ('factor_size', zipfian(1, 246, loc=4)),
    ('learning_rate', loguniform(1.0e-4, 0.1)),
    ('bias_lambda', loguniform(1.0e-5, 0.1)),
    ('factor_lambda', loguniform(1.0e-5, 0.1)),
    ('epochs', randint(5, 50)),
]

def default():
    return build_recommender(LearnerConfig(hypothesis='ols'))

def from_params(**kwargs):
    kwargs['hypothesis'] = 'ols'
    return build_recommender(LearnerConfig.from_params(**kwargs))
