"""
Online factorization for binary feedback (logistic regression).
"""
from scipy.stats import zipfian, loguniform, randint
from ..config import LearnerConfig, build_recommender

space = [
    ('factor_size', zipfian(1, 246, loc=4)),
    ('learning_rate', loguniform(1.0e-4, 0.1)),
    ('bias_lambda', loguniform(1.0e-5, 0.1)),
    ('factor_lambda', loguniform(1.0e-5, 0.1)),
    ('epochs', randint(5, 50)),
]

def default():
    return build_recommender(LearnerConfig(hypothesis='logistic', classes=2))

def from_params(**kwargs):
    kwargs.setdefault('classes', 2)
    kwargs['hypothesis'] = 'logistic'
    return build_recommender(LearnerConfig.from_params(**kwargs))
