"""
Online factorization for unordered classes (multinomial logistic regression).
"""
from scipy.stats import zipfian, loguniform, randint
from ..config import LearnerConfig, build_recommender

space = [
    ('factor_size', zipfian(1, 96, loc=4)),
    ('learning_rate', loguniform(1.0e-4, 0.1)),
    ('bias_lambda', loguniform(1.0e-5, 0.1)),
    ('factor_lambda', loguniform(1.0e-5, 0.1)),
    ('epochs', randint(5, 50)),
]

def default():
    return build_recommender(LearnerConfig(hypothesis='softmax', classes=5))

def from_params(**kwargs):
    kwargs.setdefault('classes', 5)
    kwargs['hypothesis'] = 'softmax'
    return build_recommender(LearnerConfig.from_params(**kwargs))
