"""
Online factorization for ordered classes (proportional odds).  Ratings are
class indices, starting from 0.
"""
from scipy.stats import zipfian, loguniform, randint
from ..config import LearnerConfig, build_recommender

space = [
    ('factor_size', zipfian(1, 246, loc=4)),
    ('learning_rate', loguniform(1.0e-4, 0.1)),
    ('bias_lambda', loguniform(1.0e-5, 0.1)),
    ('factor_lambda', loguniform(1.0e-5, 0.1)),
    ('cuts_lambda', loguniform(1.0e-6, 0.01)),
    ('epochs', randint(5, 50)),
]

def default():
    return build_recommender(LearnerConfig(hypothesis='ordinal', ordinal=True, classes=5))

def from_params(**kwargs):
    kwargs.setdefault('classes', 5)
    kwargs.update(hypothesis='ordinal', ordinal=True)
    return build_recommender(LearnerConfig.from_params(**kwargs))
