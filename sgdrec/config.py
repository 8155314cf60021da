"""
Learner configuration.
"""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from .algorithms.hypothesis import Hypothesis, HypothesisKind
from .algorithms.gradient import StochasticGradient
from .algorithms.model import FeatureVectorModel
from .algorithms.learner import FactorLearner, SideInfoLearner
from .algorithms.recommender import OnlineFactorizationRecommender, score_on_target_class, most_probable_class

_log = logging.getLogger(__name__)


@dataclass
class LearnerConfig:
    """
    Configuration for an online factorization learner.  If ``hypothesis`` is
    not given, it is picked from the other settings: ordinal models use the
    ordinal hypothesis, 0 or 1 classes mean OLS, 2 classes logistic, and more
    classes softmax.
    """
    hypothesis: Optional[str] = None
    classes: int = 1
    ordinal: bool = False
    side_info: bool = False
    factor_size: int = 150
    learning_rate: float = 0.005
    bias_lambda: float = 0.005
    factor_lambda: float = 0.025
    user_side_lambda: float = 0.0
    item_side_lambda: float = 0.0
    dynamic_side_lambda: float = 0.0
    cuts_lambda: float = 0.0
    user_side_size: int = 0
    item_side_size: int = 0
    dynamic_side_size: int = 0
    clamp_cuts: bool = True
    epochs: int = 50
    rng_spec: object = None

    @classmethod
    def from_params(cls, **params):
        "Make a configuration from keyword parameters, ignoring unknown ones."
        names = set(f.name for f in fields(cls))
        unknown = set(params.keys()) - names
        if unknown:
            _log.warning('ignoring unknown parameters %s', ', '.join(sorted(unknown)))
        return cls(**{k: v for (k, v) in params.items() if k in names})

    @classmethod
    def from_file(cls, path):
        "Load a configuration from a JSON file."
        return cls.from_params(**json.loads(Path(path).read_text()))

    def resolved_hypothesis(self):
        "Get the hypothesis kind, validated against the number of classes."
        if self.hypothesis is not None:
            kind = HypothesisKind.parse(self.hypothesis)
        elif self.ordinal:
            kind = HypothesisKind.ORDINAL
        elif self.classes <= 1:
            kind = HypothesisKind.OLS
        elif self.classes == 2:
            kind = HypothesisKind.LOGISTIC
        else:
            kind = HypothesisKind.SOFTMAX

        if kind == HypothesisKind.SOFTMAX and self.classes < 3:
            raise ValueError(f'softmax needs at least 3 classes, got {self.classes}')
        if kind == HypothesisKind.ORDINAL and self.classes < 2:
            raise ValueError(f'ordinal needs at least 2 classes, got {self.classes}')
        if kind == HypothesisKind.LOGISTIC and self.classes != 2:
            raise ValueError(f'logistic needs 2 classes, got {self.classes}')
        if kind in (HypothesisKind.OLS, HypothesisKind.POISSON) and self.classes > 1:
            raise ValueError(f'{kind.name} predicts a single value, got {self.classes} classes')
        return kind

    @property
    def predicts_ratings(self):
        return self.resolved_hypothesis() in (HypothesisKind.OLS, HypothesisKind.POISSON)


def build_learner(config):
    """
    Build a learner, with its model, hypothesis and gradient, from a configuration.
    """
    kind = config.resolved_hypothesis()
    _log.info('building %s learner with %d factors', kind.name, config.factor_size)
    hypothesis = Hypothesis(kind)
    gradient = StochasticGradient.for_hypothesis(hypothesis, config.learning_rate)
    model = FeatureVectorModel(config.factor_size, config.classes, kind == HypothesisKind.ORDINAL,
                               user_side_size=config.user_side_size,
                               item_side_size=config.item_side_size,
                               dynamic_side_size=config.dynamic_side_size,
                               rng_spec=config.rng_spec)

    common = dict(bias_lambda=config.bias_lambda, factor_lambda=config.factor_lambda,
                  cuts_lambda=config.cuts_lambda, clamp_cuts=config.clamp_cuts)
    if config.side_info:
        return SideInfoLearner(gradient, hypothesis, model,
                               user_side_lambda=config.user_side_lambda,
                               item_side_lambda=config.item_side_lambda,
                               dynamic_side_lambda=config.dynamic_side_lambda,
                               **common)
    else:
        return FactorLearner(gradient, hypothesis, model, **common)


def build_recommender(config):
    """
    Build a recommender from a configuration.  Rating predictors estimate
    with the point prediction; class predictors with the most probable class.
    """
    learner = build_learner(config)
    if config.predicts_ratings:
        strategy = score_on_target_class
    else:
        strategy = most_probable_class
    return OnlineFactorizationRecommender(learner, epochs=config.epochs, strategy=strategy)
