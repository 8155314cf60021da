import numpy as np
import pandas as pd
from pytest import approx, raises

from sgdrec import evaluation
from sgdrec.algo_specs import ordinal
from sgdrec.config import LearnerConfig, build_recommender
from sgdrec.datasets import shift_ratings
from sgdrec.experiment import Experiment

rng = np.random.default_rng(42)
_users = rng.integers(0, 20, 400)
_items = rng.integers(0, 15, 400)
data = pd.DataFrame({
    'user': _users,
    'item': _items,
    'rating': ((_users + _items) % 5).astype('float64'),
}).drop_duplicates(['user', 'item'])
train = data.iloc[:-40]
test = data.iloc[-40:]


def test_rating_experiment():
    rec = build_recommender(LearnerConfig(factor_size=5, learning_rate=0.01, epochs=5, rng_spec=42))
    exp = Experiment(rec, train, test, epochs=5)
    score = exp.run()
    assert set(score.keys()) == {'RMSE', 'MAE'}
    assert np.isfinite(score['RMSE'])
    assert score['MAE'] <= score['RMSE'] + 1.0e-9


def test_predictions_frame():
    rec = build_recommender(LearnerConfig(factor_size=5, epochs=1, rng_spec=42))
    extra = pd.DataFrame({'user': [999], 'item': [0], 'rating': [3.0]})
    exp = Experiment(rec, train, pd.concat([test, extra]), epochs=1)
    exp.train_model()
    preds = exp.predictions()
    assert len(preds) == len(test) + 1
    assert 'prediction' in preds.columns
    assert np.isnan(preds.loc[preds['user'] == 999, 'prediction']).all()


def test_class_experiment(caplog):
    rec = build_recommender(LearnerConfig(factor_size=5, classes=5, ordinal=True, epochs=3, rng_spec=42))
    exp = Experiment(rec, train, test, epochs=3, predicts_ratings=False, n_classes=5,
                     see_convergence=True)
    with caplog.at_level('INFO', logger='sgdrec.experiment'):
        score = exp.run()
    assert set(score.keys()) == {'precision', 'recall'}
    assert 0 <= score['recall'] <= 1
    assert 'epoch 3' in caplog.text


def test_user_based_score():
    rec = build_recommender(LearnerConfig(factor_size=5, epochs=2, rng_spec=42))
    exp = Experiment(rec, train, test, epochs=2, user_based=True)
    score = exp.run()
    preds = exp.predictions()
    preds = preds[preds['prediction'].notna()]
    assert score['RMSE'] == approx(evaluation.user_scores(preds, evaluation.rmse).mean())
    assert score['MAE'] == approx(evaluation.user_scores(preds, evaluation.mae).mean())


stars_train = train.assign(rating=train['rating'] + 1)
stars_test = test.assign(rating=test['rating'] + 1)


def test_star_ratings_need_map():
    rec = ordinal.from_params(factor_size=3, epochs=1)
    exp = Experiment(rec, stars_train, stars_test, epochs=1, predicts_ratings=False, n_classes=5)
    with raises(ValueError, match='outside of 5 classes'):
        exp.run()


def test_rating_map():
    rec = ordinal.from_params(factor_size=3, epochs=1)
    exp = Experiment(rec, stars_train, stars_test, epochs=1, predicts_ratings=False, n_classes=5,
                     rating_map=shift_ratings(1))
    score = exp.run()
    assert set(score.keys()) == {'precision', 'recall'}
    assert exp.train['rating'].min() == 0
    assert exp.train['rating'].max() == 4
    assert list(exp.test['rating']) == list(test['rating'])
    # the caller's frames are left alone
    assert stars_train['rating'].min() == 1
