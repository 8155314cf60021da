"""
Accuracy metrics for rating and class predictions.
"""

import numpy as np
import pandas as pd


def rmse(predictions, truth):
    "Root mean squared error."
    err = np.asarray(predictions, dtype=np.float64) - np.asarray(truth, dtype=np.float64)
    return float(np.sqrt(np.mean(np.square(err))))


def mae(predictions, truth):
    "Mean absolute error."
    err = np.asarray(predictions, dtype=np.float64) - np.asarray(truth, dtype=np.float64)
    return float(np.mean(np.abs(err)))


def user_scores(frame, metric):
    """
    Compute a prediction metric separately for each user.

    Args:
        frame(pandas.DataFrame): has ``user``, ``prediction`` and ``rating`` columns.
        metric: a function ``(predictions, truth) -> float``, e.g. :func:`rmse`.

    Returns:
        pandas.Series: the metric value for each user.
    """
    return frame.groupby('user')[['prediction', 'rating']].apply(lambda df: metric(df['prediction'], df['rating']))


def class_precision_recall(frame, n_classes):
    """
    Compute per-class precision and recall of class predictions.  Both are
    computed for each user and averaged over the users for whom they are
    defined (users with predictions of, or ratings in, the class).

    Args:
        frame(pandas.DataFrame):
            has ``user``, ``prediction`` (the predicted class) and ``rating``
            (the true class) columns.
        n_classes(int): the number of classes.

    Returns:
        pandas.DataFrame: ``precision`` and ``recall``, indexed by class.
    """
    pred = frame['prediction'].astype('int')
    true = frame['rating'].astype('int')
    rows = []
    for k in range(n_classes):
        flags = pd.DataFrame({
            'user': frame['user'],
            'hits': (pred == k) & (true == k),
            'predicted': pred == k,
            'actual': true == k,
        })
        counts = flags.groupby('user')[['hits', 'predicted', 'actual']].sum()
        precision = counts['hits'] / counts['predicted'].where(counts['predicted'] > 0)
        recall = counts['hits'] / counts['actual'].where(counts['actual'] > 0)
        rows.append({'class': k, 'precision': precision.mean(), 'recall': recall.mean()})

    return pd.DataFrame.from_records(rows, index='class')
