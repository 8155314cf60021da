"""
Numeric vector helpers.

Parameters and features are either dense NumPy arrays (1-D) or sparse
SciPy DOK arrays with a single row.  The functions in this module hide the
difference, so the hypothesis, gradient and learner code can work with
either kind.
"""

import numpy as np
from scipy.sparse import dok_array, issparse


def dense(values):
    "Make a dense vector from a sequence of numbers."
    return np.array(values, dtype=np.float64)


def sparse_vector(size, entries=None):
    """
    Make a sparse vector.

    Args:
        size(int): the cardinality of the vector.
        entries(dict): a mapping of index to value for the nonzero entries.
    """
    vec = dok_array((1, size), dtype=np.float64)
    if entries:
        for i, v in entries.items():
            put(vec, i, v)
    return vec


def is_sparse(vec):
    return issparse(vec)


def cardinality(vec):
    "Get the cardinality (length) of a vector."
    if issparse(vec):
        return vec.shape[1]
    else:
        return len(vec)


def get(vec, index):
    if issparse(vec):
        return float(vec[0, index])
    else:
        return float(vec[index])


def put(vec, index, value):
    "Set an entry in place; setting a sparse entry to 0 removes it."
    if issparse(vec):
        vec[0, index] = value
    else:
        vec[index] = value


def nonzero_indices(vec):
    "Get the sorted indices of the nonzero entries of a vector."
    if issparse(vec):
        _rows, cols = vec.nonzero()
        return np.sort(cols)
    else:
        return np.flatnonzero(vec)


def dot(a, b):
    """
    Compute the dot product of two vectors of the same cardinality.

    Raises:
        ValueError: if the cardinalities differ.
    """
    if cardinality(a) != cardinality(b):
        raise ValueError(f'cardinality mismatch: {cardinality(a)} != {cardinality(b)}')

    if issparse(a) or issparse(b):
        # walk the nonzeros of the sparse side
        walk, other = (a, b) if issparse(a) else (b, a)
        return sum(get(walk, i) * get(other, i) for i in nonzero_indices(walk))
    else:
        return float(np.dot(a, b))


def like(vec):
    "Make a zero-filled vector of the same kind and cardinality."
    if issparse(vec):
        return dok_array(vec.shape, dtype=np.float64)
    else:
        return np.zeros_like(vec, dtype=np.float64)


def copy(vec):
    if issparse(vec):
        return vec.copy()
    else:
        return np.array(vec, dtype=np.float64)


def to_dense(vec):
    if issparse(vec):
        return vec.toarray().ravel()
    else:
        return np.asarray(vec, dtype=np.float64)
