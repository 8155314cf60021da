"""
Loading side information and attaching it to a model.

Side information files are in long format: one row per nonzero entry, with
a key column (the user, the item, or the user and item), a ``feature``
column holding the entry's index and a ``value`` column.
"""

import logging

from .algorithms import vectors

_log = logging.getLogger(__name__)


def vectors_from_frame(frame, key, size=None):
    """
    Convert a long-format side information frame into sparse vectors.

    Args:
        frame(pandas.DataFrame): the side information.
        key(str or list): the key column(s), e.g. ``'user'`` or ``['user', 'item']``.
        size(int):
            The cardinality of the vectors; defaults to one more than the
            largest feature index.

    Returns:
        dict: a mapping from keys to sparse vectors.
    """
    if size is None:
        size = int(frame['feature'].max()) + 1 if len(frame) else 0
    elif len(frame) and frame['feature'].max() >= size:
        raise ValueError(f'feature index {frame["feature"].max()} does not fit in {size} entries')

    result = {}
    for k, rows in frame.groupby(key):
        entries = dict(zip(rows['feature'].astype('int'), rows['value'].astype('float')))
        result[k] = vectors.sparse_vector(size, entries)
    _log.info('loaded %d side information vectors of size %d', len(result), size)
    return result


class SideInfoSetup:
    """
    Attach side information to a model, without replacing anything that has
    already been set.

    Args:
        model(FeatureVectorModel): the model to set up.
    """

    def __init__(self, model):
        self.model = model

    def set_x(self, user, x):
        "Set a user's side information if it is not already set."
        if not self.model.x_set_already(user):
            self.model.set_x(user, x)

    def set_t(self, item, t):
        "Set an item's side information if it is not already set."
        if not self.model.t_set_already(item):
            self.model.set_t(item, t)

    def set_z(self, user, item, z):
        if not self.model.z_set_already(user, item):
            self.model.set_z(user, item, z)

    def set_xs(self, xs):
        "Set side information for many users from a dict."
        for user, x in xs.items():
            self.set_x(user, x)

    def set_ts(self, ts):
        for item, t in ts.items():
            self.set_t(item, t)

    def set_zs(self, zs):
        "Set dynamic side information from a dict keyed by ``(user, item)``."
        for (user, item), z in zs.items():
            self.set_z(user, item, z)

    def set_user_zs(self, user, zs):
        "Set one user's dynamic side information from a dict keyed by item."
        for item, z in zs.items():
            self.set_z(user, item, z)
