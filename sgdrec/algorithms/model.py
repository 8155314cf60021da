"""
The parameter store for the online factorization learners.
"""

import logging

import numpy as np
import seedbank

from . import vectors

_log = logging.getLogger(__name__)

#: index of the constant 1 in a user's factor vectors
USER_INTERCEPT = 1
#: index of the constant 1 in an item's factor vectors
ITEM_INTERCEPT = 2


class FeatureVectorModel:
    """
    Stores user and item factors, side information and the parameters that
    apply to the side information.

    Factor vectors have ``factor_size + 3`` entries: entry 0 is reserved and
    stays 0, and entry 1 (users) or 2 (items) holds the constant 1 that pairs
    with the other side's bias, so the dot product of a user and an item
    vector includes both biases.

    Reading factors or side-information parameters for an unknown user or
    item creates (and stores) them; side information itself reads as zeros
    when it has not been set, but nothing is stored.

    Args:
        factor_size(int): the number of latent features.
        classes(int): the number of response classes (0 and 1 both mean numeric).
        ordinal(bool): whether the classes are ordered (proportional odds).
        user_side_size(int): the cardinality of user side information.
        item_side_size(int): the cardinality of item side information.
        dynamic_side_size(int): the cardinality of user-item side information.
        rng_spec: the random number specification for initializing factors.
    """

    def __init__(self, factor_size, classes=1, ordinal=False, *,
                 user_side_size=0, item_side_size=0, dynamic_side_size=0, rng_spec=None):
        self.factor_size = factor_size
        self.classes = classes
        self.ordinal = ordinal
        self.user_side_size = user_side_size
        self.item_side_size = item_side_size
        self.dynamic_side_size = dynamic_side_size
        self.rng = seedbank.numpy_rng(rng_spec)

        if ordinal or self.number_of_classes() <= 2:
            self.vector_classes = 1
        else:
            self.vector_classes = self.number_of_classes()

        self._alphas = {}
        self._betas = {}
        self._thetas_on_t = {}
        self._thetas_on_z = {}
        self._gammas_on_x = {}
        self._gammas_on_z = {}
        self._x = {}
        self._t = {}
        self._z = {}
        self._cuts = self._initial_cuts()

        _log.debug('model with %d factors, %d classes (%d vectors per family)',
                   factor_size, self.number_of_classes(), self.vector_classes)

    def number_of_classes(self):
        return 1 if self.classes <= 1 else self.classes

    @property
    def n_users(self):
        return len(self._alphas)

    @property
    def n_items(self):
        return len(self._betas)

    def user_ids(self):
        return list(self._alphas.keys())

    def item_ids(self):
        return list(self._betas.keys())

    def _initial_cuts(self):
        n = self.number_of_classes() - 1
        cuts = np.zeros(n)
        if self.ordinal and n > 0:
            cuts[0] = self.rng.uniform(0.1, 0.2)
            cuts[1:] = 0.9 / n
        return cuts

    def _random_factors(self, intercept):
        fvs = []
        for _c in range(self.vector_classes):
            vec = self.rng.uniform(0.1, 0.2, self.factor_size + 3)
            vec[0] = 0.0
            vec[intercept] = 1.0
            fvs.append(vec)
        return fvs

    def _zeros(self, size):
        return [vectors.sparse_vector(size) for _c in range(self.vector_classes)]

    def _check_size(self, what, vec, size):
        if vectors.cardinality(vec) != size:
            raise ValueError(f'{what} has cardinality {vectors.cardinality(vec)}, expected {size}')

    # factors

    def check_user(self, user):
        "Query whether a user has factors."
        return user in self._alphas

    def check_item(self, item):
        "Query whether an item has factors."
        return item in self._betas

    def initialize_user_if_needed(self, user):
        if user not in self._alphas:
            self._alphas[user] = self._random_factors(USER_INTERCEPT)

    def initialize_item_if_needed(self, item):
        if item not in self._betas:
            self._betas[item] = self._random_factors(ITEM_INTERCEPT)

    def get_alphas(self, user):
        "Get a user's factor vectors, initializing them if needed."
        self.initialize_user_if_needed(user)
        return self._alphas[user]

    def set_alphas(self, user, alphas):
        self._alphas[user] = alphas

    def get_betas(self, item):
        "Get an item's factor vectors, initializing them if needed."
        self.initialize_item_if_needed(item)
        return self._betas[item]

    def set_betas(self, item, betas):
        self._betas[item] = betas

    # cuts

    def get_cuts(self):
        return self._cuts

    def set_cuts(self, cuts):
        cuts = np.asarray(cuts, dtype=np.float64)
        if len(cuts) != len(self._cuts):
            raise ValueError(f'expected {len(self._cuts)} cuts, got {len(cuts)}')
        self._cuts = cuts

    def set_cut(self, index, value):
        self._cuts[index] = value

    # side information parameters

    def get_thetas_on_t(self, user):
        "Get a user's parameters for item side information, creating zeros if needed."
        if user not in self._thetas_on_t:
            self._thetas_on_t[user] = self._zeros(self.item_side_size)
        return self._thetas_on_t[user]

    def set_thetas_on_t(self, user, thetas):
        self._thetas_on_t[user] = thetas

    def get_thetas_on_z(self, user):
        "Get a user's parameters for dynamic side information, creating zeros if needed."
        if user not in self._thetas_on_z:
            self._thetas_on_z[user] = self._zeros(self.dynamic_side_size)
        return self._thetas_on_z[user]

    def set_thetas_on_z(self, user, thetas):
        self._thetas_on_z[user] = thetas

    def get_gammas_on_x(self, item):
        "Get an item's parameters for user side information, creating zeros if needed."
        if item not in self._gammas_on_x:
            self._gammas_on_x[item] = self._zeros(self.user_side_size)
        return self._gammas_on_x[item]

    def set_gammas_on_x(self, item, gammas):
        self._gammas_on_x[item] = gammas

    def get_gammas_on_z(self, item):
        "Get an item's parameters for dynamic side information, creating zeros if needed."
        if item not in self._gammas_on_z:
            self._gammas_on_z[item] = self._zeros(self.dynamic_side_size)
        return self._gammas_on_z[item]

    def set_gammas_on_z(self, item, gammas):
        self._gammas_on_z[item] = gammas

    # side information

    def get_x(self, user):
        x = self._x.get(user)
        if x is None:
            x = vectors.sparse_vector(self.user_side_size)
        return x

    def set_x(self, user, x):
        self._check_size('user side info', x, self.user_side_size)
        self._x[user] = x

    def x_set_already(self, user):
        return user in self._x

    def get_t(self, item):
        t = self._t.get(item)
        if t is None:
            t = vectors.sparse_vector(self.item_side_size)
        return t

    def set_t(self, item, t):
        self._check_size('item side info', t, self.item_side_size)
        self._t[item] = t

    def t_set_already(self, item):
        return item in self._t

    def get_z(self, user, item):
        z = self._z.get((user, item))
        if z is None:
            z = vectors.sparse_vector(self.dynamic_side_size)
        return z

    def set_z(self, user, item, z):
        self._check_size('dynamic side info', z, self.dynamic_side_size)
        self._z[(user, item)] = z

    def z_set_already(self, user, item):
        return (user, item) in self._z

    def remove_z(self, user, item):
        "Forget the dynamic side information for a user-item pair, if any."
        self._z.pop((user, item), None)
