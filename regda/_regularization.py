"""Convex shrinkage of covariance matrices."""

# Authors: The regda developers
# SPDX-License-Identifier: BSD-3-Clause

import numpy as np

from regda._validation import check_floating, check_unit_interval, validate_square
from regda.exceptions import DimensionMismatch


def shrink_toward(S1, S2, lam):
    """Shrink `S1` toward `S2` in place.

    Computes ``S1 = (1 - lam) * S1 + lam * S2`` elementwise. This is used to
    blend a per-class covariance toward the pooled covariance.

    Parameters
    ----------
    S1 : ndarray of shape (n_features, n_features)
        Floating point matrix, overwritten with the blend.

    S2 : array-like of shape (n_features, n_features)
        Shrinkage target.

    lam : float
        Shrinkage intensity in ``[0, 1]``.

    Returns
    -------
    S1 : ndarray of shape (n_features, n_features)
        The shrunk input.
    """
    check_floating(S1, "S1")
    validate_square(S1, "S1")
    validate_square(S2, "S2")
    if np.shape(S1) != np.shape(S2):
        raise DimensionMismatch(
            "matrices S1 and S2 must have the same shape "
            f"(got {np.shape(S1)} and {np.shape(S2)})"
        )
    check_unit_interval(lam, "lam")

    S1 *= 1 - lam
    S1 += lam * np.asarray(S2)
    return S1


def shrink_toward_identity(S, gamma):
    """Shrink `S` toward its average eigenvalue times the identity, in place.

    With ``a = gamma * trace(S) / p`` this computes
    ``S = (1 - gamma) * S + a * I``. The target has the same trace as `S`,
    so it follows the scale of the data.

    Parameters
    ----------
    S : ndarray of shape (n_features, n_features)
        Floating point covariance matrix, overwritten.

    gamma : float
        Shrinkage intensity in ``[0, 1]``.

    Returns
    -------
    S : ndarray of shape (n_features, n_features)
        The shrunk input.
    """
    check_floating(S, "S")
    p = validate_square(S, "S")
    check_unit_interval(gamma, "gamma")

    a = gamma * np.trace(S) / p  # average eigenvalue scaled by gamma
    S *= 1 - gamma
    S[np.diag_indices(p)] += a
    return S
