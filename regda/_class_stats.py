"""Per-class counts, centroids and centering."""

# Authors: The regda developers
# SPDX-License-Identifier: BSD-3-Clause

import numpy as np

from regda._validation import (
    check_floating,
    validate_centroid_shape,
    validate_data_shape,
)
from regda.exceptions import DimensionMismatch, EmptyClass, LabelOutOfRange, ShapeError


def _check_labels(y, m=None):
    """Validate integer labels in [1, m] and resolve m."""
    y = np.asarray(y)
    if y.ndim != 1:
        raise ShapeError(
            f"class label vector y must be 1-dimensional (got {y.ndim} dimensions)"
        )
    if y.size and not np.issubdtype(y.dtype, np.integer):
        raise LabelOutOfRange(f"class labels must be integers (got dtype {y.dtype})")

    if m is None:
        m = int(y.max()) if y.size else 0
    invalid = (y < 1) | (y > m)
    if np.any(invalid):
        raise LabelOutOfRange(
            f"class label {y[invalid][0]} is outside the range [1, {m}]"
        )
    return y.astype(np.intp, copy=False), m


def _check_nonempty(counts):
    empty = np.flatnonzero(counts == 0)
    if empty.size:
        raise EmptyClass(
            "must have at least one observation per class (no observations "
            f"for classes {(empty + 1).tolist()})"
        )


def count_classes(y, m=None):
    """Count the occurrences of each class label.

    Parameters
    ----------
    y : array-like of shape (n_samples,)
        Integer class labels in ``[1, m]``.

    m : int, default=None
        Number of classes. Defaults to ``max(y)``.

    Returns
    -------
    counts : ndarray of shape (m,)
        ``counts[k - 1]`` is the number of observations labeled ``k``.
    """
    y, m = _check_labels(y, m)
    return np.bincount(y - 1, minlength=m)


def compute_centroids(X, y, m=None, *, axis=0, out=None):
    """Compute class centroids.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features) or (n_features, n_samples)
        Data matrix.

    y : array-like of shape (n_samples,)
        Integer class labels in ``[1, m]``.

    m : int, default=None
        Number of classes. Defaults to the number of centroids in `out`, or
        to ``max(y)`` when `out` is None.

    axis : {0, 1}, default=0
        Use 0 for row observations and 1 for column observations.

    out : ndarray, default=None
        Floating point array of shape (m, n_features) (or (n_features, m)
        for ``axis=1``) overwritten with the centroids.

    Returns
    -------
    M : ndarray of shape (m, n_features) or (n_features, m)
        Class centroids, one row (or column) per class.
    """
    _, p = validate_data_shape(X, y, axis=axis)
    X = np.asarray(X)

    if out is not None:
        check_floating(out, "out")
        _, _, m_out = validate_centroid_shape(out, X, axis=axis)
        if m is None:
            m = m_out
        elif m != m_out:
            raise DimensionMismatch(
                f"centroid matrix out holds {m_out} classes but m is {m}"
            )

    y, m = _check_labels(y, m)
    counts = np.bincount(y - 1, minlength=m)
    _check_nonempty(counts)

    if out is None:
        dtype = X.dtype if np.issubdtype(X.dtype, np.floating) else np.float64
        out = np.zeros((m, p) if axis == 0 else (p, m), dtype=dtype)

    means = out if axis == 0 else out.T
    Xr = X if axis == 0 else X.T
    means[...] = 0
    np.add.at(means, y - 1, Xr)
    means /= counts[:, None]
    return out


def center_classes(X, M, y, *, axis=0):
    """Subtract from every observation of `X` its class centroid, in place.

    Applying this twice subtracts the centroids twice.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features) or (n_features, n_samples)
        Floating point data matrix, overwritten.

    M : ndarray of shape (m, n_features) or (n_features, m)
        Class centroids as returned by :func:`compute_centroids`.

    y : array-like of shape (n_samples,)
        Integer class labels in ``[1, m]``.

    axis : {0, 1}, default=0
        Use 0 for row observations and 1 for column observations.

    Returns
    -------
    X : ndarray
        The centered input.
    """
    check_floating(X, "X")
    _, _, m = validate_centroid_shape(M, X, axis=axis)
    validate_data_shape(X, y, axis=axis)
    y, _ = _check_labels(y, m)
    _check_nonempty(np.bincount(y - 1, minlength=m))

    M = np.asarray(M)
    Xr = X if axis == 0 else X.T
    Mr = M if axis == 0 else M.T
    Xr -= Mr[y - 1]
    return X
