"""Shape and domain checks shared by the statistics and whitening routines."""

# Authors: The regda developers
# SPDX-License-Identifier: BSD-3-Clause

from numbers import Real

import numpy as np

from regda.exceptions import DimensionMismatch, DomainViolation, ShapeError


def _orientation_names(axis):
    # (observation dimension, feature dimension) for error messages
    return ("rows", "columns") if axis == 0 else ("columns", "rows")


def validate_shape(X, axis=0):
    """Resolve the number of observations and features of `X`.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features) or (n_features, n_samples)
        Data matrix.

    axis : {0, 1}, default=0
        Use 0 when each row of `X` is an observation and 1 when each column
        is an observation.

    Returns
    -------
    n : int
        Number of observations.

    p : int
        Number of features.
    """
    if isinstance(axis, bool) or axis not in (0, 1):
        raise ShapeError(f"axis should be 0 or 1 (got {axis!r})")
    axis = int(axis)
    shape = np.shape(X)
    if len(shape) != 2:
        raise ShapeError(f"expected a 2-dimensional array (got {len(shape)} dimensions)")
    return shape[axis], shape[1 - axis]


def validate_centroid_shape(M, X, axis=0):
    """Check that centroid matrix `M` and data matrix `X` share features.

    Returns
    -------
    n : int
        Number of observations in `X`.

    p : int
        Number of features.

    m : int
        Number of classes in `M`.
    """
    n, p = validate_shape(X, axis=axis)
    m, p2 = validate_shape(M, axis=axis)

    if p != p2:
        _, rc = _orientation_names(axis)
        raise DimensionMismatch(
            f"the number of {rc} in centroid matrix M must match the number of "
            f"{rc} in data matrix X (got {p2} and {p})"
        )
    return n, p, m


def validate_centroid_priors(M, priors, axis=0):
    """Check that centroid matrix `M` has one centroid per prior.

    Returns
    -------
    m : int
        Number of classes.

    p : int
        Number of features.
    """
    m, p = validate_shape(M, axis=axis)
    m2 = len(priors)

    if m != m2:
        rc, _ = _orientation_names(axis)
        raise DimensionMismatch(
            f"the number of {rc} in centroid matrix M must match the length of "
            f"class priors vector (got {m} and {m2})"
        )
    return m, p


def validate_data_shape(X, y, axis=0):
    """Check that `y` holds one label per observation of `X`.

    Returns
    -------
    n : int
        Number of observations.

    p : int
        Number of features.
    """
    n, p = validate_shape(X, axis=axis)
    n2 = len(y)

    if n != n2:
        rc, _ = _orientation_names(axis)
        raise DimensionMismatch(
            f"the number of {rc} in data matrix X must match the length of class "
            f"label vector y (got {n} and {n2})"
        )
    return n, p


def validate_priors(priors):
    """Check that `priors` is a vector of positive probabilities summing to 1.

    The sum is compared to 1 with a tolerance of the square root of the
    machine epsilon of the priors' floating point type.

    Returns
    -------
    m : int
        Number of classes.
    """
    priors = np.asarray(priors)
    if priors.ndim != 1:
        raise ShapeError(
            f"class priors must be a 1-dimensional vector (got {priors.ndim} dimensions)"
        )
    if np.any(priors <= 0):
        raise DomainViolation(
            f"all class priors must be positive probabilities (got {priors})"
        )

    dtype = priors.dtype if np.issubdtype(priors.dtype, np.floating) else np.float64
    total = priors.sum(dtype=dtype)
    if not abs(total - 1) <= np.sqrt(np.finfo(dtype).eps):
        raise DomainViolation(f"class priors must sum to 1 (got {total})")
    return priors.shape[0]


def check_unit_interval(value, name):
    """Raise DomainViolation unless `value` is a real number in [0, 1]."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise DomainViolation(f"{name} must be a real number (got {value!r})")
    if not 0 <= value <= 1:
        raise DomainViolation(f"{name} must be in the interval [0, 1] (got {value})")
    return value


def check_floating(X, name):
    """Raise TypeError unless `X` is a floating point ndarray."""
    if not isinstance(X, np.ndarray) or not np.issubdtype(X.dtype, np.floating):
        dtype = getattr(X, "dtype", type(X).__name__)
        raise TypeError(
            f"{name} must be a floating point ndarray to be updated in place "
            f"(got {dtype})"
        )
    return X


def validate_square(S, name):
    """Raise DimensionMismatch unless `S` is a square matrix; return its order."""
    shape = np.shape(S)
    if len(shape) != 2 or shape[0] != shape[1]:
        raise DimensionMismatch(f"{name} must be a square matrix (got shape {shape})")
    return shape[0]
