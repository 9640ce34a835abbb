"""Whitening transforms from centered data or from a covariance matrix.

Every routine returns a pair ``(W, det)`` where ``det`` is the determinant of
the (possibly regularized) covariance matrix ``S`` and ``W`` whitens it. For
row observations (``axis=0``) ``W.T @ S @ W`` is the identity and data is
whitened as ``X @ W``. For column observations (``axis=1``) the transpose is
returned, so ``W @ S @ W.T`` is the identity and data is whitened as
``W @ X``.

The column-oriented entry points run the row-oriented algorithms on the
transposed view of their input.
"""

# Authors: The regda developers
# SPDX-License-Identifier: BSD-3-Clause

from numbers import Integral

import numpy as np
from scipy import linalg

from sklearn import get_config

from regda._regularization import shrink_toward_identity
from regda._validation import (
    check_floating,
    check_unit_interval,
    validate_shape,
    validate_square,
)
from regda.exceptions import DomainViolation, RankDeficiency

__all__ = ["whiten_cov", "whiten_data"]


def _check_finite():
    return not get_config()["assume_finite"]


def _invert_triangular(R):
    """Invert upper triangular `R` with LAPACK trtri."""
    (trtri,) = linalg.get_lapack_funcs(("trtri",), (R,))
    W, info = trtri(R, lower=0)
    if info > 0:
        raise RankDeficiency("rank deficiency detected (collinearity in predictors)")
    if info < 0:
        raise ValueError(f"illegal value in argument {-info} of internal trtri")
    return W


def _whiten_data_qr(X, _gamma, df):
    """Whitening from the R factor of a QR decomposition, no shrinkage."""
    p = X.shape[1]
    tol = np.finfo(X.dtype).eps * p * np.max(np.abs(X))

    # X = QR, so the scatter matrix X^T X equals R^T R
    (R,) = linalg.qr(X, overwrite_a=True, mode="r", check_finite=_check_finite())
    R = R[:p]
    R /= np.sqrt(df)

    if not np.all(np.abs(np.diag(R)) > tol):
        raise RankDeficiency("rank deficiency detected (collinearity in predictors)")

    det = np.prod(np.diag(R)) ** 2
    return _invert_triangular(R), det


def _whiten_data_svd(X, gamma, df):
    """Whitening from the singular value decomposition, with shrinkage."""
    p = X.shape[1]
    tol = np.finfo(X.dtype).eps * p * np.max(np.abs(X))

    _, s, Vt = linalg.svd(
        X, full_matrices=False, overwrite_a=True, check_finite=_check_finite()
    )

    if gamma:
        # S = V diag(evals) V^T, so S(gamma) = V ((1 - gamma) diag(evals) +
        # gamma * mean(evals) I) V^T
        evals = s**2 / df
        evals = (1 - gamma) * evals + gamma * evals.mean()
        det = np.prod(evals)
        scale = np.sqrt(evals)
    else:
        det = np.prod(s**2 / df)
        scale = s / np.sqrt(df)

    if not np.all(scale > tol):
        raise RankDeficiency(
            f"rank deficiency (collinearity) detected with tolerance {tol}"
        )

    # W = V diag(1 / scale)
    Vt /= scale[:, np.newaxis]
    return Vt.T, det


_WHITEN_DATA_STRATEGIES = {
    "qr": _whiten_data_qr,
    "svd": _whiten_data_svd,
}


def whiten_data(X, gamma=None, *, axis=0, df=None):
    """Compute a whitening transform from centered data.

    Without `gamma` the transform is the inverse of the triangular factor of
    a QR decomposition of `X`. With `gamma` it is computed from a singular
    value decomposition, after shrinking the covariance eigenvalues toward
    their mean. ``gamma=0`` takes the SVD route without shrinkage and agrees
    with the QR route up to an orthogonal factor.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features) or (n_features, n_samples)
        Floating point data, centered per class. Its contents may be
        overwritten by factorization intermediates and must not be reused.

    gamma : float, default=None
        Shrinkage intensity in ``[0, 1]`` toward the average eigenvalue
        times the identity. None disables shrinkage.

    axis : {0, 1}, default=0
        Use 0 for row observations and 1 for column observations.

    df : int, default=None
        Degrees of freedom used as the variance divisor. Defaults to
        ``n_samples - 1``.

    Returns
    -------
    W : ndarray of shape (n_features, n_features)
        Whitening matrix.

    det : float
        Determinant of the (shrunk) covariance matrix.
    """
    check_floating(X, "X")
    n, p = validate_shape(X, axis=axis)

    if df is None:
        df = n - 1
    if isinstance(df, bool) or not isinstance(df, Integral) or df <= 0:
        raise DomainViolation(
            f"degrees of freedom must be a positive integer (got {df!r})"
        )
    if n <= p:
        raise RankDeficiency(
            "insufficient number of within-class observations to produce a full "
            f"rank covariance matrix ({n} observations, {p} predictors)"
        )
    if gamma is not None:
        check_unit_interval(gamma, "gamma")

    strategy = _WHITEN_DATA_STRATEGIES["qr" if gamma is None else "svd"]
    W, det = strategy(X if axis == 0 else X.T, gamma, df)
    return (W, det) if axis == 0 else (W.T, det)


def whiten_cov(S, gamma=None, *, axis=0):
    """Compute a whitening transform from a covariance matrix.

    The transform is the inverse of the Cholesky factor ``U`` of
    ``S = U^T U``.

    Parameters
    ----------
    S : ndarray of shape (n_features, n_features)
        Floating point symmetric covariance matrix. It is overwritten.

    gamma : float, default=None
        Shrinkage intensity in ``[0, 1]``. When non-zero, `S` is first
        shrunk with :func:`~regda.shrink_toward_identity`.

    axis : {0, 1}, default=0
        Orientation of the data the transform is applied to.

    Returns
    -------
    W : ndarray of shape (n_features, n_features)
        Whitening matrix.

    det : float
        Determinant of the (shrunk) covariance matrix.
    """
    check_floating(S, "S")
    validate_shape(S, axis=axis)
    validate_square(S, "S")
    if gamma is not None:
        check_unit_interval(gamma, "gamma")
    if _check_finite():
        S = np.asarray_chkfinite(S)

    tol = np.sqrt(np.finfo(S.dtype).eps) * np.max(np.abs(S), initial=0)
    if not linalg.issymmetric(S, atol=tol, rtol=0):
        raise RankDeficiency(
            "covariance matrix is not symmetric (got an asymmetry larger than "
            f"{tol})"
        )

    if gamma:
        shrink_toward_identity(S, gamma)

    try:
        U = linalg.cholesky(
            S, lower=False, overwrite_a=True, check_finite=_check_finite()
        )
    except linalg.LinAlgError as exc:
        raise RankDeficiency(
            "covariance matrix is not positive definite (rank deficiency "
            "or collinearity in predictors)"
        ) from exc

    det = np.prod(np.diag(U)) ** 2
    W = _invert_triangular(U)
    return (W, det) if axis == 0 else (W.T, det)
