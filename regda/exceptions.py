"""Custom warnings and errors used across regda."""

# Authors: The regda developers
# SPDX-License-Identifier: BSD-3-Clause

import numpy as np

__all__ = [
    "DimensionMismatch",
    "DomainViolation",
    "EmptyClass",
    "LabelOutOfRange",
    "RankDeficiency",
    "ShapeError",
]


class ShapeError(ValueError):
    """Exception raised when an array does not have the expected layout.

    Raised for an orientation ``axis`` other than 0 or 1, or for inputs that
    are not two-dimensional.
    """


class DimensionMismatch(ShapeError):
    """Exception raised when the sizes of related arguments disagree.

    Examples
    --------
    >>> import numpy as np
    >>> from regda import validate_data_shape
    >>> from regda.exceptions import DimensionMismatch
    >>> try:
    ...     validate_data_shape(np.zeros((3, 2)), [1, 2])
    ... except DimensionMismatch as e:
    ...     print(repr(e))
    DimensionMismatch('the number of rows in data matrix X must match the length of class label vector y (got 3 and 2)')
    """


class DomainViolation(ValueError):
    """Exception raised when a scalar or a probability is outside its range."""


class LabelOutOfRange(ValueError):
    """Exception raised when a class label falls outside ``[1, m]``."""


class EmptyClass(ValueError):
    """Exception raised when a class has no observations."""


class RankDeficiency(np.linalg.LinAlgError):
    """Exception raised when a covariance factor is singular.

    This covers too few observations for a full rank covariance estimate,
    collinear predictors and covariance matrices that are not positive
    definite.
    """
