"""Regularized whitening transforms and class statistics for discriminant analysis.

The core routines validate shapes, compute per-class centroids, shrink
covariance matrices and compute whitening transforms ``W`` with the
covariance determinant. :mod:`regda.discriminant_analysis` assembles them
into linear and quadratic discriminant classifiers.
"""

# Authors: The regda developers
# SPDX-License-Identifier: BSD-3-Clause

from regda._class_stats import center_classes, compute_centroids, count_classes
from regda._regularization import shrink_toward, shrink_toward_identity
from regda._validation import (
    validate_centroid_priors,
    validate_centroid_shape,
    validate_data_shape,
    validate_priors,
    validate_shape,
)
from regda._whitening import whiten_cov, whiten_data

__version__ = "0.1.0"

__all__ = [
    "center_classes",
    "compute_centroids",
    "count_classes",
    "shrink_toward",
    "shrink_toward_identity",
    "validate_centroid_priors",
    "validate_centroid_shape",
    "validate_data_shape",
    "validate_priors",
    "validate_shape",
    "whiten_cov",
    "whiten_data",
]
