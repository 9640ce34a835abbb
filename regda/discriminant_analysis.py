"""Linear and quadratic discriminant analysis from whitening transforms."""

# Authors: The regda developers
# SPDX-License-Identifier: BSD-3-Clause

import warnings
from numbers import Real

import numpy as np
from scipy import linalg

from sklearn.base import BaseEstimator, ClassifierMixin, _fit_context
from sklearn.utils._param_validation import Interval
from sklearn.utils.multiclass import check_classification_targets
from sklearn.utils.validation import check_is_fitted, validate_data

from regda._class_stats import center_classes, compute_centroids, count_classes
from regda._regularization import shrink_toward, shrink_toward_identity
from regda._validation import validate_centroid_priors, validate_priors
from regda._whitening import whiten_cov, whiten_data

__all__ = [
    "LinearDiscriminantAnalysis",
    "QuadraticDiscriminantAnalysis",
    "classify",
    "discriminants",
]


def _scatter_cov(Xc, df, shrinkage=None):
    """Covariance of centered data, shrunk toward the scaled identity."""
    cov = Xc.T @ Xc / df
    if shrinkage:
        shrink_toward_identity(cov, shrinkage)
    return cov


class DiscriminantAnalysisPredictionMixin:
    """Mixin class for LinearDiscriminantAnalysis and QuadraticDiscriminantAnalysis."""

    def decision_function(self, X):
        """Apply decision function to an array of samples.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Array of samples (test vectors).

        Returns
        -------
        y_scores : ndarray of shape (n_samples,) or (n_samples, n_classes)
            Decision function values related to each class, per sample.
            In the two-class case, the shape is `(n_samples,)`, giving the
            log likelihood ratio of the positive class.
        """
        y_scores = self._decision_function(X)
        if len(self.classes_) == 2:
            return y_scores[:, 1] - y_scores[:, 0]
        return y_scores

    def predict(self, X):
        """Perform classification on an array of vectors `X`.

        Returns the class label for each sample.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input vectors, where `n_samples` is the number of samples and
            `n_features` is the number of features.

        Returns
        -------
        y_pred : ndarray of shape (n_samples,)
            Class label for each sample.
        """
        scores = self._decision_function(X)
        return self.classes_.take(scores.argmax(axis=1))

    def predict_proba(self, X):
        """Estimate class probabilities.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input data.

        Returns
        -------
        y_proba : ndarray of shape (n_samples, n_classes)
            Probability estimate of the sample for each class in the
            model, where classes are ordered as they are in `self.classes_`.
        """
        return np.exp(self.predict_log_proba(X))

    def predict_log_proba(self, X):
        """Estimate log class probabilities.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input data.

        Returns
        -------
        y_log_proba : ndarray of shape (n_samples, n_classes)
            Estimated log probabilities.
        """
        scores = self._decision_function(X)
        log_likelihood = scores - scores.max(axis=1)[:, np.newaxis]
        return log_likelihood - np.log(
            np.exp(log_likelihood).sum(axis=1)[:, np.newaxis]
        )


class _BaseDiscriminantAnalysis(
    DiscriminantAnalysisPredictionMixin, ClassifierMixin, BaseEstimator
):
    """Shared fitting of priors and centroids, and the Gaussian scores."""

    def _fit_class_statistics(self, X, y):
        """Validate data, set `classes_`, `priors_` and `means_`.

        Returns the class-centered copy of `X` and the labels encoded in
        ``1..n_classes``.
        """
        X, y = validate_data(
            self, X, y, ensure_min_samples=2, dtype=[np.float64, np.float32]
        )
        check_classification_targets(y)
        self.classes_, y = np.unique(y, return_inverse=True)
        y = y + 1
        n_samples, _ = X.shape
        n_classes = len(self.classes_)
        if n_classes < 2:
            raise ValueError(
                "The number of classes has to be greater than one; got %d class"
                % (n_classes)
            )

        if self.priors is None:  # estimate priors from sample
            self.priors_ = (count_classes(y, n_classes) / float(n_samples)).astype(
                X.dtype
            )
        else:
            self.priors_ = np.array(self.priors, dtype=X.dtype)
            validate_priors(self.priors_)

        self.means_ = compute_centroids(X, y, n_classes)
        validate_centroid_priors(self.means_, self.priors_)
        Xc = center_classes(X.copy(), self.means_, y)
        return Xc, y

    def _whitening_pairs(self):
        raise NotImplementedError

    def _decision_function(self, X):
        # log posterior up to a constant, see eq (4.12) p. 110 of the ESL.
        check_is_fitted(self)

        X = validate_data(self, X, reset=False, dtype=[np.float64, np.float32])
        scores = np.empty((X.shape[0], len(self.classes_)), dtype=X.dtype)
        for k, (W, det) in enumerate(self._whitening_pairs()):
            Z = (X - self.means_[k]) @ W
            scores[:, k] = -0.5 * (np.sum(Z**2, axis=1) + np.log(det))
        return scores + np.log(self.priors_)


class LinearDiscriminantAnalysis(_BaseDiscriminantAnalysis):
    """Linear Discriminant Analysis.

    A classifier with a linear decision boundary, generated by fitting class
    conditional densities to the data and using Bayes' rule. All classes
    share the pooled within-class covariance matrix, which is never formed:
    the whitening transform is computed directly from the class-centered
    data.

    Parameters
    ----------
    priors : array-like of shape (n_classes,), default=None
        The class prior probabilities. By default, the class proportions are
        inferred from the training data. Given priors must be positive and
        sum to 1.

    shrinkage : float, default=None
        Shrinkage of the pooled covariance toward its average eigenvalue
        times the identity, between 0 and 1. None disables shrinkage.

    store_covariance : bool, default=False
        If True, explicitly compute the (shrunk) pooled covariance matrix and
        store it in `covariance_`.

    Attributes
    ----------
    covariance_ : ndarray of shape (n_features, n_features)
        Pooled within-class covariance matrix. Only present if
        `store_covariance` is True.

    determinant_ : float
        Determinant of the (shrunk) pooled covariance matrix.

    means_ : ndarray of shape (n_classes, n_features)
        Class-wise means.

    priors_ : ndarray of shape (n_classes,)
        Class priors (sum to 1).

    whitening_ : ndarray of shape (n_features, n_features)
        Whitening matrix ``W`` with ``W.T @ covariance_ @ W`` equal to the
        identity.

    classes_ : ndarray of shape (n_classes,)
        Unique class labels.

    n_features_in_ : int
        Number of features seen during :term:`fit`.

    See Also
    --------
    QuadraticDiscriminantAnalysis : Quadratic Discriminant Analysis.

    Examples
    --------
    >>> import numpy as np
    >>> from regda.discriminant_analysis import LinearDiscriminantAnalysis
    >>> X = np.array([[-1, -1], [-2, -1], [-3, -2], [1, 1], [2, 1], [3, 2]])
    >>> y = np.array([1, 1, 1, 2, 2, 2])
    >>> clf = LinearDiscriminantAnalysis()
    >>> clf.fit(X, y)
    LinearDiscriminantAnalysis()
    >>> print(clf.predict([[-0.8, -1]]))
    [1]
    """

    _parameter_constraints: dict = {
        "priors": ["array-like", None],
        "shrinkage": [Interval(Real, 0, 1, closed="both"), None],
        "store_covariance": ["boolean"],
    }

    def __init__(self, *, priors=None, shrinkage=None, store_covariance=False):
        self.priors = priors
        self.shrinkage = shrinkage
        self.store_covariance = store_covariance

    @_fit_context(prefer_skip_nested_validation=True)
    def fit(self, X, y):
        """Fit the Linear Discriminant Analysis model.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training data.

        y : array-like of shape (n_samples,)
            Target values.

        Returns
        -------
        self : object
            Fitted estimator.
        """
        Xc, _ = self._fit_class_statistics(X, y)
        n_samples = Xc.shape[0]
        n_classes = len(self.classes_)
        if n_samples == n_classes:
            raise ValueError(
                "The number of samples must be more than the number of classes."
            )

        df = n_samples - n_classes
        if self.store_covariance:
            self.covariance_ = _scatter_cov(Xc, df, self.shrinkage)
        self.whitening_, self.determinant_ = whiten_data(Xc, self.shrinkage, df=df)
        return self

    def _whitening_pairs(self):
        return [(self.whitening_, self.determinant_)] * len(self.classes_)


class QuadraticDiscriminantAnalysis(_BaseDiscriminantAnalysis):
    """Quadratic Discriminant Analysis.

    A classifier with a quadratic decision boundary, generated
    by fitting class conditional densities to the data
    and using Bayes' rule.

    The model fits a Gaussian density to each class. Each class covariance
    can be blended toward the pooled covariance (`reg_param`) and shrunk
    toward its average eigenvalue times the identity (`shrinkage`).

    Parameters
    ----------
    priors : array-like of shape (n_classes,), default=None
        Class priors. By default, the class proportions are inferred from the
        training data. Given priors must be positive and sum to 1.

    reg_param : float, default=0.0
        Regularizes the per-class covariance estimates by transforming them
        as ``S_k = (1 - reg_param) * S_k + reg_param * S``, where `S` is the
        pooled within-class covariance.

    shrinkage : float, default=None
        Shrinkage of each class covariance toward its average eigenvalue
        times the identity, between 0 and 1, applied after `reg_param`.
        None disables shrinkage.

    store_covariance : bool, default=False
        If True, the class covariance matrices are explicitly computed and
        stored in the `self.covariance_` attribute.

    Attributes
    ----------
    covariance_ : list of len n_classes of ndarray \
            of shape (n_features, n_features)
        For each class, the regularized covariance matrix. The estimations
        are unbiased. Only present if `store_covariance` is True.

    determinants_ : ndarray of shape (n_classes,)
        Determinant of each regularized class covariance matrix.

    means_ : ndarray of shape (n_classes, n_features)
        Class-wise means.

    priors_ : ndarray of shape (n_classes,)
        Class priors (sum to 1).

    whitenings_ : list of len n_classes of ndarray \
            of shape (n_features, n_features)
        For each class, the whitening matrix of its covariance.

    classes_ : ndarray of shape (n_classes,)
        Unique class labels.

    n_features_in_ : int
        Number of features seen during :term:`fit`.

    See Also
    --------
    LinearDiscriminantAnalysis : Linear Discriminant Analysis.

    Examples
    --------
    >>> from regda.discriminant_analysis import QuadraticDiscriminantAnalysis
    >>> import numpy as np
    >>> X = np.array([[-1, -1], [-2, -1], [-3, -2], [1, 1], [2, 1], [3, 2]])
    >>> y = np.array([1, 1, 1, 2, 2, 2])
    >>> clf = QuadraticDiscriminantAnalysis()
    >>> clf.fit(X, y)
    QuadraticDiscriminantAnalysis()
    >>> print(clf.predict([[-0.8, -1]]))
    [1]
    """

    _parameter_constraints: dict = {
        "priors": ["array-like", None],
        "reg_param": [Interval(Real, 0, 1, closed="both")],
        "shrinkage": [Interval(Real, 0, 1, closed="both"), None],
        "store_covariance": ["boolean"],
    }

    def __init__(
        self, *, priors=None, reg_param=0.0, shrinkage=None, store_covariance=False
    ):
        self.priors = priors
        self.reg_param = reg_param
        self.shrinkage = shrinkage
        self.store_covariance = store_covariance

    @_fit_context(prefer_skip_nested_validation=True)
    def fit(self, X, y):
        """Fit the model according to the given training data and parameters.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training vector, where `n_samples` is the number of samples and
            `n_features` is the number of features.

        y : array-like of shape (n_samples,)
            Target values.

        Returns
        -------
        self : object
            Fitted estimator.
        """
        Xc, y = self._fit_class_statistics(X, y)
        n_samples, n_features = Xc.shape
        n_classes = len(self.classes_)
        counts = count_classes(y, n_classes)

        if self.reg_param > 0:
            if n_samples == n_classes:
                raise ValueError(
                    "The number of samples must be more than the number of classes."
                )
            pooled = _scatter_cov(Xc, n_samples - n_classes)

        cov = [] if self.store_covariance else None
        whitenings = []
        determinants = []
        for ind in range(n_classes):
            Xg = Xc[y == ind + 1]
            n_g = counts[ind]
            if self.reg_param == 0:
                if n_g == 1:
                    raise ValueError(
                        "y has only 1 sample in class %s, covariance is ill defined."
                        % str(self.classes_[ind])
                    )
                if cov is not None:
                    cov.append(_scatter_cov(Xg, n_g - 1, self.shrinkage))
                W, det = whiten_data(Xg, self.shrinkage, df=n_g - 1)
            else:
                if n_g <= n_features:
                    warnings.warn(
                        f"Class {self.classes_[ind]} has {n_g} samples for "
                        f"{n_features} features; its covariance relies on "
                        "`reg_param` blending toward the pooled covariance.",
                        linalg.LinAlgWarning,
                    )
                Sg = _scatter_cov(Xg, max(n_g - 1, 1))
                shrink_toward(Sg, pooled, self.reg_param)
                if cov is not None:
                    cov.append(Sg.copy())
                    if self.shrinkage:
                        shrink_toward_identity(cov[-1], self.shrinkage)
                # whiten_cov overwrites Sg
                W, det = whiten_cov(Sg, self.shrinkage)
            whitenings.append(W)
            determinants.append(det)

        if cov is not None:
            self.covariance_ = cov
        self.whitenings_ = whitenings
        self.determinants_ = np.asarray(determinants)
        return self

    def _whitening_pairs(self):
        return zip(self.whitenings_, self.determinants_)


def discriminants(model, Z):
    """Gaussian discriminant scores of a fitted model.

    The score of observation ``z`` for class ``k`` is
    ``-1/2 ||W_k^T (z - mu_k)||^2 - 1/2 log det S_k + log pi_k``.

    Parameters
    ----------
    model : LinearDiscriminantAnalysis or QuadraticDiscriminantAnalysis
        Fitted model.

    Z : array-like of shape (n_samples, n_features)
        Observations, one per row.

    Returns
    -------
    scores : ndarray of shape (n_samples, n_classes)
        Scores, one column per class in the order of ``model.classes_``.
    """
    return model._decision_function(Z)


def classify(model, Z):
    """Class index in ``1..n_classes`` with the largest discriminant score.

    Ties go to the lowest index. ``model.classes_[classify(model, Z) - 1]``
    gives the class labels.

    Parameters
    ----------
    model : LinearDiscriminantAnalysis or QuadraticDiscriminantAnalysis
        Fitted model.

    Z : array-like of shape (n_samples, n_features)
        Observations, one per row.

    Returns
    -------
    indices : ndarray of shape (n_samples,)
        One-based class indices.
    """
    return discriminants(model, Z).argmax(axis=1) + 1
