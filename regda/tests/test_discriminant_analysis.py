import warnings

import numpy as np
import pytest
from scipy import linalg

from sklearn import discriminant_analysis as sk_da
from sklearn.base import clone
from sklearn.datasets import make_blobs
from sklearn.utils._testing import (
    _convert_container,
    assert_allclose,
    assert_array_almost_equal,
    assert_array_equal,
)

from regda.discriminant_analysis import (
    LinearDiscriminantAnalysis,
    QuadraticDiscriminantAnalysis,
    classify,
    discriminants,
)
from regda.exceptions import DimensionMismatch, DomainViolation, RankDeficiency

# Data is just 6 separable points in the plane
X = np.array([[-2, -1], [-1, -1], [-1, -2], [1, 1], [1, 2], [2, 1]], dtype="f")
y = np.array([1, 1, 1, 2, 2, 2])
y3 = np.array([1, 1, 2, 2, 3, 3])

# Degenerate data with only one feature (still should be separable)
X1 = np.array(
    [[-2], [-1], [-1], [1], [1], [2]],
    dtype="f",
)

# Data is just 9 separable points in the plane
X6 = np.array(
    [[0, 0], [-2, -2], [-2, -1], [-1, -1], [-1, -2], [1, 3], [1, 2], [2, 1], [2, 2]]
)
y6 = np.array([1, 1, 1, 1, 1, 2, 2, 2, 2])
y7 = np.array([1, 2, 3, 2, 3, 1, 2, 3, 1])

# Degenerate data with 1 feature (still should be separable)
X7 = np.array([[-3], [-2], [-1], [-1], [0], [1], [1], [2], [3]])

# Data that has zero variance in one dimension and needs regularization
X2 = np.array(
    [[-3, 0], [-2, 0], [-1, 0], [-1, 0], [0, 0], [1, 0], [1, 0], [2, 0], [3, 0]]
)

# One element class
y4 = np.array([1, 1, 1, 1, 1, 1, 1, 1, 2])

# Data with less samples in a class than n_features
X5 = np.c_[np.arange(8), np.zeros((8, 3))]
y5 = np.array([0, 0, 0, 0, 0, 1, 1, 1])

ESTIMATORS = [
    pytest.param(LinearDiscriminantAnalysis, id="LinearDiscriminantAnalysis"),
    pytest.param(QuadraticDiscriminantAnalysis, id="QuadraticDiscriminantAnalysis"),
]


@pytest.mark.parametrize("shrinkage", [None, 0, 0.43])
def test_lda_predict(shrinkage):
    # Test LDA classification.
    # This checks that LDA implements fit and predict and returns correct
    # values for simple toy data.
    clf = LinearDiscriminantAnalysis(shrinkage=shrinkage)
    y_pred = clf.fit(X, y).predict(X)
    assert_array_equal(y_pred, y)

    # Assert that it works with 1D data
    y_pred1 = clf.fit(X1, y).predict(X1)
    assert_array_equal(y_pred1, y)

    # Test probability estimates
    y_proba_pred1 = clf.predict_proba(X1)
    assert_array_equal((y_proba_pred1[:, 1] > 0.5) + 1, y)
    y_log_proba_pred1 = clf.predict_log_proba(X1)
    assert_allclose(np.exp(y_log_proba_pred1), y_proba_pred1, rtol=1e-6, atol=1e-6)


def test_lda_whitening_matches_covariance():
    clf = LinearDiscriminantAnalysis(store_covariance=True).fit(X6, y6)
    Xc = X6 - clf.means_[y6 - 1]
    assert_allclose(clf.covariance_, Xc.T @ Xc / (9 - 2))

    W = clf.whitening_
    assert_allclose(W.T @ clf.covariance_ @ W, np.eye(2), atol=1e-10)
    assert_allclose(clf.determinant_, np.linalg.det(clf.covariance_))


def test_lda_shrinkage_covariance():
    clf = LinearDiscriminantAnalysis(shrinkage=0.3, store_covariance=True)
    clf.fit(X6, y6)
    W = clf.whitening_
    assert_allclose(W.T @ clf.covariance_ @ W, np.eye(2), atol=1e-10)
    assert_allclose(clf.determinant_, np.linalg.det(clf.covariance_))


def test_lda_shrinkage_zero_matches_no_shrinkage():
    blobs, labels = make_blobs(n_samples=90, n_features=3, centers=3, random_state=0)
    scores = discriminants(LinearDiscriminantAnalysis().fit(blobs, labels), blobs)
    scores0 = discriminants(
        LinearDiscriminantAnalysis(shrinkage=0).fit(blobs, labels), blobs
    )
    assert_allclose(scores0, scores, rtol=1e-8, atol=1e-8)


def test_lda_matches_sklearn_predictions():
    # with balanced classes the decision rule does not depend on the
    # covariance normalization
    blobs, labels = make_blobs(n_samples=300, n_features=4, centers=3, random_state=0)
    ours = LinearDiscriminantAnalysis().fit(blobs, labels)
    theirs = sk_da.LinearDiscriminantAnalysis(solver="lsqr").fit(blobs, labels)
    assert_array_equal(ours.predict(blobs), theirs.predict(blobs))
    assert_allclose(ours.means_, theirs.means_)
    assert_allclose(ours.priors_, theirs.priors_)


def test_qda_matches_gaussian_log_likelihood():
    blobs, labels = make_blobs(n_samples=200, n_features=3, centers=4, random_state=1)
    clf = QuadraticDiscriminantAnalysis().fit(blobs, labels)

    expected = np.empty((blobs.shape[0], 4))
    for k, c in enumerate(clf.classes_):
        Xk = blobs[labels == c]
        diff = blobs - Xk.mean(axis=0)
        S = np.cov(Xk, rowvar=False, ddof=1)
        _, logdet = np.linalg.slogdet(S)
        expected[:, k] = (
            -0.5 * np.einsum("ij,jk,ik->i", diff, np.linalg.inv(S), diff)
            - 0.5 * logdet
            + np.log(Xk.shape[0] / blobs.shape[0])
        )

    assert_allclose(clf.decision_function(blobs), expected, rtol=1e-8, atol=1e-8)
    assert_array_equal(clf.predict(blobs), clf.classes_[expected.argmax(axis=1)])


def test_lda_priors():
    clf = LinearDiscriminantAnalysis(priors=[0.2, 0.8]).fit(X, y)
    assert_allclose(clf.priors_, [0.2, 0.8])

    clf = LinearDiscriminantAnalysis(priors=[0.5, 0.3, 0.3])
    with pytest.raises(DomainViolation, match="sum to 1"):
        clf.fit(X, y3)

    clf = LinearDiscriminantAnalysis(priors=[0.5, -0.1, 0.6])
    with pytest.raises(DomainViolation, match="positive"):
        clf.fit(X, y3)

    clf = LinearDiscriminantAnalysis(priors=[0.5, 0.5])
    with pytest.raises(DimensionMismatch):
        clf.fit(X, y3)


@pytest.mark.parametrize("estimator", ESTIMATORS)
def test_dtype_match(estimator):
    for data_type, expected_type in [
        (np.float32, np.float32),
        (np.float64, np.float64),
        (np.int32, np.float64),
        (np.int64, np.float64),
    ]:
        clf = estimator().fit(X6.astype(data_type), y6)
        assert clf.means_.dtype == expected_type
        assert clf.priors_.dtype == expected_type


def test_lda_raises_on_same_number_of_classes_and_samples():
    X = np.array([[0.5, 0.6], [0.6, 0.5]])
    y = np.array(["a", "b"])
    clf = LinearDiscriminantAnalysis()
    with pytest.raises(ValueError, match="The number of samples must be more"):
        clf.fit(X, y)


@pytest.mark.parametrize("estimator", ESTIMATORS)
def test_single_class_raises(estimator):
    with pytest.raises(ValueError, match="number of classes has to be greater"):
        estimator().fit(X6, np.ones(9))


@pytest.mark.parametrize("estimator", ESTIMATORS)
def test_invalid_shrinkage(estimator):
    with pytest.raises(ValueError):
        estimator(shrinkage=1.5).fit(X6, y6)


def test_lda_too_few_samples():
    # 3 samples, 2 classes, 4 features
    X = np.arange(12, dtype=float).reshape(3, 4)
    with pytest.raises(RankDeficiency):
        LinearDiscriminantAnalysis().fit(X, [1, 1, 2])


@pytest.mark.parametrize("estimator", ESTIMATORS)
def test_discriminants_and_classify(estimator):
    clf = estimator().fit(X6, y7)
    scores = discriminants(clf, X6)
    assert scores.shape == (9, 3)
    assert_array_equal(clf.classes_[classify(clf, X6) - 1], clf.predict(X6))

    # binary models keep one score column per class
    clf = estimator().fit(X6, y6)
    scores = discriminants(clf, X6)
    assert scores.shape == (9, 2)
    assert_allclose(scores[:, 1] - scores[:, 0], clf.decision_function(X6))


def test_discriminants_formula():
    clf = QuadraticDiscriminantAnalysis(store_covariance=True).fit(X6, y6)
    scores = discriminants(clf, X6)
    for k in range(2):
        diff = X6 - clf.means_[k]
        S_inv = np.linalg.inv(clf.covariance_[k])
        expected = (
            -0.5 * np.einsum("ij,jk,ik->i", diff, S_inv, diff)
            - 0.5 * np.log(np.linalg.det(clf.covariance_[k]))
            + np.log(clf.priors_[k])
        )
        assert_allclose(scores[:, k], expected, atol=1e-10)


def test_classify_ties_lowest_index():
    # the origin is equidistant from both centroids and priors are equal
    clf = LinearDiscriminantAnalysis().fit(X, y)
    assert_array_equal(classify(clf, [[0, 0]]), [1])


def test_qda():
    # QDA classification.
    # This checks that QDA implements fit and predict and returns
    # correct values for a simple toy dataset.
    clf = QuadraticDiscriminantAnalysis()
    y_pred = clf.fit(X6, y6).predict(X6)
    assert_array_equal(y_pred, y6)

    # Assure that it works with 1D data
    y_pred1 = clf.fit(X7, y6).predict(X7)
    assert_array_equal(y_pred1, y6)

    # Test probas estimates
    y_proba_pred1 = clf.predict_proba(X7)
    assert_array_equal((y_proba_pred1[:, 1] > 0.5) + 1, y6)
    y_log_proba_pred1 = clf.predict_log_proba(X7)
    assert_array_almost_equal(np.exp(y_log_proba_pred1), y_proba_pred1, 8)

    y_pred3 = clf.fit(X6, y7).predict(X6)
    # QDA shouldn't be able to separate those
    assert np.any(y_pred3 != y7)

    # Classes should have at least 2 elements
    with pytest.raises(ValueError, match="only 1 sample in class 2"):
        clf.fit(X6, y4)


def test_qda_priors():
    clf = QuadraticDiscriminantAnalysis()
    y_pred = clf.fit(X6, y6).predict(X6)
    n_pos = np.sum(y_pred == 2)

    neg = 1e-10
    clf = QuadraticDiscriminantAnalysis(priors=np.array([neg, 1 - neg]))
    y_pred = clf.fit(X6, y6).predict(X6)
    n_pos2 = np.sum(y_pred == 2)

    assert n_pos2 > n_pos


@pytest.mark.parametrize("priors_type", ["list", "tuple", "array"])
def test_qda_prior_type(priors_type):
    """Check that priors accept array-like."""
    priors = [0.5, 0.5]
    clf = QuadraticDiscriminantAnalysis(
        priors=_convert_container([0.5, 0.5], priors_type)
    ).fit(X6, y6)
    assert isinstance(clf.priors_, np.ndarray)
    assert_array_equal(clf.priors_, priors)


def test_qda_prior_copy():
    """Check that altering `priors` without `fit` doesn't change `priors_`"""
    priors = np.array([0.5, 0.5])
    qda = QuadraticDiscriminantAnalysis(priors=priors).fit(X, y)

    # we expect the following
    assert_array_equal(qda.priors_, qda.priors)

    # altering `priors` without `fit` should not change `priors_`
    priors[0] = 0.2
    assert qda.priors_[0] != qda.priors[0]


def test_qda_store_covariance():
    # The default is to not set the covariances_ attribute
    clf = QuadraticDiscriminantAnalysis().fit(X6, y6)
    assert not hasattr(clf, "covariance_")

    # Test the actual attribute:
    clf = QuadraticDiscriminantAnalysis(store_covariance=True).fit(X6, y6)
    assert hasattr(clf, "covariance_")

    assert_array_almost_equal(clf.covariance_[0], np.array([[0.7, 0.45], [0.45, 0.7]]))

    assert_array_almost_equal(
        clf.covariance_[1],
        np.array([[0.33333333, -0.33333333], [-0.33333333, 0.66666667]]),
    )
    for W, det, cov in zip(clf.whitenings_, clf.determinants_, clf.covariance_):
        assert_allclose(W.T @ cov @ W, np.eye(2), atol=1e-10)
        assert_allclose(det, np.linalg.det(cov))


@pytest.mark.parametrize("shrinkage", [None, 0.2])
def test_qda_reg_param_blends_toward_pooled(shrinkage):
    clf = QuadraticDiscriminantAnalysis(
        reg_param=0.4, shrinkage=shrinkage, store_covariance=True
    ).fit(X6, y6)
    pooled = (
        LinearDiscriminantAnalysis(store_covariance=True).fit(X6, y6).covariance_
    )
    unregularized = QuadraticDiscriminantAnalysis(store_covariance=True).fit(X6, y6)

    for k in range(2):
        expected = 0.6 * unregularized.covariance_[k] + 0.4 * pooled
        if shrinkage:
            expected = 0.8 * expected + 0.2 * np.trace(expected) / 2 * np.eye(2)
        assert_allclose(clf.covariance_[k], expected)
        W = clf.whitenings_[k]
        assert_allclose(W.T @ expected @ W, np.eye(2), atol=1e-10)
        assert_allclose(clf.determinants_[k], np.linalg.det(expected))

    # full blending gives linear discriminant analysis
    qda = QuadraticDiscriminantAnalysis(reg_param=1.0).fit(X6, y6)
    lda = LinearDiscriminantAnalysis().fit(X6, y6)
    assert_allclose(discriminants(qda, X6), discriminants(lda, X6), atol=1e-10)


def test_qda_regularization():
    # The default reg_param=0. fails when there is a constant variable.
    clf = QuadraticDiscriminantAnalysis()
    with pytest.raises(RankDeficiency):
        clf.fit(X2, y6)

    # Adding a little shrinkage fixes the fit time error.
    clf = QuadraticDiscriminantAnalysis(shrinkage=0.01)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        clf.fit(X2, y6)
    y_pred = clf.predict(X2)
    assert_array_equal(y_pred, y6)

    # Constant features
    clf = QuadraticDiscriminantAnalysis()
    with pytest.raises(RankDeficiency):
        clf.fit(X5, y5)

    # Blending toward a singular pooled covariance does not help
    clf = QuadraticDiscriminantAnalysis(reg_param=0.3)
    with pytest.raises(RankDeficiency):
        clf.fit(X5, y5)

    # ... unless it is also shrunk, and small classes are reported
    msg = "Class 1 has 3 samples for 4 features"
    clf = QuadraticDiscriminantAnalysis(reg_param=0.3, shrinkage=0.1)
    with pytest.warns(linalg.LinAlgWarning, match=msg):
        clf.fit(X5, y5)
    assert_array_equal(clf.predict(X5), y5)


@pytest.mark.parametrize("estimator", ESTIMATORS)
def test_clone(estimator):
    clf = estimator(priors=[0.5, 0.5], shrinkage=0.1)
    cloned = clone(clf)
    assert cloned.get_params() == clf.get_params()
