"""Stage contract: train returns a fitted copy, test is pure, shape checks."""

import numpy as np
import pytest

from clf_framework.classifiers import LDAClassifier, RegularizedFDA
from clf_framework.datasets import Dataset, collapse, make_separable_binary
from clf_framework.preprocessing import ZScoreStandardizer
from clf_framework.regressors import RidgeRegressor
from clf_framework.stages import (
    CapabilityError,
    InvalidInputError,
    NotFittedError,
    Preprocessor,
)


@pytest.fixture
def binary():
    return make_separable_binary(n_examples=20, n_features=4, random_state=0)


def test_train_returns_new_fitted_instance(binary):
    X, y = binary
    X_before = X.copy()
    stage = ZScoreStandardizer()
    fitted = stage.train(X, y)
    assert fitted is not stage
    assert fitted.is_fitted
    assert not stage.is_fitted
    assert stage.mean_ is None
    np.testing.assert_array_equal(X, X_before)


def test_test_on_unfitted_stage_fails(binary):
    X, _ = binary
    with pytest.raises(NotFittedError, match="not trained"):
        RegularizedFDA().test(X)


def test_feature_dimension_mismatch(binary):
    X, y = binary
    fitted = ZScoreStandardizer().train(X, y)
    with pytest.raises(InvalidInputError, match="trained on 4 features"):
        fitted.test(X[:, :3])


def test_label_count_mismatch(binary):
    X, y = binary
    with pytest.raises(InvalidInputError, match="labels for"):
        ZScoreStandardizer().train(X, y[:-1])


def test_higher_rank_data_is_collapsed():
    rng = np.random.default_rng(1)
    X = rng.standard_normal((6, 2, 3))
    assert collapse(X).shape == (6, 6)
    out = ZScoreStandardizer().train(X, None).test(X)
    assert out.shape == (6, 6)


def test_dataset_container_is_accepted(binary):
    X, y = binary
    ds = Dataset(data=X, labels=y, name="subject-1")
    fitted = ZScoreStandardizer().train(ds, ds.labels)
    np.testing.assert_allclose(fitted.test(ds), fitted.test(X))
    assert ds.n_features == 4 and len(ds) == 20


def test_classifier_predict_returns_original_labels(binary):
    X, y = binary
    clf = LDAClassifier().train(X, y)
    pred = clf.predict(X)
    assert set(np.unique(pred)) <= {1, 2}
    assert clf.test(X).shape == (20, 2)


def test_regressor_predict_is_flat():
    rng = np.random.default_rng(3)
    X = rng.standard_normal((30, 3))
    target = X @ np.array([1.0, -2.0, 0.5]) + 0.01 * rng.standard_normal(30)
    reg = RidgeRegressor(alpha=1e-3).train(X, target)
    assert reg.test(X).shape == (30, 1)
    pred = reg.predict(X)
    assert pred.shape == (30,)
    assert np.corrcoef(pred, target)[0, 1] > 0.99


def test_regressor_on_zero_examples():
    rng = np.random.default_rng(3)
    X = rng.standard_normal((30, 3))
    reg = RidgeRegressor().train(X, X[:, 0])
    assert reg.predict(np.empty((0, 3))).shape == (0,)
    assert reg.test(np.empty((0, 3))).shape == (0, 1)


def test_missing_requirement_raises_capability_error():
    class NeedsMissing(Preprocessor):
        requires = ("clf_framework_missing_module_xyz",)

        def _fit(self, data, labels):
            pass

        def test(self, data):
            return data

    with pytest.raises(CapabilityError, match="clf_framework_missing_module_xyz"):
        NeedsMissing().check_requirements()
