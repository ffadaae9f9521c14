"""Stage contract: train(data, labels) -> fitted copy, test(data) -> transformed data.

Predictors (classifiers, regressors) additionally expose predict(data) -> labels.
Training never mutates the receiver: it returns a deep copy holding the fitted
parameters, so a pipeline can replace entries without aliasing a stage across slots.
"""

from __future__ import annotations

import copy
import importlib.util
import logging
from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from clf_framework.datasets.base import as_label_vector, collapse, is_collection, n_examples

from .errors import CapabilityError, InvalidInputError, NotFittedError

logger = logging.getLogger(__name__)


class Stage(ABC):
    """Abstract pipeline element."""

    name: str = "base"
    # Joint-mode stages receive the whole dataset collection at once (transfer learning).
    consumes_collection: bool = False
    # Importable modules this stage needs; checked when a pipeline is built.
    requires: tuple[str, ...] = ()

    def __init__(self, verbose: bool = False, **kwargs: Any) -> None:
        self.verbose = verbose
        self.params = kwargs
        self._fitted = False
        self.n_features_in_: int | None = None

    def train(self, data: Any, labels: Any = None) -> "Stage":
        """Return a fitted copy of this stage. The receiver and the data are left untouched."""
        fitted = copy.deepcopy(self)
        fitted._fit(data, labels)
        fitted._fitted = True
        return fitted

    @abstractmethod
    def _fit(self, data: Any, labels: Any) -> None:
        """Populate fitted attributes in place (called on the copy made by train)."""

    @abstractmethod
    def test(self, data: Any) -> Any:
        """Transform data with the fitted parameters."""

    @property
    def is_fitted(self) -> bool:
        return self._fitted

    def check_requirements(self) -> None:
        """Raise CapabilityError if a required module cannot be imported."""
        for module in self.requires:
            if importlib.util.find_spec(module) is None:
                raise CapabilityError(f"{type(self).__name__} requires '{module}', which is not installed")

    def summary(self) -> dict[str, Any]:
        """Fitted diagnostics reported by verbose pipelines."""
        return {"n_features_in": self.n_features_in_}

    def get_model(self) -> dict[str, Any]:
        """Fitted parameters (public attributes with a trailing underscore)."""
        return {
            k: v for k, v in vars(self).items()
            if k.endswith("_") and not k.startswith("_")
        }

    def _check_fitted(self) -> None:
        if not self._fitted:
            raise NotFittedError(f"{type(self).__name__} is not trained; call train() first")

    def _validate_train(self, data: Any, labels: Any) -> tuple[np.ndarray, np.ndarray | None]:
        X = collapse(data)
        y = None
        if labels is not None:
            y = as_label_vector(labels)
            if len(y) != X.shape[0]:
                raise InvalidInputError(
                    f"{type(self).__name__}: got {len(y)} labels for {X.shape[0]} examples"
                )
        self.n_features_in_ = X.shape[1]
        return X, y

    def _validate_test(self, data: Any) -> np.ndarray:
        self._check_fitted()
        X = collapse(data)
        if self.n_features_in_ is not None and X.shape[1] != self.n_features_in_:
            raise InvalidInputError(
                f"{type(self).__name__} was trained on {self.n_features_in_} features; got {X.shape[1]}"
            )
        return X

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(params={self.params})"


class Preprocessor(Stage):
    """Unsupervised or supervised transform feeding the next stage."""


class Predictor(Stage):
    """A stage whose native output can be turned into label decisions."""

    @abstractmethod
    def predict(self, data: Any) -> np.ndarray:
        """Hard decisions for each example."""


class Classifier(Predictor):
    """Predictor whose test() output is an (n_examples, n_classes) posterior matrix."""

    def __init__(self, verbose: bool = False, **kwargs: Any) -> None:
        super().__init__(verbose=verbose, **kwargs)
        self.classes_: np.ndarray | None = None

    def predict(self, data: Any) -> np.ndarray:
        """Class of the largest posterior column."""
        if is_collection(data):
            return [self.predict(d) for d in data]
        if n_examples(data) == 0:
            return np.empty(0, dtype=self.classes_.dtype if self.classes_ is not None else np.int64)
        post = np.asarray(self.test(data))
        return self.classes_[np.argmax(post, axis=1)]

    def summary(self) -> dict[str, Any]:
        out = super().summary()
        out["classes"] = None if self.classes_ is None else self.classes_.tolist()
        return out


class Regressor(Predictor):
    """Predictor whose test() output is an (n_examples, 1) matrix of real values."""

    def predict(self, data: Any) -> np.ndarray:
        if is_collection(data):
            return [self.predict(d) for d in data]
        if n_examples(data) == 0:
            return np.empty(0, dtype=np.float64)
        return np.asarray(self.test(data), dtype=np.float64).reshape(-1)
