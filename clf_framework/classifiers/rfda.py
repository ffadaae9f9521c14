"""Regularized (kernel) Fisher discriminant analysis for two-class problems.

Dual formulation: solve (B K + C I) alpha = y, where K is the kernel matrix of the
training examples, y in {-1, +1} and B is a within-class centering matrix whose
weights correct for class-size imbalance. The threshold is the midpoint of the
projected class means divided by the number of training examples, so it is 0 for
balanced, centred data. All training examples are kept as support data.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from clf_framework.datasets.base import is_collection
from clf_framework.stages.base import Classifier
from clf_framework.stages.errors import InvalidInputError

from .kernels import KERNELS, kernel_matrix

logger = logging.getLogger(__name__)


class RegularizedFDA(Classifier):
    """Binary kernel discriminant; test() returns a two-column one-hot posterior."""

    name = "rfda"

    def __init__(
        self,
        kernel: str = "linear",
        kernel_parameter: float = 1.0,
        C: float = 1.0,
        verbose: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(verbose=verbose, kernel=kernel, kernel_parameter=kernel_parameter, C=C, **kwargs)
        if kernel not in KERNELS:
            raise InvalidInputError(f"Unknown kernel type '{kernel}'. Available: {list(KERNELS)}")
        if C <= 0:
            raise InvalidInputError(f"Regularization C must be > 0; got {C}")
        if kernel == "rbf" and kernel_parameter <= 0:
            raise InvalidInputError(f"rbf kernel width must be > 0; got {kernel_parameter}")
        self.kernel = kernel
        self.kernel_parameter = kernel_parameter
        self.C = C
        self.alpha_: np.ndarray | None = None
        self.bias_: float = 0.0
        self.support_: np.ndarray | None = None

    def _fit(self, data: Any, labels: Any) -> None:
        X, y = self._validate_train(data, labels)
        if y is None:
            raise InvalidInputError("RegularizedFDA needs labels")
        classes = np.unique(y)
        if len(classes) != 2:
            raise InvalidInputError(
                f"RegularizedFDA is only valid for two-class problems; got {len(classes)} classes {classes.tolist()}"
            )
        self.classes_ = classes
        t = np.where(y == classes[0], -1.0, 1.0)

        K = kernel_matrix(self.kernel, X, X, self.kernel_parameter)
        ell = K.shape[0]
        n_plus = float(np.sum(t > 0))
        n_minus = ell - n_plus
        y_plus = 0.5 * (t + 1.0)
        y_minus = y_plus - t
        rescale = 1.0 + t * ((n_minus - n_plus) / ell)
        plus_factor = 2.0 * n_minus / (ell * n_plus)
        minus_factor = 2.0 * n_plus / (ell * n_minus)
        B = (
            np.diag(rescale)
            - plus_factor * np.outer(y_plus, y_plus)
            - minus_factor * np.outer(y_minus, y_minus)
        )
        self.alpha_ = np.linalg.solve(B @ K + self.C * np.eye(ell), t)
        self.bias_ = float(0.25 * (self.alpha_ @ K @ rescale) / (n_plus * n_minus))
        self.support_ = X.copy()
        logger.debug(
            "RFDA fitted: kernel=%s, n_support=%d, bias=%.6f", self.kernel, ell, self.bias_
        )

    def decision_function(self, data: Any) -> np.ndarray:
        """Signed distance to the threshold; > 0 means the second class."""
        X = self._validate_test(data)
        K_test = kernel_matrix(self.kernel, self.support_, X, self.kernel_parameter)
        return K_test.T @ self.alpha_ - self.bias_

    def test(self, data: Any) -> Any:
        if is_collection(data):
            return [self.test(d) for d in data]
        positive = self.decision_function(data) > 0
        post = np.zeros((len(positive), 2), dtype=np.float64)
        post[~positive, 0] = 1.0
        post[positive, 1] = 1.0
        return post

    def get_model(self) -> dict[str, Any]:
        return {"alpha": self.alpha_, "bias": self.bias_, "classes": self.classes_}

    def summary(self) -> dict[str, Any]:
        out = super().summary()
        out["n_support"] = None if self.support_ is None else int(self.support_.shape[0])
        return out
