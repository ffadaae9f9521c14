"""Per-feature z-score standardization."""

from __future__ import annotations

from typing import Any

import numpy as np

from clf_framework.datasets.base import is_collection
from clf_framework.stages.base import Preprocessor


class ZScoreStandardizer(Preprocessor):
    """Subtract the training mean and divide by the training std of each feature."""

    name = "zscore"

    def __init__(self, eps: float = 1e-10, verbose: bool = False, **kwargs: Any) -> None:
        super().__init__(verbose=verbose, eps=eps, **kwargs)
        self.eps = eps
        self.mean_: np.ndarray | None = None
        self.std_: np.ndarray | None = None

    def _fit(self, data: Any, labels: Any) -> None:
        X, _ = self._validate_train(data, labels)
        self.mean_ = np.mean(X, axis=0)
        std = np.std(X, axis=0)
        std[std < self.eps] = 1.0
        self.std_ = std

    def test(self, data: Any) -> Any:
        if is_collection(data):
            return [self.test(d) for d in data]
        X = self._validate_test(data)
        return (X - self.mean_) / self.std_
