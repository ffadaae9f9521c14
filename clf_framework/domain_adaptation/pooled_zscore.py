"""Pooled z-score: joint-mode transfer stage over a collection of related datasets."""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from clf_framework.datasets.base import collapse, is_collection, stack_collection
from clf_framework.stages.base import Preprocessor
from clf_framework.stages.errors import InvalidInputError

logger = logging.getLogger(__name__)


class PooledZScore(Preprocessor):
    """
    Standardize every dataset (e.g. subject/session) with statistics pooled over the
    whole collection, so all datasets end up in one shared feature scale.
    Trained once on the entire collection; a single dataset counts as a collection of one.
    """

    name = "pooled_zscore"
    consumes_collection = True

    def __init__(self, eps: float = 1e-10, verbose: bool = False, **kwargs: Any) -> None:
        super().__init__(verbose=verbose, eps=eps, **kwargs)
        self.eps = eps
        self.mean_: np.ndarray | None = None
        self.std_: np.ndarray | None = None
        self.n_datasets_: int | None = None

    def _fit(self, data: Any, labels: Any) -> None:
        datasets = list(data) if is_collection(data) else [data]
        if not datasets:
            raise InvalidInputError("PooledZScore needs at least one dataset")
        dims = {collapse(d).shape[1] for d in datasets}
        if len(dims) != 1:
            raise InvalidInputError(f"All datasets must share feature dimensionality; got {sorted(dims)}")
        X = stack_collection(datasets)
        log = logger.info if self.verbose else logger.debug
        log("[TRANSFER] Pooled fit over %d datasets (%d examples)", len(datasets), X.shape[0])
        self.n_features_in_ = X.shape[1]
        self.n_datasets_ = len(datasets)
        self.mean_ = np.mean(X, axis=0)
        std = np.std(X, axis=0)
        std[std < self.eps] = 1.0
        self.std_ = std

    def test(self, data: Any) -> Any:
        if is_collection(data):
            return [self.test(d) for d in data]
        X = self._validate_test(data)
        return (X - self.mean_) / self.std_

    def summary(self) -> dict[str, Any]:
        out = super().summary()
        out["n_datasets"] = self.n_datasets_
        return out
