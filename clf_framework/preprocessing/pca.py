"""Principal component analysis (variance-reduction transform).

Centers the data (ignoring missing values when estimating the mean), projects onto
the orthogonal variance-maximising basis and keeps a prefix of the components:

* ``proportion=None``: all components,
* ``0 < proportion < 1``: smallest k whose cumulative explained variance exceeds it,
* ``proportion >= 1``: exactly that many components, zero-variance ones included
  (at most one per feature).

Given a collection of datasets directly, one independent PCA is fitted per dataset.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any

import numpy as np
from scipy.linalg import null_space
from sklearn.utils.extmath import svd_flip

from clf_framework.datasets.base import broadcast_labels, is_collection
from clf_framework.stages.base import Preprocessor
from clf_framework.stages.errors import InvalidInputError

logger = logging.getLogger(__name__)


class PCAnalyzer(Preprocessor):
    """PCA projection onto the leading principal components."""

    name = "pca"

    def __init__(self, proportion: float | int | None = None, verbose: bool = False, **kwargs: Any) -> None:
        super().__init__(verbose=verbose, proportion=proportion, **kwargs)
        if proportion is not None:
            if proportion <= 0:
                raise InvalidInputError(f"PCA proportion must be > 0; got {proportion}")
            if proportion >= 1 and float(proportion) != int(proportion):
                raise InvalidInputError(f"PCA component count must be an integer; got {proportion}")
        self.proportion = proportion
        self.means_: np.ndarray | None = None
        self.components_: np.ndarray | None = None  # (n_features, k) as column vectors
        self.explained_variance_: np.ndarray | None = None
        self.explained_variance_ratio_: np.ndarray | None = None
        self.scores_: np.ndarray | None = None  # training data in the retained basis
        self.per_dataset_: list[PCAnalyzer] | None = None

    def _n_retained(self, ratio: np.ndarray) -> int:
        n_features = len(ratio)
        if self.proportion is None:
            return n_features
        if self.proportion >= 1:
            k = int(self.proportion)
            if k > n_features:
                raise InvalidInputError(
                    f"PCA: requested {k} components but the data has only {n_features} features"
                )
            return k
        above = np.flatnonzero(np.cumsum(ratio) > self.proportion)
        return int(above[0]) + 1 if len(above) else n_features

    def _fit(self, data: Any, labels: Any) -> None:
        if is_collection(data):
            self.per_dataset_ = [
                PCAnalyzer(proportion=self.proportion, verbose=self.verbose).train(d, lab)
                for d, lab in zip(data, broadcast_labels(labels, len(data)))
            ]
            return

        X, _ = self._validate_train(data, labels)
        n = X.shape[0]
        if n < 2:
            raise InvalidInputError(f"PCA needs at least 2 examples; got {n}")

        # all-NaN columns yield a NaN mean (with a RuntimeWarning); those are centred at 0
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=RuntimeWarning)
            means = np.nanmean(X, axis=0)
        self.means_ = np.where(np.isnan(means), 0.0, means)
        Xc = self._center(X)

        U, S, Vt = np.linalg.svd(Xc, full_matrices=False)
        U, Vt = svd_flip(U, Vt)
        n_features = X.shape[1]
        if Vt.shape[0] < n_features:
            # fewer examples than features: complete the basis with zero-variance directions
            Vt = np.vstack([Vt, null_space(Vt).T])
        ev = np.zeros(n_features)
        ev[: len(S)] = S ** 2 / (n - 1)
        total = float(np.sum(ev))
        ratio = ev / total if total > 0 else np.zeros_like(ev)

        k = self._n_retained(ratio)
        log = logger.info if self.verbose else logger.debug
        log("selected %d principal components", k)

        self.components_ = Vt[:k].T.copy()
        self.explained_variance_ = ev[:k]
        self.explained_variance_ratio_ = ratio[:k]
        self.scores_ = Xc @ self.components_

    def _center(self, X: np.ndarray) -> np.ndarray:
        # missing values sit at the mean after centering
        return np.nan_to_num(X - self.means_, nan=0.0)

    def test(self, data: Any) -> Any:
        if self.per_dataset_ is not None:
            self._check_fitted()
            if not is_collection(data) or len(data) != len(self.per_dataset_):
                n = len(data) if is_collection(data) else 1
                raise InvalidInputError(
                    f"PCA was fitted per dataset on {len(self.per_dataset_)} datasets; got {n}"
                )
            return [p.test(d) for p, d in zip(self.per_dataset_, data)]
        if is_collection(data):
            return [self.test(d) for d in data]
        X = self._validate_test(data)
        return self._center(X) @ self.components_

    @property
    def n_components_(self) -> int | None:
        return None if self.components_ is None else self.components_.shape[1]

    def summary(self) -> dict[str, Any]:
        out = super().summary()
        if self.per_dataset_ is not None:
            out["n_components"] = [p.n_components_ for p in self.per_dataset_]
        else:
            out["n_components"] = self.n_components_
            if self.explained_variance_ratio_ is not None:
                out["explained_variance"] = float(np.sum(self.explained_variance_ratio_))
        return out
