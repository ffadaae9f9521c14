"""Ridge regression."""

from typing import Any

import numpy as np

from clf_framework.datasets.base import is_collection
from clf_framework.stages.base import Regressor
from clf_framework.stages.errors import InvalidInputError


class RidgeRegressor(Regressor):
    """L2-regularized least squares; test() returns an (n_examples, 1) column."""

    name = "ridge"
    requires = ("sklearn",)

    def __init__(self, alpha: float = 1.0, verbose: bool = False, **kwargs: Any) -> None:
        super().__init__(verbose=verbose, alpha=alpha, **kwargs)
        self.alpha = alpha
        self._reg = None

    def _fit(self, data: Any, labels: Any) -> None:
        from sklearn.linear_model import Ridge
        X, y = self._validate_train(data, labels)
        if y is None:
            raise InvalidInputError("RidgeRegressor needs targets")
        self._reg = Ridge(alpha=self.alpha)
        self._reg.fit(X, y.astype(np.float64))

    def test(self, data: Any) -> Any:
        if is_collection(data):
            return [self.test(d) for d in data]
        X = self._validate_test(data)
        if X.shape[0] == 0:
            return np.empty((0, 1), dtype=np.float64)
        return self._reg.predict(X).reshape(-1, 1).astype(np.float64)

    def get_model(self) -> dict[str, Any]:
        return {"coef": self._reg.coef_, "intercept": self._reg.intercept_}
