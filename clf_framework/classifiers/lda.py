"""LDA classifier."""

from typing import Any

import numpy as np

from clf_framework.datasets.base import is_collection
from clf_framework.stages.base import Classifier
from clf_framework.stages.errors import InvalidInputError


class LDAClassifier(Classifier):
    """Linear Discriminant Analysis (multi-class); test() returns class posteriors."""

    name = "lda"
    requires = ("sklearn",)

    def __init__(self, solver: str = "svd", shrinkage: float | str | None = None, verbose: bool = False, **kwargs: Any) -> None:
        super().__init__(verbose=verbose, solver=solver, shrinkage=shrinkage, **kwargs)
        self.solver = solver
        self.shrinkage = shrinkage
        self._clf = None

    def _fit(self, data: Any, labels: Any) -> None:
        from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
        X, y = self._validate_train(data, labels)
        if y is None or len(np.unique(y)) < 2:
            raise InvalidInputError("LDA needs labels from at least two classes")
        self._clf = LinearDiscriminantAnalysis(solver=self.solver, shrinkage=self.shrinkage)
        self._clf.fit(X, y)
        self.classes_ = self._clf.classes_

    def test(self, data: Any) -> Any:
        if is_collection(data):
            return [self.test(d) for d in data]
        X = self._validate_test(data)
        return self._clf.predict_proba(X).astype(np.float64)

    def get_model(self) -> dict[str, Any]:
        return {"coef": self._clf.coef_, "intercept": self._clf.intercept_, "classes": self.classes_}
