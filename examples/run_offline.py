"""Offline example: single-dataset, ensemble and per-subject (fan-out) procedures on synthetic data."""

from __future__ import annotations

import logging

import numpy as np

from clf_framework.classifiers import LDAClassifier, RegularizedFDA
from clf_framework.datasets import make_separable_binary, make_subject_collection
from clf_framework.domain_adaptation import PooledZScore
from clf_framework.pipelines import Pipeline, build_pipeline
from clf_framework.preprocessing import PCAnalyzer
from clf_framework.utils.config_loader import get_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def _accuracy(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(np.mean(np.asarray(y_true) == np.asarray(y_pred)))


def run_offline() -> None:
    X, y = make_separable_binary(n_examples=40, n_features=6, random_state=0)
    X_test, y_test = make_separable_binary(n_examples=20, n_features=6, random_state=1)

    pipe = build_pipeline(get_config()).train(X, y)
    print(f"{pipe.signature()}: test accuracy {_accuracy(y_test, pipe.predict(X_test)):.3f}")

    ensemble = Pipeline(
        [PCAnalyzer(proportion=2), [RegularizedFDA(), RegularizedFDA(kernel="rbf", kernel_parameter=2.0), LDAClassifier()]],
        verbose=True,
    ).train(X, y)
    for member, pred in zip(ensemble.stages[-1].members, ensemble.predict(X_test)):
        print(f"  {type(member).__name__}: {_accuracy(y_test, pred):.3f}")

    subjects, labels = make_subject_collection(n_subjects=4, n_examples=30, random_state=2)
    transfer = Pipeline([PooledZScore(), PCAnalyzer(proportion=0.9), RegularizedFDA()], max_parallel=4)
    fitted = transfer.train(subjects, labels)
    for s, (pred, lab) in enumerate(zip(fitted.predict(subjects), labels)):
        print(f"  subject {s}: training accuracy {_accuracy(lab, pred):.3f}")


if __name__ == "__main__":
    run_offline()
