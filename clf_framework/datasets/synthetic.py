"""
Synthetic separable datasets for pipeline testing and CI.
Class k is drawn around a class-dependent mean so a linear rule can separate them.
"""

import logging

import numpy as np

from .base import Dataset

logger = logging.getLogger(__name__)


def make_separable_binary(
    n_examples: int = 10,
    n_features: int = 4,
    separation: float = 3.0,
    noise: float = 0.5,
    random_state: int | None = 42,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Two Gaussian blobs at -separation and +separation along every feature.
    Returns (data, labels) with data (n_examples, n_features) and labels in {1, 2},
    first half class 1, second half class 2.
    """
    rng = np.random.default_rng(random_state)
    n1 = n_examples // 2
    y = np.concatenate([np.ones(n1, dtype=np.int64), np.full(n_examples - n1, 2, dtype=np.int64)])
    centers = np.where(y == 1, -separation, separation)[:, None]
    X = centers + noise * rng.standard_normal((n_examples, n_features))
    return X.astype(np.float64), y


def make_subject_collection(
    n_subjects: int = 3,
    n_examples: int = 20,
    n_features: int = 4,
    separation: float = 3.0,
    noise: float = 0.5,
    shift_scale: float = 2.0,
    random_state: int | None = 42,
) -> tuple[list[np.ndarray], list[np.ndarray]]:
    """
    Several related datasets (e.g. subjects/sessions): same class structure,
    each subject offset by its own random shift. Returns (datasets, labels) lists.
    """
    rng = np.random.default_rng(random_state)
    datasets: list[np.ndarray] = []
    labels: list[np.ndarray] = []
    for s in range(n_subjects):
        X, y = make_separable_binary(
            n_examples=n_examples,
            n_features=n_features,
            separation=separation,
            noise=noise,
            random_state=int(rng.integers(0, 2**31 - 1)),
        )
        shift = shift_scale * rng.standard_normal(n_features)
        datasets.append(X + shift)
        labels.append(y)
        logger.debug("Subject %d: shift norm %.3f", s, float(np.linalg.norm(shift)))
    return datasets, labels


def make_dataset(name: str = "synthetic", **kwargs: object) -> Dataset:
    """Separable binary problem wrapped in a Dataset."""
    X, y = make_separable_binary(**kwargs)
    return Dataset(data=X, labels=y, name=name)
