"""Dataset container and the collapse contract every stage relies on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np


@dataclass
class Dataset:
    """Container for examples (first axis) and optional labels."""

    data: np.ndarray  # (n_examples, ...) collapsible to (n_examples, n_features)
    labels: np.ndarray | None = None  # (n_examples,)
    name: str | None = None

    @property
    def n_examples(self) -> int:
        return int(np.shape(self.data)[0])

    @property
    def n_features(self) -> int:
        return self.collapse().shape[1]

    def __len__(self) -> int:
        return self.n_examples

    def collapse(self) -> np.ndarray:
        """Flatten to a 2-D float matrix (n_examples, n_features)."""
        return _collapse_array(self.data)


def _collapse_array(X: Any) -> np.ndarray:
    X = np.asarray(X, dtype=np.float64)
    if X.ndim == 0:
        return X.reshape(1, 1)
    if X.ndim == 1:
        return X.reshape(-1, 1)
    if X.ndim == 2:
        return X
    return X.reshape(X.shape[0], -1)


def is_collection(data: Any) -> bool:
    """True for an ordered collection of datasets (list or tuple)."""
    return isinstance(data, (list, tuple))


def collapse(data: Any) -> np.ndarray:
    """Deterministic flattening of a single dataset into (n_examples, n_features).

    Objects exposing ``collapse()`` (e.g. ``Dataset``) are honoured; anything else
    is converted with ``np.asarray``. Collections are rejected.
    """
    if is_collection(data):
        raise TypeError("collapse expects a single dataset, got a collection; collapse each element instead")
    method = getattr(data, "collapse", None)
    if callable(method):
        return _collapse_array(method())
    return _collapse_array(data)


def n_examples(data: Any) -> int:
    """Number of examples in a dataset, or in the first element of a collection."""
    if is_collection(data):
        return n_examples(data[0]) if len(data) else 0
    if isinstance(data, Dataset):
        return data.n_examples
    shape = np.shape(data)
    return int(shape[0]) if shape else 1


def is_empty(data: Any) -> bool:
    """True for an empty collection or a dataset with no examples."""
    if data is None:
        return True
    if is_collection(data):
        return len(data) == 0
    return n_examples(data) == 0


def as_label_vector(labels: Any) -> np.ndarray:
    """Labels as a flat 1-D array; Dataset labels are unwrapped."""
    if isinstance(labels, Dataset):
        labels = labels.labels
    return np.asarray(labels).reshape(-1)


def broadcast_labels(labels: Any, n_datasets: int) -> list[Any]:
    """Pair labels with a collection of ``n_datasets`` datasets.

    A single label vector is shared by every dataset (ensemble outputs describe
    the same examples). A collection of label vectors must match the length.
    """
    if is_collection(labels):
        if len(labels) != n_datasets:
            from clf_framework.stages.errors import StructuralError

            raise StructuralError(
                f"Got {len(labels)} label vectors for a collection of {n_datasets} datasets"
            )
        return list(labels)
    return [labels] * n_datasets


def stack_collection(datasets: Sequence[Any]) -> np.ndarray:
    """Vertically stack collapsed datasets that share feature dimensionality."""
    mats = [collapse(d) for d in datasets]
    return np.vstack(mats) if mats else np.empty((0, 0))
