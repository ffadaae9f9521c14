"""Datasets: the collapse contract, collections, and synthetic generators."""

from .base import (
    Dataset,
    as_label_vector,
    broadcast_labels,
    collapse,
    is_collection,
    is_empty,
    n_examples,
    stack_collection,
)
from .synthetic import make_dataset, make_separable_binary, make_subject_collection

__all__ = [
    "Dataset",
    "collapse",
    "is_collection",
    "is_empty",
    "n_examples",
    "as_label_vector",
    "broadcast_labels",
    "stack_collection",
    "make_dataset",
    "make_separable_binary",
    "make_subject_collection",
]
