"""Classifiers: test() yields (n_examples, n_classes) posteriors, predict() hard labels."""

from .kernels import KERNELS, kernel_matrix, linear_kernel, rbf_kernel
from .lda import LDAClassifier
from .rfda import RegularizedFDA

CLASSIFIER_REGISTRY: dict[str, type] = {
    "rfda": RegularizedFDA,
    "lda": LDAClassifier,
}

__all__ = [
    "RegularizedFDA",
    "LDAClassifier",
    "KERNELS",
    "kernel_matrix",
    "linear_kernel",
    "rbf_kernel",
    "CLASSIFIER_REGISTRY",
]
