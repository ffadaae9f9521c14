"""Kernel functions between two example matrices (rows are examples)."""

import numpy as np
from scipy.spatial.distance import cdist

KERNELS = ("linear", "rbf")


def linear_kernel(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """Inner products: (n_a, n_b)."""
    return A @ B.T


def rbf_kernel(A: np.ndarray, B: np.ndarray, sigma: float = 1.0) -> np.ndarray:
    """Gaussian kernel exp(-|a - b|^2 / (2 sigma^2)): (n_a, n_b)."""
    d2 = cdist(A, B, metric="sqeuclidean")
    return np.exp(-d2 / (2.0 * sigma ** 2))


def kernel_matrix(kind: str, A: np.ndarray, B: np.ndarray, parameter: float = 1.0) -> np.ndarray:
    if kind == "linear":
        return linear_kernel(A, B)
    if kind == "rbf":
        return rbf_kernel(A, B, sigma=parameter)
    raise ValueError(f"Unknown kernel '{kind}'. Available: {list(KERNELS)}")
