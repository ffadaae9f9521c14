"""Regressors: test() yields an (n_examples, 1) column, predict() a flat vector."""

from .ridge import RidgeRegressor

REGRESSOR_REGISTRY: dict[str, type] = {
    "ridge": RidgeRegressor,
}

__all__ = ["RidgeRegressor", "REGRESSOR_REGISTRY"]
