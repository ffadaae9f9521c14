"""Preprocessing stages: transforms that feed the next stage."""

from .pca import PCAnalyzer
from .standardize import ZScoreStandardizer

PREPROCESSOR_REGISTRY: dict[str, type] = {
    "pca": PCAnalyzer,
    "zscore": ZScoreStandardizer,
}

__all__ = [
    "PCAnalyzer",
    "ZScoreStandardizer",
    "PREPROCESSOR_REGISTRY",
]
