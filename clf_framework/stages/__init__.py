"""Stage contract and error taxonomy."""

from .base import Classifier, Predictor, Preprocessor, Regressor, Stage
from .errors import (
    CapabilityError,
    ClassificationError,
    InvalidInputError,
    NotFittedError,
    StructuralError,
)

__all__ = [
    "Stage",
    "Preprocessor",
    "Predictor",
    "Classifier",
    "Regressor",
    "ClassificationError",
    "StructuralError",
    "InvalidInputError",
    "NotFittedError",
    "CapabilityError",
]
