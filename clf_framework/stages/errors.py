"""Error taxonomy shared by stages and pipelines."""

from __future__ import annotations


class ClassificationError(Exception):
    """Base class for all framework errors."""


class StructuralError(ClassificationError, ValueError):
    """Malformed pipeline: empty, non-predictor terminal stage, or dataset/stage-count mismatch."""


class InvalidInputError(ClassificationError, ValueError):
    """A stage precondition was violated (class count, kernel kind, feature shape)."""


class NotFittedError(InvalidInputError):
    """test/predict called on a stage that was never trained."""


class CapabilityError(StructuralError, ImportError):
    """A stage needs a module that is not importable in this environment."""
