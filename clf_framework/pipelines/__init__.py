"""Pipeline: ordered stages, ensembles and multi-dataset fan-out."""

from .entries import Ensemble, Entry, FanOut, Single
from .pipeline import Pipeline
from .registry import STAGE_REGISTRY, build_pipeline, get_stage

__all__ = [
    "Pipeline",
    "Single",
    "Ensemble",
    "FanOut",
    "Entry",
    "STAGE_REGISTRY",
    "get_stage",
    "build_pipeline",
]
