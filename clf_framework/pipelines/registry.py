"""Stage registry and config-driven pipeline construction."""

from __future__ import annotations

import logging
from typing import Any

from clf_framework.classifiers import CLASSIFIER_REGISTRY
from clf_framework.domain_adaptation import ADAPTER_REGISTRY
from clf_framework.preprocessing import PREPROCESSOR_REGISTRY
from clf_framework.regressors import REGRESSOR_REGISTRY
from clf_framework.stages.base import Stage
from clf_framework.stages.errors import StructuralError
from clf_framework.utils.config_loader import get_pipeline_config

from .pipeline import Pipeline

logger = logging.getLogger(__name__)

STAGE_REGISTRY: dict[str, type[Stage]] = {
    **PREPROCESSOR_REGISTRY,
    **ADAPTER_REGISTRY,
    **CLASSIFIER_REGISTRY,
    **REGRESSOR_REGISTRY,
}


def get_stage(name: str, **kwargs: Any) -> Stage:
    """Factory: instantiate a stage by registry name."""
    cls = STAGE_REGISTRY.get((name or "").lower())
    if cls is None:
        raise KeyError(f"Unknown stage '{name}'. Available: {list(STAGE_REGISTRY.keys())}")
    return cls(**kwargs)


def _build_item(spec: Any, position: int) -> Any:
    if isinstance(spec, str):
        return get_stage(spec)
    if isinstance(spec, dict):
        params = dict(spec)
        name = params.pop("name", None)
        if name is None:
            raise StructuralError(f"Position {position}: stage spec without 'name': {spec}")
        return get_stage(name, **params)
    if isinstance(spec, (list, tuple)):
        return [_build_item(s, position) for s in spec]
    raise StructuralError(f"Position {position}: invalid stage spec {spec!r}")


def build_pipeline(config: dict[str, Any] | None = None) -> Pipeline:
    """
    Build a Pipeline from a config mapping (the loaded config.yaml if None):

        pipeline:
          verbose: false
          max_parallel: 0
          stages:
            - {name: pca, proportion: 2}
            - [{name: rfda}, {name: rfda, kernel: rbf}]   # ensemble
    """
    section = get_pipeline_config(config)
    stages = [_build_item(spec, c) for c, spec in enumerate(section["stages"] or [])]
    pipe = Pipeline(
        stages,
        verbose=bool(section["verbose"]),
        max_parallel=int(section["max_parallel"] or 0),
    )
    (logger.info if pipe.verbose else logger.debug)("Built pipeline %s", pipe.signature())
    return pipe
