"""YAML configuration: the packaged config.yaml describes the default pipeline."""

from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"

_PIPELINE_DEFAULTS: dict[str, Any] = {"verbose": False, "max_parallel": 0, "stages": []}

_CONFIG: dict[str, Any] | None = None


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Read a YAML config (the packaged one if no path is given) and cache it."""
    global _CONFIG
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, "r") as f:
        _CONFIG = yaml.safe_load(f) or {}
    return _CONFIG


def get_config() -> dict[str, Any]:
    """Cached config; loads the packaged default on first use."""
    if _CONFIG is None:
        return load_config()
    return _CONFIG


def get_pipeline_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """The ``pipeline`` section with defaults filled in."""
    config = get_config() if config is None else config
    section = dict(_PIPELINE_DEFAULTS)
    section.update(config.get("pipeline") or {})
    return section
