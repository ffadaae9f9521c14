"""Utility functions and helpers for the classification framework."""

from .config_loader import DEFAULT_CONFIG_PATH, get_config, get_pipeline_config, load_config

__all__ = ["DEFAULT_CONFIG_PATH", "load_config", "get_config", "get_pipeline_config"]
