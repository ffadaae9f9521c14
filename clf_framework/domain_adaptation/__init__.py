"""Domain adaptation (transfer learning): joint-mode stages that see all datasets at once."""

from .pooled_zscore import PooledZScore

ADAPTER_REGISTRY: dict[str, type] = {
    "pooled_zscore": PooledZScore,
}

__all__ = ["PooledZScore", "ADAPTER_REGISTRY"]
