"""Constant-product exchange pool with a stateful invariant harness."""

from cpamm.config import CampaignConfig, HarnessConfig, PoolConfig
from cpamm.pools import PoolController, PoolRegistry
from cpamm.tokens import InMemoryToken

__version__ = "0.1.0"
__all__ = [
    "CampaignConfig",
    "HarnessConfig",
    "InMemoryToken",
    "PoolConfig",
    "PoolController",
    "PoolRegistry",
    "__version__",
]
