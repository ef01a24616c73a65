"""Pool state, the pool controller and the pool registry."""

from cpamm.pools.controller import PoolController
from cpamm.pools.registry import PoolRegistry
from cpamm.pools.reserves import ReserveLedger, ReserveSnapshot

__all__ = [
    "PoolController",
    "PoolRegistry",
    "ReserveLedger",
    "ReserveSnapshot",
]
