"""Pool registry: one pool per asset, all paired against one base asset."""

from __future__ import annotations

import threading

import structlog

from cpamm.clock import Clock
from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import PoolAlreadyExists
from cpamm.pools.controller import PoolController
from cpamm.tokens.base import TokenLedger

logger = structlog.get_logger()


class PoolRegistry:
    """Creates and looks up pools.

    Pools are keyed by their asset's symbol. Every pool created here shares
    the registry's base asset, config and clock.
    """

    def __init__(
        self,
        base_asset: TokenLedger,
        *,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        clock: Clock | None = None,
    ) -> None:
        self.base_asset = base_asset
        self.config = config
        self._clock = clock
        self._pools: dict[str, PoolController] = {}
        self._assets_by_pool: dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, asset: str) -> bool:
        return asset in self._pools

    def create_pool(self, asset: TokenLedger) -> PoolController:
        """Create the pool for asset.

        Raises:
            PoolAlreadyExists: If a pool for this asset was already created
            ValueError: If asset is the base asset itself
        """
        if asset.symbol == self.base_asset.symbol:
            raise ValueError(f"Cannot pair the base asset {asset.symbol} with itself")

        with self._lock:
            if asset.symbol in self._pools:
                raise PoolAlreadyExists(f"Pool for {asset.symbol} already exists")

            pool = PoolController(
                asset,
                self.base_asset,
                config=self.config,
                clock=self._clock,
            )
            self._pools[asset.symbol] = pool
            self._assets_by_pool[pool.address] = asset.symbol

        logger.info(
            "pool_created",
            asset=asset.symbol,
            base=self.base_asset.symbol,
            pool=pool.address,
        )
        return pool

    def get_pool(self, asset: str) -> PoolController | None:
        """Pool trading asset (by symbol) against the base asset, if any."""
        return self._pools.get(asset)

    def get_asset(self, pool_address: str) -> str | None:
        """Asset symbol traded by the pool at pool_address, if any."""
        return self._assets_by_pool.get(pool_address)

    def pools(self) -> list[PoolController]:
        with self._lock:
            return list(self._pools.values())
