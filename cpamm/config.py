"""Configuration for pools and the invariant harness.

Defaults live in cpamm.constants. Every config can also be built from
environment variables, which is how the cpamm-fuzz command is tuned without
code changes:

- CPAMM_FEE_NUMERATOR, CPAMM_FEE_DENOMINATOR, CPAMM_MINIMUM_LIQUIDITY
- CPAMM_HARNESS_MIN_DEPOSIT, CPAMM_HARNESS_MAX_DEPOSIT,
  CPAMM_HARNESS_MIN_SWAP_OUTPUT, CPAMM_HARNESS_EXPIRED_ONE_IN,
  CPAMM_HARNESS_SLIPPAGE_MULTIPLIER
- CPAMM_CAMPAIGN_RUNS, CPAMM_CAMPAIGN_DEPTH, CPAMM_CAMPAIGN_SEED
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from cpamm.constants import (
    CAMPAIGN_INITIAL_A,
    CAMPAIGN_INITIAL_B,
    EXPIRED_DEADLINE_ONE_IN,
    FEE_DENOMINATOR,
    FEE_NUMERATOR,
    HARNESS_MAX_DEPOSIT,
    HARNESS_MIN_DEPOSIT,
    HARNESS_MIN_SWAP_OUTPUT,
    HARNESS_SLIPPAGE_MULTIPLIER,
    MINIMUM_LIQUIDITY,
)


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from err


@dataclass(frozen=True)
class PoolConfig:
    """Pricing and bootstrap parameters shared by every pool of a registry.

    Attributes:
        fee_numerator: Fee multiplier numerator (997 for a 0.3% fee)
        fee_denominator: Fee multiplier denominator (1000)
        minimum_liquidity: Smallest base-asset amount a bootstrap deposit accepts
    """

    fee_numerator: int = FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR
    minimum_liquidity: int = MINIMUM_LIQUIDITY

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive, got {self.fee_denominator}")
        if not 0 < self.fee_numerator <= self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in (0, {self.fee_denominator}], got {self.fee_numerator}"
            )
        if self.minimum_liquidity <= 0:
            raise ValueError(f"minimum_liquidity must be positive, got {self.minimum_liquidity}")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> PoolConfig:
        """Build a config from CPAMM_* environment variables."""
        env = os.environ if env is None else env
        return cls(
            fee_numerator=_env_int(env, "CPAMM_FEE_NUMERATOR", FEE_NUMERATOR),
            fee_denominator=_env_int(env, "CPAMM_FEE_DENOMINATOR", FEE_DENOMINATOR),
            minimum_liquidity=_env_int(env, "CPAMM_MINIMUM_LIQUIDITY", MINIMUM_LIQUIDITY),
        )


@dataclass(frozen=True)
class HarnessConfig:
    """Bounds the handler clamps its random seeds into.

    Attributes:
        min_deposit_b: Lower bound for derived base-asset deposits
        max_deposit_b: Upper bound for derived base-asset deposits
        min_swap_output: Lower bound for derived exact-output swap amounts
        expired_deadline_one_in: One in this many calls gets an expired
            deadline. 0 disables expired deadlines.
        slippage_multiplier: Multiple of the expected input the handler funds
            and passes as the maximum a call may charge
    """

    min_deposit_b: int = HARNESS_MIN_DEPOSIT
    max_deposit_b: int = HARNESS_MAX_DEPOSIT
    min_swap_output: int = HARNESS_MIN_SWAP_OUTPUT
    expired_deadline_one_in: int = EXPIRED_DEADLINE_ONE_IN
    slippage_multiplier: int = HARNESS_SLIPPAGE_MULTIPLIER

    def __post_init__(self) -> None:
        if self.min_deposit_b <= 0:
            raise ValueError(f"min_deposit_b must be positive, got {self.min_deposit_b}")
        if self.max_deposit_b < self.min_deposit_b:
            raise ValueError(
                f"max_deposit_b ({self.max_deposit_b}) is below min_deposit_b ({self.min_deposit_b})"
            )
        if self.min_swap_output <= 0:
            raise ValueError(f"min_swap_output must be positive, got {self.min_swap_output}")
        if self.expired_deadline_one_in < 0:
            raise ValueError(
                f"expired_deadline_one_in cannot be negative, got {self.expired_deadline_one_in}"
            )
        if self.slippage_multiplier < 1:
            raise ValueError(
                f"slippage_multiplier must be at least 1, got {self.slippage_multiplier}"
            )

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> HarnessConfig:
        """Build a config from CPAMM_HARNESS_* environment variables."""
        env = os.environ if env is None else env
        return cls(
            min_deposit_b=_env_int(env, "CPAMM_HARNESS_MIN_DEPOSIT", HARNESS_MIN_DEPOSIT),
            max_deposit_b=_env_int(env, "CPAMM_HARNESS_MAX_DEPOSIT", HARNESS_MAX_DEPOSIT),
            min_swap_output=_env_int(env, "CPAMM_HARNESS_MIN_SWAP_OUTPUT", HARNESS_MIN_SWAP_OUTPUT),
            expired_deadline_one_in=_env_int(
                env, "CPAMM_HARNESS_EXPIRED_ONE_IN", EXPIRED_DEADLINE_ONE_IN
            ),
            slippage_multiplier=_env_int(
                env, "CPAMM_HARNESS_SLIPPAGE_MULTIPLIER", HARNESS_SLIPPAGE_MULTIPLIER
            ),
        )


@dataclass(frozen=True)
class CampaignConfig:
    """Shape of a fuzz campaign.

    Attributes:
        runs: Number of independent runs, each on a fresh pool
        depth: Number of handler calls per run
        seed: Master seed; run seeds are derived from it
        initial_a: Asset A reserve each run bootstraps with
        initial_b: Base-asset reserve each run bootstraps with
        pool: Pool parameters for every run
        harness: Handler bounds for every run
    """

    runs: int = 64
    depth: int = 32
    seed: int = 0
    initial_a: int = CAMPAIGN_INITIAL_A
    initial_b: int = CAMPAIGN_INITIAL_B
    pool: PoolConfig = field(default_factory=PoolConfig)
    harness: HarnessConfig = field(default_factory=HarnessConfig)

    def __post_init__(self) -> None:
        if self.runs <= 0:
            raise ValueError(f"runs must be positive, got {self.runs}")
        if self.depth <= 0:
            raise ValueError(f"depth must be positive, got {self.depth}")
        if self.initial_a <= 0:
            raise ValueError(f"initial_a must be positive, got {self.initial_a}")
        if self.initial_b < self.pool.minimum_liquidity:
            raise ValueError(
                f"initial_b ({self.initial_b}) is below minimum liquidity "
                f"({self.pool.minimum_liquidity})"
            )

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> CampaignConfig:
        """Build a config from CPAMM_* environment variables."""
        env = os.environ if env is None else env
        return cls(
            runs=_env_int(env, "CPAMM_CAMPAIGN_RUNS", 64),
            depth=_env_int(env, "CPAMM_CAMPAIGN_DEPTH", 32),
            seed=_env_int(env, "CPAMM_CAMPAIGN_SEED", 0),
            pool=PoolConfig.from_env(env),
            harness=HarnessConfig.from_env(env),
        )


# Default configuration instances
DEFAULT_POOL_CONFIG = PoolConfig()
DEFAULT_HARNESS_CONFIG = HarnessConfig()
