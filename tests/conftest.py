"""Pytest configuration and fixtures."""

import pytest

from cpamm.clock import ManualClock
from cpamm.config import PoolConfig
from cpamm.pools.controller import PoolController
from cpamm.tokens.memory import InMemoryToken
from tests.helpers import START_TIME, make_pool, make_tokens


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock parked at START_TIME."""
    return ManualClock(START_TIME)


@pytest.fixture
def tokens() -> tuple[InMemoryToken, InMemoryToken]:
    return make_tokens()


@pytest.fixture
def empty_pool(
    clock: ManualClock, tokens: tuple[InMemoryToken, InMemoryToken]
) -> PoolController:
    """Pool with no liquidity yet."""
    pool, _, _ = make_pool(clock=clock, token_a=tokens[0], token_b=tokens[1])
    return pool


@pytest.fixture
def pool(clock: ManualClock, tokens: tuple[InMemoryToken, InMemoryToken]) -> PoolController:
    """Pool bootstrapped with reserves (2_000_000 A, 1_000_000 B)."""
    pool, _, _ = make_pool(2_000_000, 1_000_000, clock=clock, token_a=tokens[0], token_b=tokens[1])
    return pool


@pytest.fixture
def tiny_config() -> PoolConfig:
    """Pool config accepting single-unit bootstrap deposits."""
    return PoolConfig(minimum_liquidity=1)
