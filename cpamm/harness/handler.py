"""Bounded-random handler driving a pool under test.

Each handler method takes one integer seed, derives range-clamped amounts from
it, issues exactly one pool call and, if the call went through, books the
expected reserve and share movement in the handler's GhostState. Expected
amounts are recomputed from reserves read immediately before the call, never
taken from the pool's return value, so a pool whose arithmetic drifts from the
formulas is caught by assert_invariant().

Slippage bounds are loose: the actor is funded with, and allows
the pool to charge, slippage_multiplier times the expected amount, and asks for
at least one share. A pool that charges more (or mints fewer shares) than the
formulas say still executes, and the difference shows up in the books instead
of as a skipped call.

Calls that fail with a PoolError are expected (expired deadline, slippage,
zero amounts, ...). They are logged, counted and otherwise ignored. Any other
exception propagates.

Usage:
    handler = InvariantHandler(pool, clock)
    handler.bounded_deposit(seed)
    handler.bounded_swap(seed)
    handler.assert_invariant()
"""

from __future__ import annotations

import random
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

import structlog

from cpamm.amm.direction import SwapDirection
from cpamm.amm.pricing import constant_product, input_given_output
from cpamm.clock import Clock
from cpamm.config import DEFAULT_HARNESS_CONFIG, HarnessConfig
from cpamm.errors import InvariantViolation, PoolError
from cpamm.harness.ghost import GhostState
from cpamm.pools.controller import PoolController
from cpamm.tokens.memory import InMemoryToken

logger = structlog.get_logger()

DEPOSIT = "deposit"
SWAP = "swap"

# Seconds a valid derived deadline may lie in the future
MAX_DEADLINE_OFFSET = 3_600


def bound(value: int, low: int, high: int) -> int:
    """Clamp value into [low, high] by wrapping it around the range.

    Values already inside the range are returned unchanged, so small seeds
    map to themselves and shrink well.
    """
    if low > high:
        raise ValueError(f"Empty range [{low}, {high}]")
    if low <= value <= high:
        return value
    return low + (value - low) % (high - low + 1)


class HarnessPhase(str, Enum):
    """Handler state: idle between calls, issuing while one is in flight."""

    IDLE = "idle"
    ISSUING_CALLS = "issuing_calls"


class InvariantHandler:
    """Drives one pool with bounded-random deposits and exact-output swaps.

    Args:
        pool: Pool under test. Its assets must be InMemoryToken instances so
            the handler can fund its actors.
        clock: The clock the pool checks deadlines against
        ghost: Accumulator to book expectations in (default: a fresh one)
        config: Bounds for derived amounts
        liquidity_provider: Account used for deposits
        swapper: Account used for swaps
    """

    def __init__(
        self,
        pool: PoolController,
        clock: Clock,
        *,
        ghost: GhostState | None = None,
        config: HarnessConfig = DEFAULT_HARNESS_CONFIG,
        liquidity_provider: str = "liquidity_provider",
        swapper: str = "swapper",
    ) -> None:
        for token in (pool.asset_a, pool.asset_b):
            if not isinstance(token, InMemoryToken):
                raise TypeError(f"Handler needs mintable tokens, got {type(token).__name__}")
        self.pool = pool
        self.clock = clock
        self.ghost = ghost if ghost is not None else GhostState()
        self.config = config
        self.liquidity_provider = liquidity_provider
        self.swapper = swapper
        self.phase = HarnessPhase.IDLE
        self.starting_reserve_a, self.starting_reserve_b = pool.current_reserves()
        self.starting_share_supply = pool.share_supply()

    # --- Handler calls ---

    def bounded_deposit(self, seed: int) -> bool:
        """Deposit a derived base-asset amount at the current reserve ratio.

        Returns:
            True if the deposit went through and was booked
        """
        with self._issuing(DEPOSIT):
            rng = random.Random(seed)
            reserve_a, reserve_b = self.pool.current_reserves()
            supply = self.pool.share_supply()

            desired_b = bound(seed, self.config.min_deposit_b, self.config.max_deposit_b)
            if supply == 0:
                # A bootstrap deposit pays exactly max_a_amount
                required_a = bound(rng.getrandbits(64), 1, self.config.max_deposit_b)
                expected_shares = desired_b
                max_a = required_a
            else:
                required_a = desired_b * reserve_a // reserve_b
                expected_shares = desired_b * supply // reserve_b
                max_a = max(required_a, 1) * self.config.slippage_multiplier
            deadline = self._derive_deadline(rng)

            self._fund(self.pool.asset_a, self.liquidity_provider, max_a)
            self._fund(self.pool.asset_b, self.liquidity_provider, desired_b)

            try:
                self.pool.deposit(self.liquidity_provider, desired_b, 1, max_a, deadline)
            except PoolError as err:
                self._skip(DEPOSIT, err)
                return False

            self.ghost.record(DEPOSIT, required_a, desired_b, expected_shares)
            return True

    def bounded_swap(self, seed: int) -> bool:
        """Buy a derived exact output amount, paying the independently priced input.

        The direction comes from the seed's lowest bit. The output amount is
        clamped to [min_swap_output, output_reserve - 1].

        Returns:
            True if the swap went through and was booked
        """
        with self._issuing(SWAP):
            rng = random.Random(seed)
            direction = SwapDirection.A_TO_B if seed & 1 == 0 else SwapDirection.B_TO_A
            reserve_a, reserve_b = self.pool.current_reserves()
            input_reserve, output_reserve = direction.orient(reserve_a, reserve_b)

            if output_reserve <= self.config.min_swap_output:
                self.ghost.note_skipped(SWAP, "output_reserve_too_small")
                return False

            output_amount = bound(
                rng.getrandbits(256), self.config.min_swap_output, output_reserve - 1
            )
            try:
                expected_input = input_given_output(
                    output_amount,
                    input_reserve,
                    output_reserve,
                    fee_numerator=self.pool.config.fee_numerator,
                    fee_denominator=self.pool.config.fee_denominator,
                )
            except PoolError as err:
                self._skip(SWAP, err)
                return False
            deadline = self._derive_deadline(rng)

            token_in, token_out = (
                (self.pool.asset_a, self.pool.asset_b)
                if direction is SwapDirection.A_TO_B
                else (self.pool.asset_b, self.pool.asset_a)
            )
            max_input = max(expected_input, 1) * self.config.slippage_multiplier
            self._fund(token_in, self.swapper, max_input)

            k_before = constant_product(reserve_a, reserve_b)
            try:
                self.pool.swap_exact_output(
                    self.swapper,
                    token_in.symbol,
                    token_out.symbol,
                    output_amount,
                    max_input,
                    deadline,
                )
            except PoolError as err:
                self._skip(SWAP, err)
                return False

            delta_a, delta_b = direction.deltas(expected_input, output_amount)
            self.ghost.record(SWAP, delta_a, delta_b)

            self.assert_product_non_decreasing(k_before)
            return True

    # --- Assertions ---

    def assert_product_non_decreasing(self, k_before: int) -> None:
        """The reserve product must not have dropped below k_before."""
        k_after = self.pool.k()
        if k_after < k_before:
            logger.error(
                "harness_product_decreased",
                pool=self.pool.address,
                k_before=k_before,
                k_after=k_after,
            )
            raise InvariantViolation(f"Reserve product fell from {k_before} to {k_after}")

    def actual_deltas(self) -> tuple[int, int]:
        """Observed (delta_a, delta_b) since the handler was created."""
        reserve_a, reserve_b = self.pool.current_reserves()
        return reserve_a - self.starting_reserve_a, reserve_b - self.starting_reserve_b

    def actual_share_delta(self) -> int:
        """Observed change of the share supply since the handler was created."""
        return self.pool.share_supply() - self.starting_share_supply

    def assert_invariant(self) -> None:
        """Observed reserve and share-supply deltas must equal the ghost exactly.

        Raises:
            InvariantViolation: On any difference in either asset or the supply
        """
        actual_a, actual_b = self.actual_deltas()
        actual_shares = self.actual_share_delta()
        expected_a = self.ghost.expected_delta_a
        expected_b = self.ghost.expected_delta_b
        expected_shares = self.ghost.expected_delta_shares
        if (actual_a, actual_b, actual_shares) == (expected_a, expected_b, expected_shares):
            return

        logger.error(
            "harness_invariant_violated",
            pool=self.pool.address,
            actual_delta_a=actual_a,
            expected_delta_a=expected_a,
            actual_delta_b=actual_b,
            expected_delta_b=expected_b,
            actual_delta_shares=actual_shares,
            expected_delta_shares=expected_shares,
        )
        raise InvariantViolation(
            f"Pool books diverged: A actual {actual_a} vs expected {expected_a}, "
            f"B actual {actual_b} vs expected {expected_b}, "
            f"shares actual {actual_shares} vs expected {expected_shares}"
        )

    # --- Internals ---

    @contextmanager
    def _issuing(self, kind: str) -> Iterator[None]:
        if self.phase is HarnessPhase.ISSUING_CALLS:
            raise RuntimeError(f"Handler is already issuing a call; refusing nested {kind}")
        self.phase = HarnessPhase.ISSUING_CALLS
        self.ghost.note_issued(kind)
        try:
            yield
        finally:
            self.phase = HarnessPhase.IDLE

    def _derive_deadline(self, rng: random.Random) -> int:
        now = self.clock.now()
        one_in = self.config.expired_deadline_one_in
        if one_in and rng.randrange(one_in) == 0:
            return now - 1
        return now + rng.randrange(MAX_DEADLINE_OFFSET)

    def _fund(self, token: InMemoryToken, holder: str, amount: int) -> None:
        balance = token.balance_of(holder)
        if balance < amount:
            token.mint(holder, amount - balance)
        token.approve(holder, self.pool.address, amount)

    def _skip(self, kind: str, err: PoolError) -> None:
        reason = type(err).__name__
        self.ghost.note_skipped(kind, reason)
        logger.debug("harness_call_skipped", kind=kind, reason=reason, detail=str(err))
