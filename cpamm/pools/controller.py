"""Pool controller: deposits, withdrawals and swaps for one asset pair.

The controller owns a ReserveLedger and moves tokens through the TokenLedger
collaborators. Every public operation runs as one critical section under the
pool's lock: the deadline and amount guards, the reserve read, the pricing,
the transfers and the ledger update all happen without another operation on
the same pool interleaving.

Ordering inside an operation:
1. Guards (deadline first, then zero amounts)
2. Pricing against the reserves read under the lock
3. Inbound transfers (caller -> pool), then outbound transfers (pool -> caller)
4. Reserve deltas and share mint/burn

Reserves are only updated once the transfers they describe are confirmed, so
a TransferFailed leaves the ledger equal to what the pool actually holds.
A failed call never changes reserves, shares or share balances. When that
cannot be guaranteed (a refund or reclaim is refused) the operation raises
InternalConsistencyError instead.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Sequence

import structlog

from cpamm.amm.direction import SwapDirection
from cpamm.amm.pricing import constant_product, input_given_output, output_given_input, quote
from cpamm.clock import Clock, SystemClock
from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import (
    DeadlineExpired,
    InsufficientInput,
    InsufficientShares,
    InternalConsistencyError,
    InvalidAssetPair,
    LiquidityTooLow,
    SlippageExceeded,
    TransferFailed,
    ZeroAmount,
)
from cpamm.pools.reserves import ReserveLedger, ReserveSnapshot
from cpamm.tokens.base import TokenLedger

logger = structlog.get_logger()

# Amount used by the spot-price helpers (one whole unit at 18 decimals)
PRICE_UNIT = 10**18


class PoolController:
    """Constant-product pool of asset A against base asset B.

    Args:
        asset_a: Token ledger of the traded asset
        asset_b: Token ledger of the base asset
        address: Account the pool holds its tokens under
            (default: "pool:<A>/<B>")
        config: Fee and minimum-liquidity parameters
        clock: Time source for deadline checks (default: wall clock)
    """

    def __init__(
        self,
        asset_a: TokenLedger,
        asset_b: TokenLedger,
        *,
        address: str | None = None,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        clock: Clock | None = None,
    ) -> None:
        if asset_a.symbol == asset_b.symbol:
            raise ValueError(f"Pool assets must differ, got {asset_a.symbol} twice")
        self.asset_a = asset_a
        self.asset_b = asset_b
        self.address = address or f"pool:{asset_a.symbol}/{asset_b.symbol}"
        self.config = config
        self._clock = clock or SystemClock()
        self._ledger = ReserveLedger()
        self._share_balances: defaultdict[str, int] = defaultdict(int)
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        snap = self.snapshot()
        return (
            f"PoolController({self.asset_a.symbol}/{self.asset_b.symbol}, "
            f"reserves=({snap.reserve_a}, {snap.reserve_b}), shares={snap.share_supply})"
        )

    # --- Views ---

    def current_reserves(self) -> tuple[int, int]:
        with self._lock:
            return self._ledger.current_reserves()

    def share_supply(self) -> int:
        with self._lock:
            return self._ledger.share_supply()

    def k(self) -> int:
        with self._lock:
            return self._ledger.k()

    def snapshot(self) -> ReserveSnapshot:
        with self._lock:
            return self._ledger.snapshot()

    def share_balance_of(self, holder: str) -> int:
        with self._lock:
            return self._share_balances.get(holder, 0)

    def quote_deposit_a(self, desired_b_amount: int) -> int:
        """Asset A a deposit of desired_b_amount requires at the current ratio.

        Raises:
            ZeroAmount: If the pool has not been bootstrapped
        """
        with self._lock:
            reserve_a, reserve_b = self._ledger.current_reserves()
            return quote(desired_b_amount, reserve_a, reserve_b)

    def price_of_one_a_in_b(self, unit: int = PRICE_UNIT) -> int:
        """Base asset received for selling one unit of A (fee included)."""
        with self._lock:
            reserve_a, reserve_b = self._ledger.current_reserves()
            return self._output_given_input(unit, reserve_a, reserve_b)

    def price_of_one_b_in_a(self, unit: int = PRICE_UNIT) -> int:
        """Asset A received for selling one unit of the base asset (fee included)."""
        with self._lock:
            reserve_a, reserve_b = self._ledger.current_reserves()
            return self._output_given_input(unit, reserve_b, reserve_a)

    # --- Liquidity ---

    def deposit(
        self,
        caller: str,
        desired_b_amount: int,
        min_shares_out: int,
        max_a_amount: int,
        deadline: int,
    ) -> int:
        """Add liquidity and mint shares to caller.

        The first deposit into an empty pool sets the price: it pays exactly
        max_a_amount of A and mints shares 1:1 with desired_b_amount. Later
        deposits pay the A amount matching the current reserve ratio.

        Returns:
            Number of shares minted

        Raises:
            DeadlineExpired, ZeroAmount, LiquidityTooLow, SlippageExceeded,
            TransferFailed
        """
        with self._lock:
            self._check_deadline(deadline)
            _require_nonzero(
                desired_b_amount=desired_b_amount,
                min_shares_out=min_shares_out,
                max_a_amount=max_a_amount,
            )

            supply = self._ledger.share_supply()
            if supply == 0:
                if desired_b_amount < self.config.minimum_liquidity:
                    raise LiquidityTooLow(
                        f"Bootstrap deposit {desired_b_amount} is below minimum "
                        f"liquidity {self.config.minimum_liquidity}"
                    )
                a_amount = max_a_amount
                shares = desired_b_amount
            else:
                reserve_a, reserve_b = self._ledger.current_reserves()
                a_amount = quote(desired_b_amount, reserve_a, reserve_b)
                if a_amount > max_a_amount:
                    raise SlippageExceeded(
                        f"Deposit needs {a_amount} of {self.asset_a.symbol}, "
                        f"max is {max_a_amount}"
                    )
                if a_amount == 0:
                    raise ZeroAmount(
                        f"Deposit of {desired_b_amount} rounds to zero {self.asset_a.symbol}"
                    )
                shares = desired_b_amount * supply // reserve_b

            if shares < min_shares_out:
                raise SlippageExceeded(f"Deposit mints {shares} shares, min is {min_shares_out}")

            self._pull(caller, ((self.asset_a, a_amount), (self.asset_b, desired_b_amount)))

            self._ledger.apply_delta(a_amount, desired_b_amount)
            self._ledger.mint_shares(shares)
            self._share_balances[caller] += shares

            logger.debug(
                "pool_deposit",
                pool=self.address,
                caller=caller,
                bootstrap=supply == 0,
                amount_a=a_amount,
                amount_b=desired_b_amount,
                shares=shares,
            )
            return shares

    def withdraw(
        self,
        caller: str,
        shares_to_burn: int,
        min_a_out: int,
        min_b_out: int,
        deadline: int,
    ) -> tuple[int, int]:
        """Burn caller's shares for a pro-rata part of both reserves.

        Returns:
            (a_out, b_out) paid to caller

        Raises:
            DeadlineExpired, ZeroAmount, InsufficientShares, SlippageExceeded,
            TransferFailed
            InternalConsistencyError: If the B payout is refused after the A
                payout went out and A cannot be reclaimed from caller
        """
        with self._lock:
            self._check_deadline(deadline)
            _require_nonzero(
                shares_to_burn=shares_to_burn,
                min_a_out=min_a_out,
                min_b_out=min_b_out,
            )

            held = self._share_balances.get(caller, 0)
            if shares_to_burn > held:
                raise InsufficientShares(f"{caller} holds {held} shares, tried to burn {shares_to_burn}")

            supply = self._ledger.share_supply()
            reserve_a, reserve_b = self._ledger.current_reserves()
            a_out = shares_to_burn * reserve_a // supply
            b_out = shares_to_burn * reserve_b // supply
            if a_out < min_a_out:
                raise SlippageExceeded(f"Withdraw pays {a_out} {self.asset_a.symbol}, min is {min_a_out}")
            if b_out < min_b_out:
                raise SlippageExceeded(f"Withdraw pays {b_out} {self.asset_b.symbol}, min is {min_b_out}")

            self._pay_out_withdrawal(caller, a_out, b_out)

            self._ledger.burn_shares(shares_to_burn)
            self._ledger.apply_delta(-a_out, -b_out)
            self._share_balances[caller] = held - shares_to_burn

            logger.debug(
                "pool_withdraw",
                pool=self.address,
                caller=caller,
                shares=shares_to_burn,
                amount_a=a_out,
                amount_b=b_out,
            )
            return a_out, b_out

    # --- Swaps ---

    def swap_exact_input(
        self,
        caller: str,
        input_asset: str,
        input_amount: int,
        output_asset: str,
        min_output_amount: int,
        deadline: int,
    ) -> int:
        """Sell exactly input_amount of input_asset for at least min_output_amount.

        Returns:
            Output amount paid to caller

        Raises:
            DeadlineExpired, ZeroAmount, InvalidAssetPair, SlippageExceeded,
            InsufficientInput, TransferFailed
        """
        with self._lock:
            self._check_deadline(deadline)
            _require_nonzero(input_amount=input_amount, min_output_amount=min_output_amount)
            direction = self._resolve_direction(input_asset, output_asset)

            input_reserve, output_reserve = direction.orient(*self._ledger.current_reserves())
            output_amount = self._output_given_input(input_amount, input_reserve, output_reserve)
            if output_amount < min_output_amount:
                raise SlippageExceeded(
                    f"Swap returns {output_amount} {output_asset}, min is {min_output_amount}"
                )

            self._execute_swap(caller, direction, input_amount, output_amount)
            logger.debug(
                "pool_swap_exact_input",
                pool=self.address,
                caller=caller,
                direction=direction.value,
                amount_in=input_amount,
                amount_out=output_amount,
            )
            return output_amount

    def swap_exact_output(
        self,
        caller: str,
        input_asset: str,
        output_asset: str,
        output_amount: int,
        max_input_amount: int,
        deadline: int,
    ) -> int:
        """Buy exactly output_amount of output_asset for at most max_input_amount.

        Returns:
            Input amount taken from caller

        Raises:
            DeadlineExpired, ZeroAmount, InvalidAssetPair, InsufficientReserve,
            SlippageExceeded, InsufficientInput, TransferFailed
        """
        with self._lock:
            self._check_deadline(deadline)
            _require_nonzero(output_amount=output_amount, max_input_amount=max_input_amount)
            direction = self._resolve_direction(input_asset, output_asset)

            input_reserve, output_reserve = direction.orient(*self._ledger.current_reserves())
            input_amount = input_given_output(
                output_amount,
                input_reserve,
                output_reserve,
                fee_numerator=self.config.fee_numerator,
                fee_denominator=self.config.fee_denominator,
            )
            if input_amount > max_input_amount:
                raise SlippageExceeded(
                    f"Swap needs {input_amount} {input_asset}, max is {max_input_amount}"
                )

            self._execute_swap(caller, direction, input_amount, output_amount)
            logger.debug(
                "pool_swap_exact_output",
                pool=self.address,
                caller=caller,
                direction=direction.value,
                amount_in=input_amount,
                amount_out=output_amount,
            )
            return input_amount

    def sell_asset_a(self, caller: str, a_amount: int, min_b_out: int, deadline: int) -> int:
        """Sell an exact amount of asset A for the base asset."""
        return self.swap_exact_input(
            caller, self.asset_a.symbol, a_amount, self.asset_b.symbol, min_b_out, deadline
        )

    # --- Internals ---

    def _check_deadline(self, deadline: int) -> None:
        now = self._clock.now()
        if now > deadline:
            raise DeadlineExpired(f"Deadline {deadline} passed (now {now})")

    def _resolve_direction(self, input_asset: str, output_asset: str) -> SwapDirection:
        pair = (input_asset, output_asset)
        if pair == (self.asset_a.symbol, self.asset_b.symbol):
            return SwapDirection.A_TO_B
        if pair == (self.asset_b.symbol, self.asset_a.symbol):
            return SwapDirection.B_TO_A
        raise InvalidAssetPair(
            f"Pool {self.address} trades {self.asset_a.symbol}/{self.asset_b.symbol}, "
            f"got {input_asset} -> {output_asset}"
        )

    def _output_given_input(self, amount: int, input_reserve: int, output_reserve: int) -> int:
        return output_given_input(
            amount,
            input_reserve,
            output_reserve,
            fee_numerator=self.config.fee_numerator,
            fee_denominator=self.config.fee_denominator,
        )

    def _token_for(self, direction: SwapDirection) -> tuple[TokenLedger, TokenLedger]:
        if direction is SwapDirection.A_TO_B:
            return self.asset_a, self.asset_b
        return self.asset_b, self.asset_a

    def _execute_swap(
        self,
        caller: str,
        direction: SwapDirection,
        amount_in: int,
        amount_out: int,
    ) -> None:
        reserve_a, reserve_b = self._ledger.current_reserves()
        delta_a, delta_b = direction.deltas(amount_in, amount_out)
        k_before = constant_product(reserve_a, reserve_b)
        k_after = constant_product(reserve_a + delta_a, reserve_b + delta_b)
        if k_after < k_before:
            raise InsufficientInput(
                f"Swap of {amount_in} for {amount_out} would lower k from {k_before} to {k_after}"
            )

        token_in, token_out = self._token_for(direction)
        self._pull(caller, ((token_in, amount_in),))
        if not token_out.transfer(self.address, caller, amount_out):
            self._refund(caller, ((token_in, amount_in),))
            logger.warning(
                "pool_transfer_failed",
                pool=self.address,
                token=token_out.symbol,
                recipient=caller,
                amount=amount_out,
            )
            raise TransferFailed(f"Pool could not pay {amount_out} {token_out.symbol} to {caller}")

        self._ledger.apply_delta(delta_a, delta_b)

    def _pull(self, caller: str, legs: Sequence[tuple[TokenLedger, int]]) -> None:
        """Move every leg from caller to the pool, or none of them."""
        done: list[tuple[TokenLedger, int]] = []
        for token, amount in legs:
            if not token.transfer_from(self.address, caller, self.address, amount):
                self._refund(caller, done)
                logger.warning(
                    "pool_transfer_failed",
                    pool=self.address,
                    token=token.symbol,
                    sender=caller,
                    amount=amount,
                )
                raise TransferFailed(f"Pool could not collect {amount} {token.symbol} from {caller}")
            done.append((token, amount))

    def _refund(self, caller: str, legs: Sequence[tuple[TokenLedger, int]]) -> None:
        for token, amount in legs:
            if not token.transfer(self.address, caller, amount):
                raise InternalConsistencyError(
                    f"Pool {self.address} cannot refund {amount} {token.symbol} it just received"
                )

    def _pay_out_withdrawal(self, caller: str, a_out: int, b_out: int) -> None:
        if not self.asset_a.transfer(self.address, caller, a_out):
            logger.warning(
                "pool_transfer_failed",
                pool=self.address,
                token=self.asset_a.symbol,
                recipient=caller,
                amount=a_out,
            )
            raise TransferFailed(f"Pool could not pay {a_out} {self.asset_a.symbol} to {caller}")

        if self.asset_b.transfer(self.address, caller, b_out):
            return

        # The A leg already left the pool and has to come back before the
        # call can fail cleanly.
        reclaimed = self.asset_a.transfer_from(self.address, caller, self.address, a_out)
        logger.error(
            "pool_withdraw_partial_payout",
            pool=self.address,
            caller=caller,
            amount_a=a_out,
            amount_b=b_out,
            reclaimed=reclaimed,
        )
        if not reclaimed:
            raise InternalConsistencyError(
                f"Pool {self.address} paid {a_out} {self.asset_a.symbol} to {caller} "
                f"but could neither pay {b_out} {self.asset_b.symbol} nor reclaim the payout"
            )
        raise TransferFailed(f"Pool could not pay {b_out} {self.asset_b.symbol} to {caller}")


def _require_nonzero(**amounts: int) -> None:
    for name, value in amounts.items():
        if value < 0:
            raise ValueError(f"{name} cannot be negative: {value}")
        if value == 0:
            raise ZeroAmount(f"{name} cannot be zero")
