"""Reserve bookkeeping for a two-asset pool.

ReserveLedger holds the numbers only: the two reserves and the outstanding
share supply. It performs no transfers and no pricing, and it is not
synchronized on its own; the owning PoolController serializes access.
"""

from __future__ import annotations

from dataclasses import dataclass

from cpamm.amm.pricing import constant_product
from cpamm.errors import InternalConsistencyError
from cpamm.safe_int import S, Underflow


@dataclass(frozen=True)
class ReserveSnapshot:
    """Immutable view of a ledger at one point in time."""

    reserve_a: int
    reserve_b: int
    share_supply: int

    @property
    def k(self) -> int:
        return constant_product(self.reserve_a, self.reserve_b)


class ReserveLedger:
    """Reserves of asset A and base asset B plus the liquidity-share supply.

    Any update that would make a reserve or the supply negative raises
    InternalConsistencyError and leaves the ledger untouched. That can only
    happen through a logic defect in the caller, so it is not a PoolError.
    """

    def __init__(self, reserve_a: int = 0, reserve_b: int = 0, share_supply: int = 0) -> None:
        if reserve_a < 0 or reserve_b < 0 or share_supply < 0:
            raise InternalConsistencyError(
                f"Ledger cannot start negative: ({reserve_a}, {reserve_b}, {share_supply})"
            )
        self._reserve_a = reserve_a
        self._reserve_b = reserve_b
        self._share_supply = share_supply

    def __repr__(self) -> str:
        return (
            f"ReserveLedger(reserve_a={self._reserve_a}, reserve_b={self._reserve_b}, "
            f"share_supply={self._share_supply})"
        )

    def current_reserves(self) -> tuple[int, int]:
        return self._reserve_a, self._reserve_b

    def share_supply(self) -> int:
        return self._share_supply

    def k(self) -> int:
        return constant_product(self._reserve_a, self._reserve_b)

    def snapshot(self) -> ReserveSnapshot:
        return ReserveSnapshot(self._reserve_a, self._reserve_b, self._share_supply)

    def apply_delta(self, delta_a: int, delta_b: int) -> tuple[int, int]:
        """Apply signed reserve deltas (positive means the pool gains).

        Returns:
            The new (reserve_a, reserve_b)

        Raises:
            InternalConsistencyError: If either reserve would go negative
        """
        try:
            new_a = S(self._reserve_a).apply_signed(delta_a)
            new_b = S(self._reserve_b).apply_signed(delta_b)
        except Underflow as err:
            raise InternalConsistencyError(
                f"Reserve delta ({delta_a}, {delta_b}) would drive reserves "
                f"({self._reserve_a}, {self._reserve_b}) negative"
            ) from err

        self._reserve_a = new_a.value
        self._reserve_b = new_b.value
        return self._reserve_a, self._reserve_b

    def mint_shares(self, amount: int) -> int:
        """Increase the share supply. Returns the new supply."""
        if amount < 0:
            raise InternalConsistencyError(f"Cannot mint a negative share amount: {amount}")
        self._share_supply += amount
        return self._share_supply

    def burn_shares(self, amount: int) -> int:
        """Decrease the share supply. Returns the new supply.

        Raises:
            InternalConsistencyError: If amount is negative or exceeds the supply
        """
        if amount < 0:
            raise InternalConsistencyError(f"Cannot burn a negative share amount: {amount}")
        try:
            self._share_supply = (S(self._share_supply) - amount).value
        except Underflow as err:
            raise InternalConsistencyError(
                f"Cannot burn {amount} shares from a supply of {self._share_supply}"
            ) from err
        return self._share_supply
