"""Swap direction resolved once per call."""

from __future__ import annotations

from enum import Enum


class SwapDirection(str, Enum):
    """Which pool asset flows in.

    A_TO_B: caller pays asset A, receives the base asset B.
    B_TO_A: caller pays the base asset B, receives asset A.
    """

    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"

    @property
    def opposite(self) -> SwapDirection:
        return SwapDirection.B_TO_A if self is SwapDirection.A_TO_B else SwapDirection.A_TO_B

    def orient(self, reserve_a: int, reserve_b: int) -> tuple[int, int]:
        """Order reserves as (input_reserve, output_reserve)."""
        if self is SwapDirection.A_TO_B:
            return reserve_a, reserve_b
        return reserve_b, reserve_a

    def deltas(self, amount_in: int, amount_out: int) -> tuple[int, int]:
        """Signed reserve deltas (delta_a, delta_b) for a completed swap."""
        if self is SwapDirection.A_TO_B:
            return amount_in, -amount_out
        return -amount_out, amount_in
