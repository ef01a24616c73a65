"""Constant-product pricing.

Pure functions over (amount, input_reserve, output_reserve). Nothing here
reads or mutates a pool, so the invariant harness can recompute every
expected amount out-of-band with exactly the same code paths.

Both directions share one fee representation: the input side is scaled by
fee_numerator / fee_denominator (997 / 1000 for a 0.3% fee).

    output = (in * 997 * r_out) // (r_in * 1000 + in * 997)
    input  = (r_in * out * 1000) // ((r_out - out) * 997)

Both round down. Rounding down the output always favours the pool. Rounding
down the required input can, for very small amounts, undercharge by a
fraction of a unit; the pool controller rejects such swaps by checking the
reserve product after the swap.
"""

from cpamm.constants import FEE_DENOMINATOR, FEE_NUMERATOR
from cpamm.errors import InsufficientReserve, ZeroAmount
from cpamm.safe_int import S


def output_given_input(
    input_amount: int,
    input_reserve: int,
    output_reserve: int,
    *,
    fee_numerator: int = FEE_NUMERATOR,
    fee_denominator: int = FEE_DENOMINATOR,
) -> int:
    """Calculate the output received for an exact input.

    Args:
        input_amount: Amount of the input asset paid in
        input_reserve: Pool reserve of the input asset
        output_reserve: Pool reserve of the output asset
        fee_numerator: Fee multiplier numerator (default 997)
        fee_denominator: Fee multiplier denominator (default 1000)

    Returns:
        Output amount, rounded down

    Raises:
        ZeroAmount: If any amount or reserve is zero
    """
    if input_amount == 0 or input_reserve == 0 or output_reserve == 0:
        raise ZeroAmount(
            f"Zero amount in pricing: input={input_amount}, "
            f"reserves=({input_reserve}, {output_reserve})"
        )

    adjusted_in = S(input_amount) * S(fee_numerator)
    numerator = adjusted_in * S(output_reserve)
    denominator = S(input_reserve) * S(fee_denominator) + adjusted_in

    return (numerator // denominator).value


def input_given_output(
    output_amount: int,
    input_reserve: int,
    output_reserve: int,
    *,
    fee_numerator: int = FEE_NUMERATOR,
    fee_denominator: int = FEE_DENOMINATOR,
) -> int:
    """Calculate the input required for an exact output.

    Args:
        output_amount: Desired amount of the output asset
        input_reserve: Pool reserve of the input asset
        output_reserve: Pool reserve of the output asset
        fee_numerator: Fee multiplier numerator (default 997)
        fee_denominator: Fee multiplier denominator (default 1000)

    Returns:
        Required input amount, rounded down

    Raises:
        ZeroAmount: If any amount or reserve is zero
        InsufficientReserve: If output_amount >= output_reserve
    """
    if output_amount == 0 or input_reserve == 0 or output_reserve == 0:
        raise ZeroAmount(
            f"Zero amount in pricing: output={output_amount}, "
            f"reserves=({input_reserve}, {output_reserve})"
        )
    if output_amount >= output_reserve:
        raise InsufficientReserve(
            f"Output {output_amount} must be below output reserve {output_reserve}"
        )

    numerator = S(input_reserve) * S(output_amount) * S(fee_denominator)
    denominator = (S(output_reserve) - S(output_amount)) * S(fee_numerator)

    return (numerator // denominator).value


def quote(amount_b: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of asset A matching amount_b at the current reserve ratio.

    Rounds down. Used for ratio-preserving deposits.

    Raises:
        ZeroAmount: If reserve_b is zero
    """
    if reserve_b == 0:
        raise ZeroAmount("Cannot quote against an empty base reserve")
    return (S(amount_b) * S(reserve_a) // S(reserve_b)).value


def constant_product(reserve_a: int, reserve_b: int) -> int:
    """The invariant k = reserve_a * reserve_b."""
    return reserve_a * reserve_b
