"""Pool and harness constants.

Centralizes the fee representation and liquidity limits so the pool and the
invariant harness price swaps from the same numbers.
"""

# 0.3% swap fee, expressed once for both pricing directions
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# Smallest base-asset amount accepted by a bootstrap deposit
MINIMUM_LIQUIDITY = 1_000

# Default harness bounds for randomly derived amounts (base-asset units)
HARNESS_MIN_DEPOSIT = MINIMUM_LIQUIDITY
HARNESS_MAX_DEPOSIT = 2**64 - 1
HARNESS_MIN_SWAP_OUTPUT = 1

# The handler funds and bounds each call at this multiple of the amount it
# expects the pool to charge, so an overcharging pool is observed rather
# than rejected by the slippage check
HARNESS_SLIPPAGE_MULTIPLIER = 100

# Initial reserves the campaign bootstraps each run with
CAMPAIGN_INITIAL_A = 100 * 10**18
CAMPAIGN_INITIAL_B = 50 * 10**18

# One in this many derived deadlines is already expired
EXPIRED_DEADLINE_ONE_IN = 16
