"""Pool error classes.

PoolError subclasses are caller-visible failures of a single operation: the
operation is abandoned and pool state is left exactly as it was. The
invariant harness treats every PoolError as an expected outcome of a
random call.

InternalConsistencyError is deliberately outside that hierarchy. It means the
pool's own bookkeeping went wrong and must never be caught as a routine
failure.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class ZeroAmount(PoolError):
    """An amount parameter or a reserve used in pricing is zero."""

    pass


class DeadlineExpired(PoolError):
    """The current logical time is past the caller-supplied deadline."""

    pass


class SlippageExceeded(PoolError):
    """Execution would be worse than the caller's min/max bound."""

    pass


class LiquidityTooLow(PoolError):
    """Bootstrap deposit is below the pool's minimum liquidity."""

    pass


class InsufficientReserve(PoolError):
    """Requested output is not strictly below the output reserve."""

    pass


class InsufficientInput(PoolError):
    """Rounded swap input would lower the reserve product."""

    pass


class InsufficientShares(PoolError):
    """Caller tries to burn more liquidity shares than they hold."""

    pass


class TransferFailed(PoolError):
    """The token ledger refused a transfer."""

    pass


class InvalidAssetPair(PoolError):
    """Swap assets are not exactly the two assets of this pool."""

    pass


class PoolAlreadyExists(PoolError):
    """The registry already holds a pool for this asset."""

    pass


class InternalConsistencyError(RuntimeError):
    """Pool bookkeeping would go negative or no longer matches holdings."""

    pass


class InvariantViolation(AssertionError):
    """Ghost expectations and observed pool state diverged."""

    pass
