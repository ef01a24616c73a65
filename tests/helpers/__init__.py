"""Test helpers module for shared test utilities.

- constants: Asset symbols, accounts and times
- factories: Token and pool factory functions
"""

from tests.helpers.constants import LP, LP2, START_TIME, TKA, TKB, TRADER
from tests.helpers.factories import RefusingToken, fund, make_pool, make_tokens

__all__ = [
    # Constants
    "TKA",
    "TKB",
    "LP",
    "LP2",
    "TRADER",
    "START_TIME",
    # Factories
    "RefusingToken",
    "fund",
    "make_pool",
    "make_tokens",
]
