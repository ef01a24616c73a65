"""Token ledger collaborators used by pools."""

from cpamm.tokens.base import TokenLedger
from cpamm.tokens.memory import InMemoryToken

__all__ = ["TokenLedger", "InMemoryToken"]
