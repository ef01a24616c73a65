"""In-process token ledger.

Stands in for an on-chain token so pools and the invariant harness run
end to end in a single Python process.
"""

from __future__ import annotations

import threading
from collections import defaultdict

import structlog

logger = structlog.get_logger()


class InMemoryToken:
    """Fungible token with balances and allowances kept in dictionaries.

    All mutations take the token's lock, so concurrent pools sharing a token
    (every pool shares the base asset) never interleave a transfer.

    Attributes:
        symbol: Short identifier, also used as the asset key in registries
        name: Human-readable name
    """

    def __init__(self, symbol: str, name: str | None = None) -> None:
        if not symbol:
            raise ValueError("Token symbol cannot be empty")
        self.symbol = symbol
        self.name = name or symbol
        self._balances: defaultdict[str, int] = defaultdict(int)
        self._allowances: defaultdict[tuple[str, str], int] = defaultdict(int)
        self._total_supply = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol!r}, supply={self._total_supply})"

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        with self._lock:
            self._allowances[(owner, spender)] = amount
        return True

    def mint(self, holder: str, amount: int) -> None:
        """Create amount new tokens in holder's balance."""
        if amount < 0:
            raise ValueError(f"Cannot mint a negative amount: {amount}")
        with self._lock:
            self._balances[holder] += amount
            self._total_supply += amount

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            if self._balances.get(sender, 0) < amount:
                logger.debug(
                    "token_transfer_insufficient_balance",
                    token=self.symbol,
                    sender=sender,
                    amount=amount,
                )
                return False
            self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            allowed = self._allowances.get((owner, spender), 0)
            if allowed < amount:
                logger.debug(
                    "token_transfer_insufficient_allowance",
                    token=self.symbol,
                    owner=owner,
                    spender=spender,
                    allowed=allowed,
                    amount=amount,
                )
                return False
            if self._balances.get(owner, 0) < amount:
                logger.debug(
                    "token_transfer_insufficient_balance",
                    token=self.symbol,
                    sender=owner,
                    amount=amount,
                )
                return False
            self._allowances[(owner, spender)] = allowed - amount
            self._move(owner, recipient, amount)
        return True

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        # Caller holds the lock and has checked the balance
        self._balances[sender] -= amount
        self._balances[recipient] += amount
