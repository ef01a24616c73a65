"""Interface the pool needs from a fungible-token ledger."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenLedger(Protocol):
    """A fungible token with ERC20-style balance and allowance semantics.

    Transfers either complete fully or fail without side effects; failure is
    reported by returning False, never by a partial move.
    """

    @property
    def symbol(self) -> str:
        """Short identifier used to name pools and assets."""
        ...

    def balance_of(self, holder: str) -> int:
        """Return the balance of holder (0 for unknown holders)."""
        ...

    def allowance(self, owner: str, spender: str) -> int:
        """Return how much spender may still move out of owner's balance."""
        ...

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Set spender's allowance over owner's balance to amount."""
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move amount from sender to recipient."""
        ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """Move amount from owner to recipient using spender's allowance."""
        ...
