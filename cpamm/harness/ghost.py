"""Ghost (shadow) accounting for the invariant harness.

GhostState is owned by exactly one InvariantHandler. The pool never sees it.
It only changes after a call the handler issued has completed, so at every
checkpoint it describes the reserve movement the handler expects from the
calls that actually went through.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field


@dataclass
class CallStats:
    """Outcome counters for one kind of handler call."""

    issued: int = 0
    succeeded: int = 0
    skipped: int = 0
    skip_reasons: Counter[str] = field(default_factory=Counter)


@dataclass
class GhostState:
    """Expected cumulative reserve deltas since the handler started.

    Attributes:
        expected_delta_a: Signed change of reserve A the handler expects
        expected_delta_b: Signed change of reserve B the handler expects
        expected_delta_shares: Change of the share supply the handler expects
        calls: Per-kind call counters ("deposit", "swap")
    """

    expected_delta_a: int = 0
    expected_delta_b: int = 0
    expected_delta_shares: int = 0
    calls: dict[str, CallStats] = field(default_factory=dict)

    def stats(self, kind: str) -> CallStats:
        if kind not in self.calls:
            self.calls[kind] = CallStats()
        return self.calls[kind]

    def note_issued(self, kind: str) -> None:
        self.stats(kind).issued += 1

    def note_skipped(self, kind: str, reason: str) -> None:
        stats = self.stats(kind)
        stats.skipped += 1
        stats.skip_reasons[reason] += 1

    def record(self, kind: str, delta_a: int, delta_b: int, delta_shares: int = 0) -> None:
        """Book a confirmed call's expected effect on the reserves and shares."""
        self.expected_delta_a += delta_a
        self.expected_delta_b += delta_b
        self.expected_delta_shares += delta_shares
        self.stats(kind).succeeded += 1

    def starved_kinds(self) -> list[str]:
        """Call kinds that were issued but never went through."""
        return sorted(
            kind for kind, stats in self.calls.items() if stats.issued and not stats.succeeded
        )
