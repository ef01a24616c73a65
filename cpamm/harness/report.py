"""Pydantic models describing fuzz campaign results."""

from pydantic import BaseModel, Field

from cpamm.harness.ghost import CallStats


class CallSummary(BaseModel):
    """Outcome counts for one kind of handler call."""

    issued: int = 0
    succeeded: int = 0
    skipped: int = 0
    skip_reasons: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_stats(cls, stats: CallStats) -> "CallSummary":
        return cls(
            issued=stats.issued,
            succeeded=stats.succeeded,
            skipped=stats.skipped,
            skip_reasons=dict(stats.skip_reasons),
        )


class RunReport(BaseModel):
    """Result of one run: a fresh pool driven for `depth` handler calls."""

    index: int
    seed: int
    steps: int = Field(description="Handler calls issued before the run ended")
    calls: dict[str, CallSummary] = Field(default_factory=dict)
    starting_reserves: tuple[int, int]
    final_reserves: tuple[int, int]
    expected_delta_a: int
    expected_delta_b: int
    actual_delta_a: int
    actual_delta_b: int
    expected_delta_shares: int = 0
    actual_delta_shares: int = 0
    starting_k: int
    final_k: int
    violation: str | None = Field(
        default=None,
        description="Invariant violation message, None if the run held",
    )
    starved_kinds: list[str] = Field(
        default_factory=list,
        description="Call kinds issued in this run that never went through",
    )

    @property
    def passed(self) -> bool:
        return self.violation is None

    @property
    def suspect(self) -> bool:
        """True when a call kind never went through, so the run proves little about it."""
        return bool(self.starved_kinds)


class CampaignReport(BaseModel):
    """Result of a whole campaign."""

    seed: int
    runs: int
    depth: int
    run_reports: list[RunReport] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(run.passed for run in self.run_reports)

    @property
    def failures(self) -> list[RunReport]:
        return [run for run in self.run_reports if not run.passed]

    @property
    def suspect_runs(self) -> list[RunReport]:
        return [run for run in self.run_reports if run.suspect]

    def totals(self) -> dict[str, CallSummary]:
        """Call counts summed over every run, per call kind."""
        merged: dict[str, CallSummary] = {}
        for run in self.run_reports:
            for kind, summary in run.calls.items():
                total = merged.setdefault(kind, CallSummary())
                total.issued += summary.issued
                total.succeeded += summary.succeeded
                total.skipped += summary.skipped
                for reason, count in summary.skip_reasons.items():
                    total.skip_reasons[reason] = total.skip_reasons.get(reason, 0) + count
        return merged
