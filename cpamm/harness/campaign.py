"""Fuzz campaign: many independent runs of the invariant handler.

Each run builds a fresh registry, tokens and pool on a ManualClock,
bootstraps the pool, then issues `depth` handler calls chosen by a seeded
PRNG. The ghost/actual invariant is asserted after every call, so a failing
run reports the first step at which the books diverged.
"""

from __future__ import annotations

import random

import structlog

from cpamm.clock import ManualClock
from cpamm.config import CampaignConfig
from cpamm.errors import InvariantViolation
from cpamm.harness.handler import InvariantHandler
from cpamm.harness.report import CallSummary, CampaignReport, RunReport
from cpamm.pools.controller import PoolController
from cpamm.pools.registry import PoolRegistry
from cpamm.tokens.memory import InMemoryToken

logger = structlog.get_logger()

BOOTSTRAPPER = "bootstrapper"
START_TIME = 1_700_000_000


class InvariantCampaign:
    """Runs the handler against fresh pools and collects reports."""

    def __init__(self, config: CampaignConfig | None = None) -> None:
        self.config = config or CampaignConfig()

    def run(self) -> CampaignReport:
        config = self.config
        master = random.Random(config.seed)
        report = CampaignReport(seed=config.seed, runs=config.runs, depth=config.depth)

        logger.info("campaign_started", seed=config.seed, runs=config.runs, depth=config.depth)
        for index in range(config.runs):
            run_report = self.run_once(index, master.getrandbits(64))
            report.run_reports.append(run_report)
            if not run_report.passed:
                logger.warning(
                    "campaign_run_failed",
                    run=index,
                    seed=run_report.seed,
                    step=run_report.steps,
                    violation=run_report.violation,
                )
            elif run_report.suspect:
                logger.warning(
                    "campaign_run_suspect",
                    run=index,
                    seed=run_report.seed,
                    starved=run_report.starved_kinds,
                )

        logger.info(
            "campaign_finished",
            passed=report.passed,
            failures=len(report.failures),
            suspect=len(report.suspect_runs),
        )
        return report

    def run_once(self, index: int, seed: int) -> RunReport:
        """Drive one freshly bootstrapped pool for `depth` calls."""
        clock = ManualClock(START_TIME)
        pool = self._bootstrap_pool(clock)
        handler = InvariantHandler(pool, clock, config=self.config.harness)
        starting_k = pool.k()

        rng = random.Random(seed)
        violation: str | None = None
        steps = 0
        for _ in range(self.config.depth):
            clock.advance(1)
            call_seed = rng.getrandbits(256)
            steps += 1
            try:
                if rng.random() < 0.5:
                    handler.bounded_deposit(call_seed)
                else:
                    handler.bounded_swap(call_seed)
                handler.assert_invariant()
            except InvariantViolation as err:
                violation = str(err)
                break

        actual_a, actual_b = handler.actual_deltas()
        return RunReport(
            index=index,
            seed=seed,
            steps=steps,
            calls={kind: CallSummary.from_stats(stats) for kind, stats in handler.ghost.calls.items()},
            starting_reserves=(handler.starting_reserve_a, handler.starting_reserve_b),
            final_reserves=pool.current_reserves(),
            expected_delta_a=handler.ghost.expected_delta_a,
            expected_delta_b=handler.ghost.expected_delta_b,
            actual_delta_a=actual_a,
            actual_delta_b=actual_b,
            expected_delta_shares=handler.ghost.expected_delta_shares,
            actual_delta_shares=handler.actual_share_delta(),
            starting_k=starting_k,
            final_k=pool.k(),
            violation=violation,
            starved_kinds=handler.ghost.starved_kinds(),
        )

    def _bootstrap_pool(self, clock: ManualClock) -> PoolController:
        config = self.config
        base = InMemoryToken("WETH", "Wrapped Ether")
        asset = InMemoryToken("POOL", "Pool Token")
        registry = PoolRegistry(base, config=config.pool, clock=clock)
        pool = registry.create_pool(asset)

        asset.mint(BOOTSTRAPPER, config.initial_a)
        base.mint(BOOTSTRAPPER, config.initial_b)
        asset.approve(BOOTSTRAPPER, pool.address, config.initial_a)
        base.approve(BOOTSTRAPPER, pool.address, config.initial_b)
        pool.deposit(BOOTSTRAPPER, config.initial_b, config.initial_b, config.initial_a, clock.now())
        return pool


def run_campaign(config: CampaignConfig | None = None) -> CampaignReport:
    """Run a campaign with the given (or default) configuration."""
    return InvariantCampaign(config).run()
