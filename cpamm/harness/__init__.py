"""Stateful invariant harness for constant-product pools.

- ghost: GhostState accumulators owned by a handler
- handler: InvariantHandler issuing bounded-random calls and asserting
  ghost == actual
- campaign: InvariantCampaign running many seeded handler runs
- report: pydantic reports for campaigns and runs
"""

from cpamm.harness.campaign import InvariantCampaign, run_campaign
from cpamm.harness.ghost import CallStats, GhostState
from cpamm.harness.handler import HarnessPhase, InvariantHandler, bound
from cpamm.harness.report import CallSummary, CampaignReport, RunReport

__all__ = [
    "CallStats",
    "CallSummary",
    "CampaignReport",
    "GhostState",
    "HarnessPhase",
    "InvariantCampaign",
    "InvariantHandler",
    "RunReport",
    "bound",
    "run_campaign",
]
