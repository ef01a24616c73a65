"""Command-line entry point for running an invariant fuzz campaign.

Usage:
    cpamm-fuzz --runs 128 --depth 64 --seed 7
    cpamm-fuzz --json > report.json

Defaults come from CPAMM_* environment variables (see cpamm.config);
command-line flags override them. Exits 0 when every run held the
invariant, 1 otherwise.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

import structlog

from cpamm.config import CampaignConfig
from cpamm.harness.campaign import InvariantCampaign
from cpamm.harness.report import CampaignReport

logger = structlog.get_logger()


def configure_logging(verbose: bool = False) -> None:
    """Set up structlog console output at INFO, or DEBUG when verbose."""
    log_level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpamm-fuzz",
        description="Drive constant-product pools with random calls and check ghost accounting",
    )
    parser.add_argument("--runs", type=int, default=None, help="Number of independent runs")
    parser.add_argument("--depth", type=int, default=None, help="Handler calls per run")
    parser.add_argument("--seed", type=int, default=None, help="Master seed")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full campaign report as JSON",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def print_summary(report: CampaignReport) -> None:
    print("=" * 60)
    print("Invariant campaign")
    print("=" * 60)
    print(f"Seed:  {report.seed}")
    print(f"Runs:  {report.runs}")
    print(f"Depth: {report.depth}")
    print()
    for kind, summary in sorted(report.totals().items()):
        print(f"{kind:<8} issued={summary.issued} ok={summary.succeeded} skipped={summary.skipped}")
        for reason, count in sorted(summary.skip_reasons.items()):
            print(f"    {reason}: {count}")
    print()
    for run in report.suspect_runs:
        starved = ", ".join(run.starved_kinds)
        print(f"Run {run.index} (seed {run.seed}) suspect: no {starved} call went through")
    if report.passed:
        print("All runs held the invariant.")
        return
    for run in report.failures:
        print(f"Run {run.index} (seed {run.seed}) failed at step {run.steps}: {run.violation}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = CampaignConfig.from_env()
        overrides = {
            name: value
            for name, value in (("runs", args.runs), ("depth", args.depth), ("seed", args.seed))
            if value is not None
        }
        config = dataclasses.replace(config, **overrides)
    except ValueError as err:
        logger.error("invalid_configuration", error=str(err))
        print(f"Error: {err}", file=sys.stderr)
        return 2

    report = InvariantCampaign(config).run()

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print_summary(report)
    return 0 if report.passed else 1


if __name__ == "__main__":
    sys.exit(main())
