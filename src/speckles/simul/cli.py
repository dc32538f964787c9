"""Command line entry point for parameter sweeps."""

import argparse

from beartype.typing import List, Optional

from speckles.utils import SpeckleError, configure_logging, get_logger

from .orchestrate import run_sweep
from .sweep import load_sweep

logger = get_logger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Run a sweep described in a YAML file.

    Returns the process exit status: 0 on success, 1 when the sweep
    could not run, 2 when it finished with failed configurations.
    """
    parser = argparse.ArgumentParser(
        description="Run a speckle simulation parameter sweep."
    )
    parser.add_argument(
        "--config", required=True, help="YAML file describing the sweep"
    )
    parser.add_argument(
        "--results",
        default="results",
        help="results directory (default: results)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="configurations run concurrently (default: 1)",
    )
    args = parser.parse_args(argv)
    configure_logging()

    try:
        outcome = run_sweep(
            load_sweep(args.config), args.results, max_workers=args.workers
        )
    except SpeckleError as err:
        logger.error("Sweep aborted: %s", err)
        return 1
    print(
        f"{len(outcome.runs)} runs written to {args.results}, "
        f"{len(outcome.failures)} failed"
    )
    return 2 if outcome.failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
