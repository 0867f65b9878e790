"""CLI entry point for the release action."""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from release_action.config import REQUIRED_SECRETS
from release_action.masking import install_secret_masking
from release_action.models.result import Failure, RunResult, Success
from release_action.orchestrator import ReleaseOrchestrator

DELIVERY_SYMBOLS = {
    "delivered": "✓",
    "failed": "✗",
}


def log_run_summary(log: logging.Logger, result: RunResult) -> None:
    """Log the outcome of the run with one line per dispatch target."""
    match result:
        case Success(tag_name=tag_name, report=report):
            log.info("Released %s", tag_name)
            if report.skipped:
                log.info("Repository dispatches skipped for %s", report.target)
            for delivery in report.deliveries:
                log.info(
                    "%s %s", DELIVERY_SYMBOLS[delivery.status], delivery.target
                )
                if delivery.message:
                    log.info("  Message: %s", delivery.message)
            log.info("Script completed successfully")
        case Failure(state=state, error=error):
            log.error("Failed while %s", state)
            log.error("Script Failed: %s", error)


def format_output(result: RunResult) -> dict[str, Any]:
    """Format the run outcome for JSON output."""
    match result:
        case Success(tag_name=tag_name, report=report):
            return {
                "status": "success",
                "tag": tag_name,
                "event_type": report.event.event_type,
                "skipped": report.skipped,
                "deliveries": [
                    {
                        "repository": str(delivery.target),
                        "status": delivery.status,
                        "status_code": delivery.status_code,
                        "message": delivery.message,
                    }
                    for delivery in report.deliveries
                ],
            }
        case Failure(state=state, error=error):
            return {
                "status": "failure",
                "state": str(state),
                "error": type(error).__name__,
                "message": str(error),
            }


async def run(environ: Mapping[str, str]) -> int:
    """Run the release and return exit code."""
    log = logging.getLogger("release_action")

    result = await ReleaseOrchestrator(environ=environ).run()

    log_run_summary(log, result)
    print(json.dumps(format_output(result), indent=2))

    return 0 if isinstance(result, Success) else 1


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Test, tag and announce a release of the current checkout"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the repository dispatches instead of sending them",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    environ = dict(os.environ)
    if args.dry_run:
        environ["skipRepositoryDispatches"] = "true"

    install_secret_masking(environ.get(name, "") for name in REQUIRED_SECRETS)

    sys.exit(asyncio.run(run(environ)))


if __name__ == "__main__":  # pragma: no cover
    main()
