"""Release orchestrator: validate, test, version, tag and announce."""

import logging
from collections.abc import Callable, Mapping
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from release_action.command import run_command
from release_action.config import ReleaseConfig, load_release_config
from release_action.dispatch import DispatchConfig, DispatchNotifier, GitHubDispatcher
from release_action.errors import PartialDispatchFailure, ReleaseError
from release_action.git import GitTagger
from release_action.models.event import build_event
from release_action.models.result import (
    DispatchReport,
    Failure,
    RunResult,
    RunState,
    Success,
)
from release_action.version import resolve_version

log = logging.getLogger(__name__)

type NotifierFactory = Callable[
    [DispatchConfig], AbstractAsyncContextManager[DispatchNotifier]
]


def log_header(title: str) -> None:
    """Log a section header."""
    log.info("=" * 80)
    log.info(title)
    log.info("=" * 80)


@dataclass(frozen=True, kw_only=True)
class ReleaseOrchestrator:
    """Runs one release from a tested checkout.

    Steps run strictly in order and the first failing step ends the run;
    nothing after it is executed.
    """

    environ: Mapping[str, str]
    notifier_factory: NotifierFactory = GitHubDispatcher.from_config

    async def run(self) -> RunResult:
        """Run every release step and return the outcome."""
        state = RunState.VALIDATING
        try:
            log_header("Validating configuration")
            config = load_release_config(self.environ)

            state = RunState.TESTING
            log_header(f"Testing {config.repository_owner}/{config.repository}")
            await run_command(
                config.test_command,
                cwd=config.working_directory,
                timeout=config.command_timeout,
            )

            state = RunState.VERSION_RESOLVING
            log_header("Resolving version")
            version = await resolve_version(
                config.repository_path,
                image=config.git_version_image,
                timeout=config.command_timeout,
            )

            state = RunState.TAGGING
            log_header(f"Tagging {version.tag_name}")
            tagger = GitTagger(
                working_directory=config.working_directory,
                token=config.token,
                timeout=config.command_timeout,
            )
            await tagger.tag_and_push(
                version.tag_name, message=f"Release {version.tag_name} from {config.ref}"
            )

            state = RunState.DISPATCHING
            log_header("Sending repository dispatches")
            report = await self.dispatch(config, version.tag_name)
        except ReleaseError as e:
            log.error("Release failed while %s: %s", state, e)
            return Failure(state=state, error=e)

        log.info("Release %s completed (%s)", version.tag_name, RunState.DONE)
        return Success(tag_name=version.tag_name, report=report)

    async def dispatch(self, config: ReleaseConfig, tag_name: str) -> DispatchReport:
        """Announce the tag, tolerating undelivered targets only if configured.

        Raises:
            TargetResolutionFailed: If the organization cannot be expanded
            PartialDispatchFailure: If a delivery failed and failures are
                not tolerated

        """
        event = build_event(config.dispatch_event_type, tag_name)

        async with self.notifier_factory(config.dispatch_config()) as notifier:
            report = await notifier.send_dispatches(config.dispatch_target, event)

        try:
            report.raise_for_failures()
        except PartialDispatchFailure as e:
            if not config.tolerate_dispatch_failures:
                raise
            log.warning("Tolerating failed repository dispatches: %s", e)

        return report
