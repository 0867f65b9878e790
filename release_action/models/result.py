"""Models for dispatch deliveries and release run outcomes."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal

from release_action.errors import PartialDispatchFailure, ReleaseError
from release_action.models.event import DispatchEvent
from release_action.models.target import DispatchTarget, RepositoryTarget


@dataclass(frozen=True, kw_only=True)
class Delivery:
    """Outcome of sending one dispatch to one repository."""

    target: RepositoryTarget
    status: Literal["delivered", "failed"]
    status_code: int | None = None
    message: str | None = None

    @property
    def delivered(self) -> bool:
        return self.status == "delivered"


@dataclass(frozen=True, kw_only=True)
class DispatchReport:
    """Per-target delivery report for one dispatch event."""

    target: DispatchTarget
    event: DispatchEvent
    deliveries: Sequence[Delivery] = field(default_factory=list)
    skipped: bool = False

    @property
    def failed(self) -> Sequence[Delivery]:
        return [delivery for delivery in self.deliveries if not delivery.delivered]

    def raise_for_failures(self) -> None:
        """Raise PartialDispatchFailure naming every undelivered repository."""
        if failed := self.failed:
            raise PartialDispatchFailure([str(delivery.target) for delivery in failed])


class RunState(StrEnum):
    """Steps of a release run, in execution order."""

    VALIDATING = "validating"
    TESTING = "testing"
    VERSION_RESOLVING = "version-resolving"
    TAGGING = "tagging"
    DISPATCHING = "dispatching"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, kw_only=True)
class Success:
    """The release was tagged, pushed and announced."""

    tag_name: str
    report: DispatchReport


@dataclass(frozen=True, kw_only=True)
class Failure:
    """The release stopped at `state` because of `error`."""

    state: RunState
    error: ReleaseError

    @property
    def reason(self) -> str:
        return str(self.error)


type RunResult = Success | Failure
