"""Errors raised by release steps.

Every error is fatal to the run except PartialDispatchFailure, which the
orchestrator may tolerate when configured to.
"""

from collections.abc import Sequence
from typing import Literal


class ReleaseError(Exception):
    """Base class for all release failures."""


class MissingConfiguration(ReleaseError):
    """Raised when required configuration values or secrets are not set."""

    def __init__(self, names: Sequence[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(
            f"Missing required configuration: {', '.join(self.names)}"
        )


class InvalidConfiguration(ReleaseError):
    """Raised when a configuration value cannot be interpreted."""


class CommandFailed(ReleaseError):
    """Raised when an external command exits non-zero or cannot be launched."""

    def __init__(
        self,
        command: str,
        *,
        exit_code: int | None = None,
        launch_error: str | None = None,
        stderr_tail: str = "",
        stdout_tail: str = "",
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.launch_error = launch_error
        self.stderr_tail = stderr_tail
        self.stdout_tail = stdout_tail

        if launch_error is not None:
            message = f"Command failed to run ({launch_error}): {command}"
        else:
            message = f"Command failed with exit code {exit_code}: {command}"
        for output in (stdout_tail, stderr_tail):
            if output:
                message = f"{message}\n{output}"
        super().__init__(message)


class InvalidVersionOutput(ReleaseError):
    """Raised when the versioning tool output is not a single version."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Versioning tool returned an invalid version: {raw!r}")


class TagAlreadyExists(ReleaseError):
    """Raised when the release tag is already present."""

    def __init__(self, tag_name: str, location: Literal["local", "remote"]) -> None:
        self.tag_name = tag_name
        self.location = location
        super().__init__(f"Tag {tag_name} already exists ({location})")


class AuthenticationFailed(ReleaseError):
    """Raised when the remote rejects the push credentials."""


class PushFailed(ReleaseError):
    """Raised when pushing the tag fails for any other reason."""


class TargetResolutionFailed(ReleaseError):
    """Raised when the repositories of an organization cannot be listed."""

    def __init__(self, organization: str, reason: str) -> None:
        self.organization = organization
        self.reason = reason
        super().__init__(
            f"Failed to list repositories for organization {organization}: {reason}"
        )


class PartialDispatchFailure(ReleaseError):
    """Raised when at least one repository dispatch was not delivered."""

    def __init__(self, failed_targets: Sequence[str]) -> None:
        self.failed_targets = tuple(failed_targets)
        super().__init__(
            "Repository dispatch failed for: " + ", ".join(self.failed_targets)
        )
