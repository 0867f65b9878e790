"""Derive the release version with GitVersion running in a container."""

import logging
import re
from pathlib import Path

from pydantic import Field

from release_action.command import run_command
from release_action.errors import InvalidVersionOutput
from release_action.models.base import Model

log = logging.getLogger(__name__)

DEFAULT_GITVERSION_IMAGE = "gittools/gitversion:5.12.0-alpine.3.14-6.0"

# Downstream repositories parse tags with this prefix; changing it breaks them.
TAG_PREFIX = "v"

SEMVER_PATTERN = re.compile(
    r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
)


class Version(Model):
    """A semantic version derived from repository history."""

    value: str = Field(..., description="Semantic version (e.g., '1.4.2')")

    @property
    def tag_name(self) -> str:
        return f"{TAG_PREFIX}{self.value}"

    def __str__(self) -> str:
        return self.value


def parse_version(raw: str) -> Version:
    """Parse the single-line output of the versioning tool.

    Raises:
        InvalidVersionOutput: If the output is empty, spans several lines or
            is not a semantic version

    """
    value = raw.rstrip()
    if not value or "\n" in value or "\r" in value:
        raise InvalidVersionOutput(raw)
    if not SEMVER_PATTERN.fullmatch(value):
        raise InvalidVersionOutput(raw)
    return Version(value=value)


def gitversion_command(repository_path: Path, image: str) -> list[str]:
    """Build the docker invocation asking GitVersion for the SemVer variable.

    The checkout is bind-mounted from `repository_path` because this process
    may itself run in a container whose working directory is not a host path.
    """
    return [
        "docker",
        "run",
        "--rm",
        "-v",
        f"{repository_path}:/repo",
        image,
        "/repo",
        "/showvariable",
        "SemVer",
    ]


async def resolve_version(
    repository_path: Path,
    *,
    image: str = DEFAULT_GITVERSION_IMAGE,
    timeout: float | None = None,
) -> Version:
    """Run GitVersion against the checkout and return the parsed version."""
    raw = await run_command(gitversion_command(repository_path, image), timeout=timeout)
    version = parse_version(raw)
    log.info("Resolved version %s (tag %s)", version, version.tag_name)
    return version
