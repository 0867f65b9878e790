"""Create the release tag and push it to the remote."""

import asyncio
import base64
import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path

from pydantic import SecretStr

from release_action.command import run_command
from release_action.errors import (
    AuthenticationFailed,
    CommandFailed,
    PushFailed,
    ReleaseError,
    TagAlreadyExists,
)

log = logging.getLogger(__name__)

DEFAULT_COMMITTER = ("release-action", "release-action@users.noreply.github.com")

TAG_EXISTS_MARKERS = ("already exists", "[rejected]")
AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "could not read username",
    "invalid username or password",
    "terminal prompts disabled",
    "permission to",
    "returned error: 401",
    "returned error: 403",
)


def classify_push_failure(tag_name: str, error: CommandFailed) -> ReleaseError:
    """Map a failed git remote operation to a release error."""
    text = error.stderr_tail.lower()
    if any(marker in text for marker in TAG_EXISTS_MARKERS):
        return TagAlreadyExists(tag_name, "remote")
    if any(marker in text for marker in AUTH_FAILURE_MARKERS):
        return AuthenticationFailed(
            f"Remote rejected credentials for {tag_name}: {error.stderr_tail}"
        )
    return PushFailed(f"Failed to push {tag_name}: {error}")


@dataclass(frozen=True, kw_only=True)
class GitTagger:
    """Tags HEAD of a checkout and pushes the tag with a bearer credential."""

    working_directory: Path
    token: SecretStr
    remote: str = "origin"
    timeout: float | None = None

    def auth_env(self) -> dict[str, str]:
        """Git configuration passed through the environment.

        Keeps the token out of argv and out of the repository config. The empty
        extraheader entry clears headers inherited from other config scopes.
        """
        credential = base64.b64encode(
            f"x-access-token:{self.token.get_secret_value()}".encode()
        ).decode()
        return {
            "GIT_TERMINAL_PROMPT": "0",
            "GIT_CONFIG_COUNT": "3",
            "GIT_CONFIG_KEY_0": "http.extraheader",
            "GIT_CONFIG_VALUE_0": "",
            "GIT_CONFIG_KEY_1": "http.extraheader",
            "GIT_CONFIG_VALUE_1": f"AUTHORIZATION: basic {credential}",
            "GIT_CONFIG_KEY_2": "safe.directory",
            "GIT_CONFIG_VALUE_2": str(self.working_directory),
        }

    async def tag_and_push(self, tag_name: str, message: str | None = None) -> None:
        """Create an annotated tag at HEAD and push it.

        Raises:
            TagAlreadyExists: If the tag exists locally or on the remote
            AuthenticationFailed: If the remote rejects the credential
            PushFailed: On any other remote failure
            CommandFailed: If git cannot be run or a local git step fails

        """
        if await self.tag_exists_locally(tag_name):
            raise TagAlreadyExists(tag_name, "local")

        try:
            exists_remotely = await self.tag_exists_remotely(tag_name)
        except CommandFailed as e:
            raise classify_push_failure(tag_name, e) from e
        if exists_remotely:
            raise TagAlreadyExists(tag_name, "remote")

        env = self.auth_env()
        if not await self._succeeds("config", "user.email"):
            name, email = DEFAULT_COMMITTER
            env |= {"GIT_COMMITTER_NAME": name, "GIT_COMMITTER_EMAIL": email}

        await self._git(
            "tag", "-a", tag_name, "-m", message or f"Release {tag_name}", env=env
        )
        log.info("Created tag %s", tag_name)

        try:
            await self._git("push", self.remote, f"refs/tags/{tag_name}")
        except CommandFailed as e:
            # Drop the local tag so a re-run is not blocked by a tag never published.
            try:
                await self._git("tag", "-d", tag_name)
            except CommandFailed as rollback_error:
                log.warning(
                    "Could not delete local tag %s: %s", tag_name, rollback_error
                )
            raise classify_push_failure(tag_name, e) from e

        log.info("Pushed tag %s to %s", tag_name, self.remote)

    async def tag_exists_locally(self, tag_name: str) -> bool:
        """Check if the tag exists in the local repository."""
        return await self._succeeds(
            "rev-parse", "--verify", "--quiet", f"refs/tags/{tag_name}"
        )

    async def tag_exists_remotely(self, tag_name: str) -> bool:
        """Check if the tag exists on the remote."""
        output = await self._git(
            "ls-remote", "--tags", self.remote, f"refs/tags/{tag_name}"
        )
        return bool(output.strip())

    async def _git(self, *args: str, env: dict[str, str] | None = None) -> str:
        return await run_command(
            ["git", *args],
            cwd=self.working_directory,
            env=env or self.auth_env(),
            timeout=self.timeout,
        )

    async def _succeeds(self, *args: str) -> bool:
        """Run a git query whose exit status is the answer."""
        display = shlex.join(["git", *args])
        try:
            process = await asyncio.create_subprocess_exec(
                "git",
                *args,
                cwd=self.working_directory,
                env={**os.environ, **self.auth_env()},
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            log.error("Command could not be started: %s (%s)", display, e)
            raise CommandFailed(display, launch_error=str(e)) from e

        try:
            await asyncio.wait_for(process.wait(), self.timeout)
        except TimeoutError:
            process.kill()
            await process.wait()
            log.error("Command timed out after %ss: %s", self.timeout, display)
            raise CommandFailed(
                display, launch_error=f"timed out after {self.timeout}s"
            ) from None

        return process.returncode == 0
