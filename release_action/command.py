"""Run external commands, failing the release on any error."""

import asyncio
import logging
import os
import shlex
from collections.abc import Mapping, Sequence
from pathlib import Path

from release_action.errors import CommandFailed

log = logging.getLogger(__name__)

OUTPUT_TAIL_LINES = 20

# -e stops multi-line scripts at the first failing line
SHELL = ("bash", "-e", "-c")


def tail(text: str, lines: int = OUTPUT_TAIL_LINES) -> str:
    """Return the last `lines` lines of `text`."""
    return "\n".join(text.rstrip().splitlines()[-lines:])


async def run_command(
    command: str | Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> str:
    """Run a command to completion and return its stdout.

    Args:
        command: Shell script (run with bash) or argv sequence (run directly)
        cwd: Working directory, defaults to the current one
        env: Variables added to the current environment
        timeout: Seconds before the command is killed (None for no limit)

    Returns:
        Captured stdout with trailing whitespace removed

    Raises:
        CommandFailed: On non-zero exit, launch failure or timeout

    """
    if isinstance(command, str):
        argv = [*SHELL, command]
        display = command.strip()
    else:
        argv = list(command)
        display = shlex.join(argv)

    log.info("Running: %s", display)

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            env={**os.environ, **env} if env else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        log.error("Command could not be started: %s (%s)", display, e)
        raise CommandFailed(display, launch_error=str(e)) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        log.error("Command timed out after %ss: %s", timeout, display)
        raise CommandFailed(
            display, launch_error=f"timed out after {timeout}s"
        ) from None

    output = stdout.decode(errors="replace")
    if output.strip():
        log.debug("Output of %s:\n%s", display, output.rstrip())

    if process.returncode != 0:
        # Test runners such as `go test` report failures on stdout.
        stdout_tail = tail(output)
        stderr_tail = tail(stderr.decode(errors="replace"))
        log.error(
            "Command exited with %d: %s\n%s",
            process.returncode,
            display,
            "\n".join(part for part in (stdout_tail, stderr_tail) if part),
        )
        raise CommandFailed(
            display,
            exit_code=process.returncode,
            stderr_tail=stderr_tail,
            stdout_tail=stdout_tail,
        )

    return output.rstrip()
