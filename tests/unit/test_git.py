"""Tests for push failure classification and rollback."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import SecretStr

from release_action.errors import (
    AuthenticationFailed,
    CommandFailed,
    PushFailed,
    TagAlreadyExists,
)
from release_action.git import GitTagger, classify_push_failure


def _failed(stderr_tail: str) -> CommandFailed:
    return CommandFailed(
        "git push origin refs/tags/v1.0.0", exit_code=1, stderr_tail=stderr_tail
    )


@pytest.mark.parametrize(
    "stderr_tail",
    [
        " ! [rejected]        v1.0.0 -> v1.0.0 (already exists)",
        "error: failed to push some refs\nhint: Updates were rejected because the tag already exists in the remote.",
    ],
)
def test_existing_remote_tag(stderr_tail: str) -> None:
    """Recognizes a tag that was published concurrently."""
    error = classify_push_failure("v1.0.0", _failed(stderr_tail))

    assert isinstance(error, TagAlreadyExists)
    assert error.location == "remote"


@pytest.mark.parametrize(
    "stderr_tail",
    [
        "remote: Invalid username or password.\nfatal: Authentication failed for 'https://github.com/y/x.git/'",
        "fatal: could not read Username for 'https://github.com': terminal prompts disabled",
        "remote: Permission to y/x.git denied to github-actions[bot].",
        "fatal: unable to access 'https://github.com/y/x.git/': The requested URL returned error: 403",
    ],
)
def test_authentication_failure(stderr_tail: str) -> None:
    """Recognizes rejected credentials."""
    error = classify_push_failure("v1.0.0", _failed(stderr_tail))

    assert isinstance(error, AuthenticationFailed)


@pytest.mark.parametrize(
    "stderr_tail",
    [
        "fatal: 'origin' does not appear to be a git repository",
        " ! [remote rejected] v1.0.0 -> v1.0.0 (pre-receive hook declined)",
        "",
    ],
)
def test_other_failures(stderr_tail: str) -> None:
    """Falls back to PushFailed with the command error."""
    error = classify_push_failure("v1.0.0", _failed(stderr_tail))

    assert isinstance(error, PushFailed)
    assert "Failed to push v1.0.0" in str(error)


async def test_failed_rollback_keeps_push_error(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Raises the push classification even when deleting the local tag fails."""
    tagger = GitTagger(working_directory=Path("/repo"), token=SecretStr("abc"))
    push_error = _failed("fatal: Authentication failed for 'https://github.com/y/x/'")
    rollback_error = CommandFailed(
        "git tag -d v1.0.0", exit_code=1, stderr_tail="error: index.lock exists"
    )

    with (
        patch.object(
            GitTagger, "_succeeds", new_callable=AsyncMock, side_effect=[False, True]
        ),
        patch.object(
            GitTagger,
            "_git",
            new_callable=AsyncMock,
            side_effect=["", "", push_error, rollback_error],
        ) as mock_git,
        pytest.raises(AuthenticationFailed),
    ):
        await tagger.tag_and_push("v1.0.0")

    assert mock_git.call_args.args == ("tag", "-d", "v1.0.0")
    assert "Could not delete local tag v1.0.0" in caplog.text
