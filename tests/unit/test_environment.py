"""Tests for environment resolution."""

import logging

import pytest

from release_action.environment import (
    log_secrets,
    log_variables,
    resolve,
    resolve_secrets,
)
from release_action.errors import MissingConfiguration


class TestResolve:
    """Tests for resolve."""

    def test_resolves_required_and_optional_values(self) -> None:
        """Returns required values and None for unset optional values."""
        values = resolve(
            {"repository": "x", "ref": "refs/heads/main"},
            required=["repository", "ref"],
            optional=["skipRepositoryDispatches"],
        )

        assert values["repository"].value == "x"
        assert values["repository"].required is True
        assert values["ref"].value == "refs/heads/main"
        assert values["skipRepositoryDispatches"].value is None
        assert values["skipRepositoryDispatches"].required is False

    def test_reports_every_missing_name(self) -> None:
        """Lists all missing required names, not just the first."""
        with pytest.raises(MissingConfiguration) as exc_info:
            resolve(
                {"repository": "x"},
                required=["repositoryPath", "repository", "repositoryOwner", "ref"],
            )

        assert exc_info.value.names == ("ref", "repositoryOwner", "repositoryPath")
        assert "ref, repositoryOwner, repositoryPath" in str(exc_info.value)

    def test_empty_value_counts_as_missing(self) -> None:
        """Treats an empty required value as missing."""
        with pytest.raises(MissingConfiguration) as exc_info:
            resolve({"repository": ""}, required=["repository"])

        assert exc_info.value.names == ("repository",)

    def test_empty_optional_value_resolves_to_none(self) -> None:
        """Treats an empty optional value as unset."""
        values = resolve({}, required=[], optional=["dispatchOrganization"])

        assert values["dispatchOrganization"].value is None


class TestResolveSecrets:
    """Tests for resolve_secrets."""

    def test_wraps_values_as_secrets(self) -> None:
        """Keeps the value retrievable but masked in its representation."""
        secrets = resolve_secrets({"GH_TOKEN": "abc"}, required=["GH_TOKEN"])

        assert secrets["GH_TOKEN"].value.get_secret_value() == "abc"
        assert "abc" not in repr(secrets["GH_TOKEN"])
        assert "abc" not in str(secrets["GH_TOKEN"].value)

    def test_reports_every_missing_secret(self) -> None:
        """Lists all missing secrets together."""
        with pytest.raises(MissingConfiguration) as exc_info:
            resolve_secrets({}, required=["GH_TOKEN", "NPM_TOKEN"])

        assert exc_info.value.names == ("GH_TOKEN", "NPM_TOKEN")


def test_log_variables(caplog: pytest.LogCaptureFixture) -> None:
    """Logs each resolved value."""
    values = resolve(
        {"repository": "x"}, required=["repository"], optional=["ref"]
    )

    with caplog.at_level(logging.INFO):
        log_variables(values)

    assert "Environment variables:" in caplog.text
    assert "repository: x" in caplog.text
    assert "ref: " in caplog.text


@pytest.mark.parametrize(
    "secret",
    ["abc", "ghp_0123456789abcdef", "%s", "%(message)s", "{}", "\x1b[31m"],
)
def test_log_secrets_never_logs_the_value(
    caplog: pytest.LogCaptureFixture, secret: str
) -> None:
    """Logs a fixed mask instead of the secret value."""
    secrets = resolve_secrets({"GH_TOKEN": secret}, required=["GH_TOKEN"])

    with caplog.at_level(logging.INFO):
        log_secrets(secrets)

    assert "GH_TOKEN: **********" in caplog.text
    assert all(secret not in record.getMessage() for record in caplog.records)
