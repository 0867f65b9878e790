"""Resolve required and optional values from the process environment."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from pydantic import SecretStr

from release_action.errors import MissingConfiguration

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ConfigurationValue:
    """A named value read from the environment."""

    name: str
    required: bool
    value: str | None = None


@dataclass(frozen=True, kw_only=True)
class Secret:
    """A named secret read from the environment.

    The value is wrapped in SecretStr so it renders masked everywhere.
    """

    name: str
    value: SecretStr


def find_missing(environ: Mapping[str, str], names: Iterable[str]) -> list[str]:
    """Return the names that are absent or empty in the environment."""
    return sorted(name for name in set(names) if not environ.get(name))


def resolve(
    environ: Mapping[str, str],
    required: Iterable[str],
    optional: Iterable[str] = (),
) -> Mapping[str, ConfigurationValue]:
    """Resolve configuration values.

    Args:
        environ: Environment to read from
        required: Names that must be set to a non-empty value
        optional: Names that resolve to None when unset

    Returns:
        Resolved values mapped by name

    Raises:
        MissingConfiguration: Listing every required name that is not set

    """
    required = set(required)
    if missing := find_missing(environ, required):
        raise MissingConfiguration(missing)

    values = {
        name: ConfigurationValue(name=name, required=False, value=environ.get(name) or None)
        for name in optional
    }
    values.update(
        {
            name: ConfigurationValue(name=name, required=True, value=environ[name])
            for name in required
        }
    )
    return values


def resolve_secrets(
    environ: Mapping[str, str], required: Iterable[str]
) -> Mapping[str, Secret]:
    """Resolve secrets, failing with every missing name at once."""
    required = set(required)
    if missing := find_missing(environ, required):
        raise MissingConfiguration(missing)

    return {
        name: Secret(name=name, value=SecretStr(environ[name])) for name in required
    }


def log_variables(values: Mapping[str, ConfigurationValue]) -> None:
    """Log resolved configuration values."""
    log.info("Environment variables:")
    for name, value in sorted(values.items()):
        log.info("  %s: %s", name, value.value if value.value is not None else "")


def log_secrets(secrets: Mapping[str, Secret]) -> None:
    """Log resolved secrets, masked."""
    log.info("Secrets:")
    for name, secret in sorted(secrets.items()):
        log.info("  %s: %s", name, secret.value)
