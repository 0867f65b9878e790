"""Release configuration, resolved once from the environment at startup."""

from collections.abc import Mapping
from pathlib import Path

from pydantic import Field, SecretStr, ValidationError

from release_action.dispatch.config import DispatchConfig
from release_action.environment import (
    find_missing,
    log_secrets,
    log_variables,
    resolve,
    resolve_secrets,
)
from release_action.errors import InvalidConfiguration, MissingConfiguration
from release_action.models.base import Model
from release_action.models.event import EventType
from release_action.models.target import (
    DispatchTarget,
    OrganizationTarget,
    RepositoryTarget,
)
from release_action.version import DEFAULT_GITVERSION_IMAGE

REQUIRED_VARIABLES = ("repositoryPath", "repository", "repositoryOwner", "ref")
OPTIONAL_VARIABLES = (
    "skipRepositoryDispatches",
    "dispatchOrganization",
    "dispatchEventType",
    "tolerateDispatchFailures",
    "testCommand",
    "gitVersionImage",
    "workingDirectory",
    "githubApiUrl",
    "commandTimeout",
    "httpTimeout",
)
REQUIRED_SECRETS = ("GH_TOKEN",)


class ReleaseConfig(Model):
    """Everything a release run needs, keyed by environment variable name."""

    repository_path: Path = Field(
        ...,
        alias="repositoryPath",
        description="Host path of the checkout, mounted into the versioning tool",
    )
    repository: str = Field(..., description="Repository name")
    repository_owner: str = Field(..., alias="repositoryOwner")
    ref: str = Field(..., description="Git ref being released")
    token: SecretStr = Field(..., alias="GH_TOKEN")

    skip_repository_dispatches: bool = Field(
        default=False, alias="skipRepositoryDispatches"
    )
    dispatch_organization: str | None = Field(
        default=None,
        alias="dispatchOrganization",
        description="Send to every repository of this organization",
    )
    dispatch_event_type: EventType = Field(
        default="built-miruken", alias="dispatchEventType"
    )
    tolerate_dispatch_failures: bool = Field(
        default=False, alias="tolerateDispatchFailures"
    )
    test_command: str = Field(default="go test ./...", alias="testCommand")
    git_version_image: str = Field(
        default=DEFAULT_GITVERSION_IMAGE, alias="gitVersionImage"
    )
    working_directory: Path = Field(
        default_factory=Path.cwd,
        alias="workingDirectory",
        description="Checkout as seen by this process",
    )
    github_api_url: str = Field(default="https://api.github.com", alias="githubApiUrl")
    command_timeout: float = Field(default=1800, gt=0, alias="commandTimeout")
    http_timeout: float = Field(default=30, gt=0, alias="httpTimeout")

    @property
    def dispatch_target(self) -> DispatchTarget:
        if self.dispatch_organization:
            return OrganizationTarget(organization=self.dispatch_organization)
        return RepositoryTarget(owner=self.repository_owner, repo=self.repository)

    def dispatch_config(self) -> DispatchConfig:
        return DispatchConfig(
            token=self.token,
            api_base_url=self.github_api_url,
            timeout=self.http_timeout,
            skip=self.skip_repository_dispatches,
        )


def load_release_config(environ: Mapping[str, str]) -> ReleaseConfig:
    """Validate the environment and build the release configuration.

    Missing variables and secrets are reported together before anything
    else happens.

    Raises:
        MissingConfiguration: If any required variable or secret is unset
        InvalidConfiguration: If a value has the wrong shape

    """
    missing = find_missing(environ, REQUIRED_VARIABLES) + find_missing(
        environ, REQUIRED_SECRETS
    )
    if missing:
        raise MissingConfiguration(missing)

    variables = resolve(environ, REQUIRED_VARIABLES, OPTIONAL_VARIABLES)
    log_variables(variables)

    secrets = resolve_secrets(environ, REQUIRED_SECRETS)
    log_secrets(secrets)

    fields: dict[str, object] = {
        name: value.value for name, value in variables.items() if value.value is not None
    }
    fields.update({name: secret.value for name, secret in secrets.items()})

    try:
        return ReleaseConfig.model_validate(fields)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise InvalidConfiguration(f"Invalid configuration: {problems}") from e
