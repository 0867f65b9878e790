"""Fixtures for module tests using WireMock and Docker testcontainers."""

import subprocess
from collections.abc import Generator
from pathlib import Path

import pytest
from testcontainers.core import testcontainers_config
from wiremock.constants import Config
from wiremock.testing.testcontainer import WireMockContainer


@pytest.fixture(scope="session", autouse=True)
def _disable_ryuk() -> None:
    """Disable the extra cleanup instance, we use contexts to clean containers."""
    testcontainers_config.ryuk_disabled = True


@pytest.fixture(scope="session")
def wiremock_server() -> Generator[WireMockContainer, None, None]:
    """Start WireMock container using wiremock's testcontainer support."""
    container = WireMockContainer(secure=False)

    with container as wm:
        Config.base_url = wm.get_url("__admin")
        yield wm
        print(wm.get_logs())


@pytest.fixture(scope="session")
def wiremock_url(wiremock_server: WireMockContainer) -> str:
    """URL for WireMock as seen from the host."""
    return wiremock_server.get_base_url()


@pytest.fixture
def release_repo(tmp_path: Path) -> Path:
    """Create a repository with one commit for the versioning tool."""
    for args in (
        ["git", "init"],
        ["git", "config", "user.email", "test@example.com"],
        ["git", "config", "user.name", "Test"],
        ["git", "commit", "--allow-empty", "-m", "Initial commit"],
    ):
        subprocess.run(args, cwd=tmp_path, check=True, capture_output=True)

    return tmp_path
