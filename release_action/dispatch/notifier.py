"""GitHub repository dispatch notifier."""

import json
import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp
from pydantic import ValidationError
from yarl import URL

from release_action.dispatch.base import DispatchNotifier
from release_action.dispatch.config import DispatchConfig
from release_action.dispatch.models import RepositoryList
from release_action.errors import TargetResolutionFailed
from release_action.models.event import DispatchEvent
from release_action.models.result import Delivery
from release_action.models.target import RepositoryTarget

log = logging.getLogger(__name__)

PAGE_SIZE = 100


@dataclass(frozen=True, kw_only=True)
class GitHubDispatcher(DispatchNotifier):
    """Sends repository dispatches through the GitHub REST API."""

    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: DispatchConfig
    ) -> AsyncGenerator["GitHubDispatcher", None]:
        """Create dispatcher with managed session lifecycle."""
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {config.token.get_secret_value()}",
            "X-GitHub-Api-Version": config.api_version,
        }
        async with aiohttp.ClientSession(
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=config.timeout),
        ) as session:
            yield cls(config=config, session=session)

    def url(self, *segments: str) -> URL:
        url = URL(self.config.api_base_url.rstrip("/"))
        for segment in segments:
            url = url / segment
        return url

    async def list_repositories(self, organization: str) -> Sequence[RepositoryTarget]:
        """List repositories of an organization, following pagination."""
        url = self.url("orgs", organization, "repos")
        targets: list[RepositoryTarget] = []
        page = 1

        while True:
            params = {"per_page": str(PAGE_SIZE), "page": str(page)}

            try:
                async with self.session.get(url, params=params) as response:
                    if response.status != 200:
                        text = await response.text()
                        raise TargetResolutionFailed(
                            organization, f"{response.status} {text}"
                        )
                    body = await response.read()
                repositories = RepositoryList.validate_json(body)
            except (aiohttp.ClientError, TimeoutError) as e:
                raise TargetResolutionFailed(
                    organization, str(e) or type(e).__name__
                ) from e
            except ValidationError as e:
                raise TargetResolutionFailed(
                    organization, f"unexpected response: {e}"
                ) from e

            targets.extend(
                RepositoryTarget(owner=organization, repo=repository.name)
                for repository in repositories
            )

            if len(repositories) < PAGE_SIZE:
                break

            page += 1

        return targets

    async def send_dispatch(
        self,
        target: RepositoryTarget,
        event: DispatchEvent,
    ) -> Delivery:
        """POST the event to the repository's dispatches endpoint."""
        url = self.url("repos", target.owner, target.repo, "dispatches")
        body = event.to_request_body()

        try:
            async with self.session.post(url, json=body) as response:
                if 200 <= response.status < 300:
                    log.info(
                        "Sent [%s] repository dispatch to [%s] with data [%s]",
                        event.event_type,
                        target,
                        json.dumps(body["client_payload"]),
                    )
                    return Delivery(
                        target=target, status="delivered", status_code=response.status
                    )
                text = await response.text()
                status_code = response.status
        except (aiohttp.ClientError, TimeoutError) as e:
            message = str(e) or type(e).__name__
            log.error("Failed to send [%s] to [%s]: %s", event.event_type, target, message)
            return Delivery(target=target, status="failed", message=message)

        log.error(
            "Failed to send [%s] to [%s]: %s %s",
            event.event_type,
            target,
            status_code,
            text,
        )
        return Delivery(
            target=target, status="failed", status_code=status_code, message=text
        )
