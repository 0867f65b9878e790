"""Abstract base for repository dispatch notifiers."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from release_action.dispatch.config import DispatchConfig
from release_action.models.event import DispatchEvent
from release_action.models.result import Delivery, DispatchReport
from release_action.models.target import (
    DispatchTarget,
    OrganizationTarget,
    RepositoryTarget,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class DispatchNotifier(ABC):
    """Abstract base for sending dispatch events.

    Subclasses implement the transport for listing an organization's
    repositories and delivering to one repository. Fan-out, per-target
    isolation and dry runs are handled here.
    """

    config: DispatchConfig

    @abstractmethod
    async def list_repositories(self, organization: str) -> Sequence[RepositoryTarget]:
        """List the current repositories of an organization.

        Raises:
            TargetResolutionFailed: If the repositories cannot be listed

        """

    @abstractmethod
    async def send_dispatch(
        self,
        target: RepositoryTarget,
        event: DispatchEvent,
    ) -> Delivery:
        """Send one event to one repository.

        Delivery failures are returned, not raised, so one repository cannot
        prevent delivery to the others.
        """

    async def send_dispatches(
        self,
        target: DispatchTarget,
        event: DispatchEvent,
    ) -> DispatchReport:
        """Send the event to every repository of the target.

        Args:
            target: A single repository or an organization
            event: Event to deliver

        Returns:
            Report with one delivery per repository, or a skipped report when
            dispatches are disabled

        Raises:
            TargetResolutionFailed: If an organization cannot be expanded

        """
        if self.config.skip:
            log.info(
                "Skipping repository dispatches, would send [%s] to [%s] with data [%s]",
                event.event_type,
                target,
                json.dumps(event.to_request_body()["client_payload"]),
            )
            return DispatchReport(target=target, event=event, skipped=True)

        match target:
            case OrganizationTarget(organization=organization):
                repositories = await self.list_repositories(organization)
                log.info(
                    "Resolved %d repositories for organization %s",
                    len(repositories),
                    organization,
                )
            case RepositoryTarget():
                repositories = [target]

        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def send(repository: RepositoryTarget) -> Delivery:
            async with semaphore:
                return await self.send_dispatch(repository, event)

        deliveries = await asyncio.gather(*(send(repository) for repository in repositories))

        report = DispatchReport(target=target, event=event, deliveries=deliveries)
        log.info(
            "Delivered [%s] to %d of %d repositories",
            event.event_type,
            len(deliveries) - len(report.failed),
            len(deliveries),
        )
        return report
