"""Repository dispatch events announcing a new release to other repositories."""

from collections.abc import Callable, Mapping
from typing import Annotated, Any, Literal

from pydantic import Field

from release_action.models.base import Model

type EventType = Literal["built-miruken", "miruken-version-created"]


class Event(Model):
    """Common behaviour for dispatch events."""

    def to_request_body(self) -> dict[str, Any]:
        """Serialize to the body of a repository dispatch request."""
        return self.model_dump(mode="json", by_alias=True)


class BuiltMirukenPayload(Model):
    """Payload of the event sent after a successful build."""

    miruken_version: str = Field(
        ..., alias="mirukenVersion", description="Release tag (e.g., 'v1.4.2')"
    )


class BuiltMirukenEvent(Event):
    """Event sent after a build was tested, tagged and pushed."""

    event_type: Literal["built-miruken"] = "built-miruken"
    client_payload: BuiltMirukenPayload


class VersionCreatedPayload(Model):
    """Payload of the event sent when a new version is created."""

    version: str = Field(..., description="Release tag (e.g., 'v1.4.2')")


class VersionCreatedEvent(Event):
    """Event sent to an organization when a new version exists."""

    event_type: Literal["miruken-version-created"] = "miruken-version-created"
    client_payload: VersionCreatedPayload


DispatchEvent = Annotated[
    BuiltMirukenEvent | VersionCreatedEvent, Field(discriminator="event_type")
]

EVENT_BUILDERS: Mapping[str, Callable[[str], DispatchEvent]] = {
    "built-miruken": lambda tag_name: BuiltMirukenEvent(
        client_payload=BuiltMirukenPayload(miruken_version=tag_name)
    ),
    "miruken-version-created": lambda tag_name: VersionCreatedEvent(
        client_payload=VersionCreatedPayload(version=tag_name)
    ),
}


def build_event(event_type: EventType, tag_name: str) -> DispatchEvent:
    """Build the dispatch event of the given type for a release tag."""
    return EVENT_BUILDERS[event_type](tag_name)
