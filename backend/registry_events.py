"""
Registry notification decoding.

Docker registries POST an envelope of events to the configured endpoint::

    {"events": [{"action": "push",
                 "target": {"repository": "app", "tag": "1.2.0", ...},
                 "request": {"host": "registry.example.com", ...}}]}

Only push events carrying a tag are relevant for rollouts.
"""
import logging
from dataclasses import replace
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from kube_types import PushEvent

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Wire models
# -----------------------------------------------------------------------------
class EventTarget(BaseModel):
    mediaType: Optional[str] = ""
    size: Optional[int] = 0
    digest: Optional[str] = ""
    length: Optional[int] = 0
    repository: Optional[str] = ""
    url: Optional[str] = ""
    tag: Optional[str] = ""


class EventRequest(BaseModel):
    id: Optional[str] = ""
    addr: Optional[str] = ""
    host: Optional[str] = ""
    method: Optional[str] = ""
    useragent: Optional[str] = ""


class EventActor(BaseModel):
    name: Optional[str] = ""


class EventSource(BaseModel):
    addr: Optional[str] = ""
    instanceID: Optional[str] = ""


class RegistryEvent(BaseModel):
    id: Optional[str] = ""
    timestamp: Optional[str] = ""
    action: Optional[str] = ""
    target: EventTarget = Field(default_factory=EventTarget)
    request: EventRequest = Field(default_factory=EventRequest)
    actor: EventActor = Field(default_factory=EventActor)
    source: EventSource = Field(default_factory=EventSource)

    @field_validator("target", "request", "actor", "source", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return {} if value is None else value

    def to_push_event(self) -> PushEvent:
        return PushEvent(
            action=self.action or "",
            request_host=self.request.host or "",
            target_repository=self.target.repository or "",
            target_tag=self.target.tag or "",
            target_digest=self.target.digest or "",
            event_id=self.id or "",
        )


class RegistryNotification(BaseModel):
    """Notification envelope sent by the registry."""
    events: Optional[List[RegistryEvent]] = Field(default_factory=list)

    @field_validator("events", mode="before")
    @classmethod
    def _null_events_as_empty(cls, value):
        if isinstance(value, list):
            return [{} if item is None else item for item in value]
        return value


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------
def decode_events(payload: bytes, registry_override: str = "") -> List[PushEvent]:
    """
    Decode a registry notification into push events.

    Args:
        payload: Raw webhook body
        registry_override: Registry hostname replacing the host reported by
            each event, ignored when blank

    Returns:
        Push events with a tag, in payload order. Empty when the payload
        cannot be decoded.
    """
    try:
        notification = RegistryNotification.model_validate_json(payload)
    except ValidationError as e:
        logger.error(f"❌ Failed to decode registry notification: {e}")
        return []

    override = bool(registry_override and registry_override.strip())
    events = []
    for raw_event in notification.events or []:
        event = raw_event.to_push_event()
        # force registry name to override the host given by the request
        if override:
            event = replace(event, request_host=registry_override)
        if event.action == "push" and event.target_tag:
            events.append(event)

    logger.debug(f"Decoded {len(events)} push events from {len(notification.events or [])} notifications")
    return events
