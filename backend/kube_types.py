"""
Type definitions for registry events and Kubernetes rollouts.
"""
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PushEvent:
    """One push notification item from the registry."""
    action: str
    request_host: str
    target_repository: str
    target_tag: str
    target_digest: str = ""
    event_id: str = ""

    @property
    def image(self) -> str:
        """Image reference without tag, as containers refer to it."""
        return f"{self.request_host}/{self.target_repository}"

    @property
    def tagged_image(self) -> str:
        return f"{self.image}:{self.target_tag}"


@dataclass
class ContainerDecision:
    """Policy outcome for one container matching a push event."""
    namespace: str
    deployment: str
    container: str
    current_image: str
    new_image: str
    policy: str
    update: bool


@dataclass
class PendingUpdate:
    """Deployment accepted for rollout."""
    namespace: str
    name: str
    image: str
    deployment: Any  # kubernetes.client.V1Deployment snapshot
