"""Shared fixtures: Kubernetes deployments and a mocked cluster client."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
from kubernetes import client


def make_deployment(
    name: str = "web",
    namespace: str = "default",
    images: dict[str, str] | None = None,
    policy: str | None = "minor",
) -> client.V1Deployment:
    """Build a V1Deployment with one container per ``images`` entry."""
    images = images if images is not None else {"app": "reg/app:1.0.0"}
    labels = {"app": name}
    if policy is not None:
        labels["argoos.io/policy"] = policy
    containers = [client.V1Container(name=c, image=i) for c, i in images.items()]
    return client.V1Deployment(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=labels),
        spec=client.V1DeploymentSpec(
            selector=client.V1LabelSelector(match_labels={"app": name}),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels={"app": name}),
                spec=client.V1PodSpec(containers=containers),
            ),
        ),
    )


def notification(*events: dict[str, Any]) -> bytes:
    """Encode registry events as a notification envelope."""
    return json.dumps({"events": list(events)}).encode()


def push(repository: str = "app", tag: str = "1.1.0", host: str = "reg", action: str = "push") -> dict[str, Any]:
    return {
        "id": f"{repository}-{tag}",
        "action": action,
        "target": {"repository": repository, "tag": tag, "digest": "sha256:abc"},
        "request": {"host": host, "method": "PUT"},
    }


@pytest.fixture()
def kube() -> MagicMock:
    """A KubeClient mock with one namespace and no deployments."""
    kube_client = MagicMock()
    kube_client.list_namespaces.return_value = ["default"]
    kube_client.list_deployments.return_value = []
    kube_client.update_deployment.return_value = True
    return kube_client
