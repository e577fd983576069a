"""
Find the deployments impacted by a push event and queue their rollouts.
"""
import asyncio
import copy
import logging
from typing import List, Tuple

from kube_types import ContainerDecision, PendingUpdate, PushEvent
from update_policy import (
    POLICIES,
    POLICY_LABEL,
    current_version,
    parse_version,
    should_update,
    strip_image_tag,
)

logger = logging.getLogger(__name__)


class DeploymentMatcher:
    """Matches push events against running deployments."""

    def __init__(self, kube_client, pipeline):
        """
        Args:
            kube_client: KubeClient listing namespaces and deployments
            pipeline: RolloutPipeline receiving accepted updates
        """
        self.kube_client = kube_client
        self.pipeline = pipeline

    async def match_and_enqueue(self, event: PushEvent) -> List[ContainerDecision]:
        """
        Check every deployment of every namespace against ``event``.

        Deployments whose policy accepts the pushed tag are queued on the
        rollout pipeline, once per accepting container.

        Returns:
            One decision per container running the pushed image
        """
        logger.info(f"Push event for {event.tagged_image}")
        decisions: List[ContainerDecision] = []

        namespaces = await asyncio.to_thread(self.kube_client.list_namespaces)
        for namespace in namespaces:
            deployments = await asyncio.to_thread(self.kube_client.list_deployments, namespace)
            for deployment in deployments:
                found, updates = self.evaluate_deployment(event, deployment)
                decisions.extend(found)
                for update in updates:
                    self.pipeline.enqueue(update)

        enqueued = sum(1 for d in decisions if d.update)
        logger.info(f"{event.tagged_image}: {len(decisions)} matching containers, {enqueued} rollouts queued")
        return decisions

    async def handle_batch(self, events: List[PushEvent]) -> List[ContainerDecision]:
        decisions: List[ContainerDecision] = []
        for event in events:
            decisions.extend(await self.match_and_enqueue(event))
        return decisions

    def evaluate_deployment(
        self, event: PushEvent, deployment
    ) -> Tuple[List[ContainerDecision], List[PendingUpdate]]:
        """
        Apply the deployment's update policy to its containers.

        Every container running the pushed image gets its image rewritten to
        the pushed tag in a working copy of the deployment, whatever the
        policy decides. Each container the policy accepts yields a snapshot
        of that working copy, so later snapshots include earlier rewrites.

        Args:
            event: Push event
            deployment: V1Deployment as listed from the cluster

        Returns:
            Tuple of (decisions for matching containers, updates to roll out)
        """
        labels = deployment.metadata.labels or {}
        policy = labels.get(POLICY_LABEL)
        if policy is None:
            return [], []
        name = deployment.metadata.name
        namespace = deployment.metadata.namespace
        if policy not in POLICIES:
            logger.warning(f"⚠️ Unknown policy {policy!r} on {namespace}/{name}, skipping")
            return [], []

        working = copy.deepcopy(deployment)
        event_version = parse_version(event.target_tag)
        new_image = event.tagged_image
        decisions: List[ContainerDecision] = []
        updates: List[PendingUpdate] = []

        for container in working.spec.template.spec.containers:
            logger.debug(f"Checking image {container.image}")
            # Remove version if any
            image = strip_image_tag(container.image)
            logger.debug(f"{image} == {event.image}")
            if image != event.image:
                continue

            current_image = container.image
            update = should_update(event_version, current_version(current_image), policy, event.target_tag)
            container.image = new_image
            decisions.append(ContainerDecision(
                namespace=namespace,
                deployment=name,
                container=container.name,
                current_image=current_image,
                new_image=new_image,
                policy=policy,
                update=update,
            ))
            if update:
                updates.append(PendingUpdate(
                    namespace=namespace,
                    name=name,
                    image=new_image,
                    deployment=copy.deepcopy(working),
                ))

        return decisions, updates
