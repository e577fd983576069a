"""
Rollout pipeline sending accepted deployment updates to Kubernetes.

Updates are queued by the matcher and consumed by a single worker task. Each
dequeued update is submitted in its own task, so submissions are unordered
and a deployment queued twice is submitted twice.
"""
import asyncio
import logging
from typing import Optional, Set

from kube_types import PendingUpdate

logger = logging.getLogger(__name__)


class RolloutPipeline:
    """Queue of pending updates plus the worker that submits them."""

    def __init__(self, kube_client):
        """
        Args:
            kube_client: KubeClient used to submit updated deployments
        """
        self.kube_client = kube_client
        self._queue: "asyncio.Queue[PendingUpdate]" = asyncio.Queue()
        self._stop = asyncio.Event()
        self._worker: Optional[asyncio.Task] = None
        self._submissions: Set[asyncio.Task] = set()
        self.started = False

    @property
    def in_flight(self) -> int:
        return len(self._submissions)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Start the worker task. No-op when already started."""
        if self.started:
            return
        self._stop.clear()
        self._worker = asyncio.create_task(self._run(), name="rollout-worker")
        self.started = True
        logger.info("Rollout worker started")

    async def stop(self) -> None:
        """Stop the worker. Submissions already running are left to finish."""
        if self.started and self._worker is not None:
            self._stop.set()
            await self._worker
            logger.info("Rollout worker stopped")
        self._worker = None
        self.started = False

    def enqueue(self, update: PendingUpdate) -> None:
        self._queue.put_nowait(update)
        logger.debug(f"Queued rollout of {update.namespace}/{update.name} to {update.image}")

    async def wait_idle(self) -> None:
        """
        Wait until queued updates have been submitted.

        Once stopped, only the submissions already running are waited for.
        """
        if self.started:
            await self._queue.join()
        while self._submissions:
            await asyncio.gather(*list(self._submissions), return_exceptions=True)

    async def _run(self) -> None:
        stop_waiter = asyncio.create_task(self._stop.wait())
        try:
            while True:
                next_update = asyncio.create_task(self._queue.get())
                done, _ = await asyncio.wait(
                    {next_update, stop_waiter},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if next_update in done:
                    self._dispatch(next_update.result())
                else:
                    next_update.cancel()
                if stop_waiter in done:
                    return
        finally:
            stop_waiter.cancel()

    def _dispatch(self, update: PendingUpdate) -> None:
        task = asyncio.create_task(self._submit(update))
        self._submissions.add(task)
        task.add_done_callback(self._submissions.discard)
        self._queue.task_done()

    async def _submit(self, update: PendingUpdate) -> None:
        logger.info(f"🚀 Deploying {update.namespace}/{update.name} with image {update.image}")
        try:
            accepted = await asyncio.to_thread(self.kube_client.update_deployment, update.deployment)
        except Exception as e:
            logger.error(f"❌ Rollout of {update.namespace}/{update.name} failed: {e}")
            return
        if not accepted:
            logger.warning(f"⚠️ Rollout of {update.namespace}/{update.name} was not applied")
