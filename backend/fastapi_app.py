# fastapi_app.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request

from config import Settings, settings
from deployment_matcher import DeploymentMatcher
from kube_client import KubeClient
from registry_events import decode_events
from rollout import RolloutPipeline

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _build_kube_client(app_settings: Settings) -> Optional[KubeClient]:
    """Create the Kubernetes client, or None when the cluster is unreachable."""
    try:
        return KubeClient(
            in_cluster=app_settings.K8S_IN_CLUSTER,
            master_url=app_settings.K8S_MASTER_URL,
            ca_file=app_settings.K8S_CA_FILE,
            cert_file=app_settings.K8S_CERT_FILE,
            key_file=app_settings.K8S_KEY_FILE,
            skip_ssl_verification=app_settings.K8S_SKIP_SSL_VERIFICATION,
            context=app_settings.K8S_CONTEXT,
        )
    except Exception as e:
        logger.warning(f"⚠️ Kubernetes client initialization failed: {e}. Push events will be rejected.")
        return None


def create_app(kube_client: Optional[KubeClient] = None, app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the webhook application.

    Args:
        kube_client: Client to use instead of one built from settings
        app_settings: Settings to use instead of the global ones
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        orchestrator_client = kube_client if kube_client is not None else _build_kube_client(app_settings)
        app.state.kube_client = orchestrator_client
        app.state.pipeline = None
        app.state.matcher = None
        if orchestrator_client is not None:
            pipeline = RolloutPipeline(orchestrator_client)
            pipeline.start()
            app.state.pipeline = pipeline
            app.state.matcher = DeploymentMatcher(orchestrator_client, pipeline)
        try:
            yield
        finally:
            if app.state.pipeline is not None:
                await app.state.pipeline.stop()
                await app.state.pipeline.wait_idle()

    app = FastAPI(title="Image Rollout Webhook", version="1.0.0", lifespan=lifespan)
    app.state.settings = app_settings

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------
    @app.get("/health")
    async def health() -> Dict[str, str]:
        pipeline = getattr(app.state, "pipeline", None)
        running = pipeline is not None and pipeline.started
        return {"status": "healthy", "rollout": "running" if running else "stopped"}

    @app.post("/event")
    async def registry_event(
        request: Request,
        registry: Optional[str] = Query(default=None, description="Registry hostname override"),
    ) -> Dict[str, Any]:
        """Receive a registry notification and queue the impacted rollouts."""
        matcher = getattr(app.state, "matcher", None)
        if matcher is None:
            raise HTTPException(status_code=503, detail="Kubernetes client not available")

        body = await request.body()
        override = registry if registry is not None else app.state.settings.REGISTRY_HOST
        events = decode_events(body, override)
        decisions = await matcher.handle_batch(events)

        return {
            "events": len(events),
            "decisions": [asdict(d) for d in decisions],
            "enqueued": sum(1 for d in decisions if d.update),
        }

    return app


app = create_app()


def main() -> None:
    import uvicorn
    uvicorn.run(app, host=settings.HTTP_HOST, port=settings.HTTP_PORT)


if __name__ == "__main__":
    main()
