"""Prometheus exposition endpoint."""

import falcon.asgi
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest


class MetricsResource:
    """GET /v1/metrics."""

    def __init__(self, registry=REGISTRY) -> None:
        self._registry = registry

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.content_type = CONTENT_TYPE_LATEST
        resp.data = generate_latest(self._registry)
        resp.status = falcon.HTTP_200
