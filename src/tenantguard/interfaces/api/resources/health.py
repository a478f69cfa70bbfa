"""Health check endpoints."""

import falcon.asgi

from tenantguard.infrastructure.persistence.postgres.connection import ping


class HealthResource:
    """Health and readiness endpoints."""

    def __init__(self, pool=None, catalog=None) -> None:
        self._pool = pool
        self._catalog = catalog

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok"}
        resp.status = falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health/ready - readiness (database reachable, catalog loaded)."""
        checks = {
            "database": await ping(self._pool) if self._pool is not None else True,
            "catalog": getattr(self._catalog, "loaded", True),
        }
        ready = all(checks.values())
        resp.media = {"status": "ready" if ready else "unavailable", "checks": checks}
        resp.status = falcon.HTTP_200 if ready else falcon.HTTP_503
