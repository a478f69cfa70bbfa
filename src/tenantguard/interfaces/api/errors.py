"""Error handlers mapping domain exceptions to HTTP responses."""

import logging

import falcon
import falcon.asgi

from tenantguard.domain.exceptions import (
    ConstraintViolation,
    NotFound,
    PermissionDenied,
    StoreUnavailable,
    TenantMismatch,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def handle_validation_error(req, resp: falcon.asgi.Response, ex: ValidationError, params) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": str(ex)}


async def handle_permission_denied(req, resp: falcon.asgi.Response, ex: Exception, params) -> None:
    # tenant mismatch details stay in the logs
    resp.status = falcon.HTTP_403
    resp.media = {"error": str(ex) if isinstance(ex, PermissionDenied) else "Permission denied"}


async def handle_not_found(req, resp: falcon.asgi.Response, ex: NotFound, params) -> None:
    resp.status = falcon.HTTP_404
    resp.media = {"error": str(ex)}


async def handle_conflict(req, resp: falcon.asgi.Response, ex: ConstraintViolation, params) -> None:
    resp.status = falcon.HTTP_409
    resp.media = {"error": str(ex)}


async def handle_store_unavailable(req, resp: falcon.asgi.Response, ex: StoreUnavailable, params) -> None:
    logger.error("Store unavailable on %s %s: %s", req.method, req.path, ex)
    resp.status = falcon.HTTP_503
    resp.media = {"error": "Service temporarily unavailable"}


async def handle_unexpected(req, resp: falcon.asgi.Response, ex: Exception, params) -> None:
    logger.exception("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"error": "Internal server error"}


def register_error_handlers(app: falcon.asgi.App) -> None:
    """Register handlers; Falcon picks the most specific one by MRO."""
    app.add_error_handler(Exception, handle_unexpected)
    app.add_error_handler(ValidationError, handle_validation_error)
    app.add_error_handler(PermissionDenied, handle_permission_denied)
    app.add_error_handler(TenantMismatch, handle_permission_denied)
    app.add_error_handler(NotFound, handle_not_found)
    app.add_error_handler(ConstraintViolation, handle_conflict)
    app.add_error_handler(StoreUnavailable, handle_store_unavailable)
