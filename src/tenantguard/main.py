"""Application entry point and composition root."""

import logging

from tenantguard import __version__
from tenantguard.config import get_settings
from tenantguard.infrastructure.audit.queued_audit_log import QueuedAuditLog
from tenantguard.infrastructure.auth.keycloak_provider import KeycloakProvider
from tenantguard.infrastructure.permission.catalog import CachedPermissionCatalog
from tenantguard.infrastructure.permission.resolution_engine import PermissionResolver
from tenantguard.infrastructure.persistence.postgres.connection import create_pool
from tenantguard.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from tenantguard.interfaces.api.app import create_app
from tenantguard.interfaces.api.middleware.auth import AuthMiddleware
from tenantguard.interfaces.api.middleware.cors import CORSMiddleware
from tenantguard.interfaces.api.middleware.lifespan import LifespanMiddleware
from tenantguard.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_tenantguard_app():
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    configure_logging("DEBUG" if settings.debug else settings.log_level)

    pool = create_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    uow_factory = create_uow_factory(pool)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
            business_claim=settings.keycloak_business_claim,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None and not settings.trust_identity_headers:
        logger.warning("No identity source configured; all protected requests will get 401")

    catalog = CachedPermissionCatalog(uow_factory, settings.catalog_refresh_seconds)
    resolver = PermissionResolver(
        uow_factory, catalog, timeout=settings.authorize_timeout_seconds
    )
    audit_log = QueuedAuditLog(
        uow_factory,
        max_size=settings.audit_queue_size,
        max_retries=settings.audit_max_retries,
        retry_base_delay=settings.audit_retry_base_delay_seconds,
    )

    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return create_app(
        uow_factory,
        catalog,
        resolver,
        audit_log,
        middleware=[
            CORSMiddleware(cors_origins),
            LifespanMiddleware(pool, catalog, audit_log),
            AuthMiddleware(keycloak, trust_identity_headers=settings.trust_identity_headers),
        ],
        pool=pool,
        record_allowed=settings.audit_allowed_decisions,
        authorize_timeout=settings.authorize_timeout_seconds,
    )


def main() -> None:
    """CLI entry point - run the API under uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("TenantGuard v%s (%s)", __version__, settings.environment)
    uvicorn.run(
        "tenantguard.main:create_tenantguard_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
