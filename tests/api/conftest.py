"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from tenantguard.infrastructure.permission.resolution_engine import PermissionResolver
from tenantguard.interfaces.api.app import create_app
from tenantguard.interfaces.api.middleware.auth import AuthMiddleware

from tests.conftest import RecordingAuditLog, World, identity


@pytest.fixture
def resolver(world: World) -> PermissionResolver:
    return PermissionResolver(world.uow_factory, world.catalog)


@pytest.fixture
def app(world: World, resolver: PermissionResolver, audit_log: RecordingAuditLog):
    """Falcon ASGI app over the in-memory world; identity comes from headers."""
    return create_app(
        world.uow_factory,
        world.catalog,
        resolver,
        audit_log,
        middleware=[AuthMiddleware(trust_identity_headers=True)],
    )


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)


@pytest.fixture
def owner_headers(world: World) -> dict[str, str]:
    return identity(world)


@pytest.fixture
def staff_headers(world: World) -> dict[str, str]:
    return identity(world, "staff-a")
