"""Unit of Work port - transactional boundary."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from tenantguard.application.ports.repositories.audit_repository import AuditRepository
from tenantguard.application.ports.repositories.override_repository import (
    OverrideRepository,
)
from tenantguard.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from tenantguard.application.ports.repositories.role_repository import RoleRepository
from tenantguard.application.ports.repositories.rule_repository import RuleRepository


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def permissions(self) -> PermissionRepository: ...

    @property
    def roles(self) -> RoleRepository: ...

    @property
    def overrides(self) -> OverrideRepository: ...

    @property
    def rules(self) -> RuleRepository: ...

    @property
    def audit(self) -> AuditRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    def __call__(self) -> AbstractAsyncContextManager[UnitOfWork]: ...
