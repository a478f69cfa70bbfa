"""List permission catalog use cases.

The catalog is global and read-only, so these use cases do no access checks
of their own; the HTTP resources serving them declare ``permission:read`` and
are gated by the authorization middleware.
"""

from collections import Counter
from dataclasses import dataclass

from tenantguard.application.ports import PermissionCatalog
from tenantguard.domain.entities import Permission


@dataclass
class PermissionCategory:
    """Catalog category with the number of permissions in it."""

    name: str
    permission_count: int


class ListPermissionsUseCase:
    """List catalog permissions, optionally for one category."""

    def __init__(self, catalog: PermissionCatalog) -> None:
        self._catalog = catalog

    async def execute(self, category: str | None = None) -> list[Permission]:
        perms = self._catalog.all()
        if category:
            perms = [p for p in perms if p.category == category]
        return sorted(perms, key=lambda p: (p.category, p.name))


class ListPermissionCategoriesUseCase:
    """List catalog categories with counts."""

    def __init__(self, catalog: PermissionCatalog) -> None:
        self._catalog = catalog

    async def execute(self) -> list[PermissionCategory]:
        counts = Counter(p.category for p in self._catalog.all())
        return [PermissionCategory(name=c, permission_count=n) for c, n in sorted(counts.items())]
