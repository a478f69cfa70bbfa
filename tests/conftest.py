"""Pytest fixtures for TenantGuard tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MethodType
from uuid import UUID, uuid4

import pytest

from tenantguard.application.dto.audit_query import AuditFilters, decode_cursor, encode_cursor
from tenantguard.domain.entities import AuditEntry, BusinessRule, Permission, Role, UserOverride
from tenantguard.domain.exceptions import ConstraintViolation
from tenantguard.domain.value_objects import AdminPermission, Subject, SubjectRef


# --- Shared in-memory store ---


@dataclass
class FakeStore:
    """State shared by every FakeUnitOfWork created from one factory."""

    permissions: dict[UUID, Permission] = field(default_factory=dict)
    roles: dict[UUID, Role] = field(default_factory=dict)
    role_permissions: dict[UUID, set[UUID]] = field(default_factory=dict)
    user_roles: dict[tuple[str, UUID], UUID] = field(default_factory=dict)
    overrides: list[UserOverride] = field(default_factory=list)
    rules: dict[UUID, BusinessRule] = field(default_factory=dict)
    audit: dict[UUID, AuditEntry] = field(default_factory=dict)
    # (repository, method) -> replacement, bound on every new FakeUnitOfWork
    patches: dict[tuple[str, str], Callable] = field(default_factory=dict)


# --- Fake repositories ---


class FakePermissionRepository:
    """In-memory permission catalog repository."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def list_all(self) -> list[Permission]:
        return list(self._store.permissions.values())

    def add(self, permission: Permission) -> None:
        self._store.permissions[permission.id] = permission


class FakeRoleRepository:
    """In-memory role repository."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def get_by_id(self, role_id: UUID) -> Role | None:
        return self._store.roles.get(role_id)

    async def get_by_name(self, business_id: UUID, name: str) -> Role | None:
        for r in self._store.roles.values():
            if r.name == name and r.visible_to(business_id):
                return r
        return None

    async def list_for_business(self, business_id: UUID) -> list[Role]:
        return [r for r in self._store.roles.values() if r.visible_to(business_id)]

    async def list_for_user(self, user_id: str, business_id: UUID) -> list[Role]:
        role_id = self._store.user_roles.get((user_id, business_id))
        if role_id is None or role_id not in self._store.roles:
            return []
        return [self._store.roles[role_id]]

    async def get_permission_ids(self, role_id: UUID) -> set[UUID]:
        return set(self._store.role_permissions.get(role_id, set()))

    async def grant(self, role_id: UUID, permission_id: UUID) -> bool:
        granted = self._store.role_permissions.setdefault(role_id, set())
        if permission_id in granted:
            return False
        granted.add(permission_id)
        return True

    async def revoke(self, role_id: UUID, permission_id: UUID) -> bool:
        granted = self._store.role_permissions.get(role_id, set())
        if permission_id not in granted:
            return False
        granted.discard(permission_id)
        return True

    async def replace_permissions(self, role_id: UUID, permission_ids: set[UUID]) -> None:
        self._store.role_permissions[role_id] = set(permission_ids)

    async def create(self, role: Role) -> Role:
        for r in self._store.roles.values():
            if r.name == role.name and r.business_id == role.business_id:
                raise ConstraintViolation(f"Role '{role.name}' already exists")
        self._store.roles[role.id] = role
        return role

    async def delete(self, role_id: UUID) -> None:
        role = self._store.roles.get(role_id)
        if role is None or role.is_system_role:
            return
        del self._store.roles[role_id]
        self._store.role_permissions.pop(role_id, None)
        for key in [k for k, v in self._store.user_roles.items() if v == role_id]:
            del self._store.user_roles[key]
        subject = SubjectRef.role(role_id)
        for rid in [k for k, r in self._store.rules.items() if r.subject == subject]:
            del self._store.rules[rid]

    async def assign_user(self, user_id: str, business_id: UUID, role_id: UUID) -> None:
        self._store.user_roles[(user_id, business_id)] = role_id

    def add_role(self, role: Role, permission_ids: set[UUID] | None = None) -> Role:
        self._store.roles[role.id] = role
        self._store.role_permissions[role.id] = set(permission_ids or set())
        return role


class FakeOverrideRepository:
    """In-memory override repository; enforces one active override per key."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def _active(self, business_id: UUID, user_id: str, permission_id: UUID) -> list[UserOverride]:
        return [
            o
            for o in self._store.overrides
            if o.is_active
            and o.business_id == business_id
            and o.user_id == user_id
            and o.permission_id == permission_id
        ]

    async def get_active(
        self, business_id: UUID, user_id: str, permission_id: UUID, as_of: datetime
    ) -> UserOverride | None:
        for o in self._active(business_id, user_id, permission_id):
            if o.is_effective(as_of):
                return o
        return None

    async def replace_active(self, override: UserOverride) -> UserOverride:
        for o in self._active(override.business_id, override.user_id, override.permission_id):
            o.is_active = False
            o.revoked_at = override.granted_at
            o.revoked_by = override.granted_by
        self.insert(override)
        return override

    async def deactivate(
        self,
        business_id: UUID,
        user_id: str,
        permission_id: UUID,
        revoked_by: str,
        revoked_at: datetime,
    ) -> UserOverride | None:
        active = self._active(business_id, user_id, permission_id)
        for o in active:
            o.is_active = False
            o.revoked_at = revoked_at
            o.revoked_by = revoked_by
        return active[0] if active else None

    async def list_for_user(
        self, business_id: UUID, user_id: str, include_inactive: bool = False
    ) -> list[UserOverride]:
        items = [
            o
            for o in self._store.overrides
            if o.business_id == business_id
            and o.user_id == user_id
            and (include_inactive or o.is_active)
        ]
        return sorted(items, key=lambda o: o.granted_at, reverse=True)

    def insert(self, override: UserOverride) -> None:
        if override.is_active and self._active(
            override.business_id, override.user_id, override.permission_id
        ):
            raise ConstraintViolation("Active override already exists")
        self._store.overrides.append(override)


class FakeRuleRepository:
    """In-memory business rule repository."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def list_for_subjects(
        self,
        business_id: UUID,
        subjects: list[SubjectRef],
        permission_id: UUID,
    ) -> list[BusinessRule]:
        return [
            r
            for r in self._store.rules.values()
            if r.business_id == business_id and r.subject in subjects and r.covers(permission_id)
        ]

    async def list_for_business(
        self,
        business_id: UUID,
        *,
        subject: SubjectRef | None = None,
        permission_id: UUID | None = None,
    ) -> list[BusinessRule]:
        items = [
            r
            for r in self._store.rules.values()
            if r.business_id == business_id
            and (subject is None or r.subject == subject)
            and (permission_id is None or r.permission_id == permission_id)
        ]
        return sorted(items, key=lambda r: r.created_at)

    async def get_by_id(self, business_id: UUID, rule_id: UUID) -> BusinessRule | None:
        rule = self._store.rules.get(rule_id)
        return rule if rule and rule.business_id == business_id else None

    async def create(self, rule: BusinessRule) -> BusinessRule:
        self._store.rules[rule.id] = rule
        return rule

    async def delete(self, business_id: UUID, rule_id: UUID) -> None:
        rule = self._store.rules.get(rule_id)
        if rule and rule.business_id == business_id:
            del self._store.rules[rule_id]


class FakeAuditRepository:
    """In-memory audit repository; duplicate ids are ignored."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def append(self, entry: AuditEntry) -> None:
        self._store.audit.setdefault(entry.id, entry)

    async def list(
        self,
        business_id: UUID,
        filters: AuditFilters,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditEntry], str | None]:
        items = [
            e
            for e in self._store.audit.values()
            if e.business_id == business_id and filters.matches(e)
        ]
        items.sort(key=lambda e: (e.timestamp, str(e.id)), reverse=True)
        if cursor:
            ts, entry_id = decode_cursor(cursor)
            items = [e for e in items if (e.timestamp, str(e.id)) < (ts, str(entry_id))]
        page = items[: limit + 1]
        next_cursor = encode_cursor(page[limit - 1]) if len(page) > limit else None
        return page[:limit], next_cursor


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories over a shared store."""

    def __init__(self, store: FakeStore | None = None) -> None:
        self.store = store or FakeStore()
        self.permissions = FakePermissionRepository(self.store)
        self.roles = FakeRoleRepository(self.store)
        self.overrides = FakeOverrideRepository(self.store)
        self.rules = FakeRuleRepository(self.store)
        self.audit = FakeAuditRepository(self.store)
        self.committed = False
        for (repository, method), fn in self.store.patches.items():
            target = getattr(self, repository)
            setattr(target, method, MethodType(fn, target))

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        pass


def make_uow_factory(store: FakeStore):
    """Factory returning async context manager with a FakeUnitOfWork over ``store``."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        uow = FakeUnitOfWork(store)
        yield uow
        await uow.commit()

    return _factory


# --- Catalog and audit doubles ---


class StaticCatalog:
    """PermissionCatalog over a fixed list."""

    def __init__(self, permissions: list[Permission]) -> None:
        self._by_name = {p.name: p for p in permissions}
        self._by_id = {p.id: p for p in permissions}
        self.loaded = True

    def lookup(self, name: str) -> Permission | None:
        return self._by_name.get(name)

    def get(self, permission_id: UUID) -> Permission | None:
        return self._by_id.get(permission_id)

    def all(self) -> list[Permission]:
        return list(self._by_name.values())


class RecordingAuditLog:
    """AuditLog that keeps submitted entries in memory."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    def record(self, entry: AuditEntry) -> None:
        self.entries.append(entry)

    def actions(self) -> list[str]:
        return [e.action.value for e in self.entries]


def make_permission(name: str, category: str = "general") -> Permission:
    resource_type, action = name.split(":", 1)
    return Permission(
        id=uuid4(),
        name=name,
        category=category,
        resource_type=resource_type,
        action=action,
    )


# --- Seeded world ---

BUSINESS_PERMISSIONS = [
    ("customer:read", "customers"),
    ("customer:create", "customers"),
    ("customer:delete", "customers"),
    ("invoice:create", "sales"),
    ("pos:process", "sales"),
]


@dataclass
class World:
    """Two businesses, a permission catalog and a few users.

    Business A: ``owner-a`` holds the system owner role, ``staff-a`` the
    system staff role (customer:read, invoice:create), ``cashier-a`` the
    business-owned cashier role (pos:process). Business B: ``owner-b``.
    """

    store: FakeStore
    uow_factory: object
    catalog: StaticCatalog
    business_a: UUID
    business_b: UUID
    owner_role: Role
    staff_role: Role
    cashier_role: Role
    other_business_role: Role

    def permission(self, name: str) -> Permission:
        p = self.catalog.lookup(name)
        assert p is not None, name
        return p

    def subject(self, user_id: str, business_id: UUID | None = None, timezone: str = "UTC") -> Subject:
        return Subject(user_id=user_id, business_id=business_id or self.business_a, timezone=timezone)

    def patch(self, repository: str, method: str, fn: Callable) -> None:
        """Replace ``uow.<repository>.<method>`` in every unit of work opened afterwards."""
        self.store.patches[(repository, method)] = fn

    @property
    def owner(self) -> Subject:
        return self.subject("owner-a")

    @property
    def staff(self) -> Subject:
        return self.subject("staff-a")


def build_world() -> World:
    store = FakeStore()
    uow = FakeUnitOfWork(store)
    perms = [make_permission(str(a), "administration") for a in AdminPermission]
    perms += [make_permission(n, c) for n, c in BUSINESS_PERMISSIONS]
    for p in perms:
        uow.permissions.add(p)
    by_name = {p.name: p.id for p in perms}

    business_a, business_b = uuid4(), uuid4()
    owner = uow.roles.add_role(
        Role(id=uuid4(), business_id=None, name="owner", is_system_role=True),
        set(by_name.values()),
    )
    staff = uow.roles.add_role(
        Role(id=uuid4(), business_id=None, name="staff", is_system_role=True),
        {by_name["customer:read"], by_name["invoice:create"]},
    )
    cashier = uow.roles.add_role(
        Role(id=uuid4(), business_id=business_a, name="cashier"),
        {by_name["pos:process"]},
    )
    other = uow.roles.add_role(
        Role(id=uuid4(), business_id=business_b, name="cashier"),
        {by_name["pos:process"]},
    )
    store.user_roles[("owner-a", business_a)] = owner.id
    store.user_roles[("staff-a", business_a)] = staff.id
    store.user_roles[("cashier-a", business_a)] = cashier.id
    store.user_roles[("owner-b", business_b)] = owner.id

    return World(
        store=store,
        uow_factory=make_uow_factory(store),
        catalog=StaticCatalog(perms),
        business_a=business_a,
        business_b=business_b,
        owner_role=owner,
        staff_role=staff,
        cashier_role=cashier,
        other_business_role=other,
    )


def add_override(world: World, user_id: str, permission_name: str, is_allowed: bool, **kwargs) -> UserOverride:
    override = UserOverride(
        id=uuid4(),
        business_id=kwargs.pop("business_id", world.business_a),
        user_id=user_id,
        permission_id=world.permission(permission_name).id,
        is_allowed=is_allowed,
        granted_by="owner-a",
        granted_at=kwargs.pop("granted_at", datetime.now(UTC)),
        **kwargs,
    )
    world.store.overrides.append(override)
    return override


def identity(world: World, user_id: str = "owner-a", business_id: UUID | None = None) -> dict[str, str]:
    """Trusted identity headers for ``user_id``."""
    return {
        "X-User-Id": user_id,
        "X-Business-Id": str(business_id or world.business_a),
    }


# --- Fixtures ---


@pytest.fixture
def world() -> World:
    """Fresh seeded in-memory world for each test."""
    return build_world()


@pytest.fixture
def audit_log() -> RecordingAuditLog:
    return RecordingAuditLog()


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh empty in-memory UnitOfWork."""
    return FakeUnitOfWork()
