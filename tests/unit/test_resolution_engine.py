"""Unit tests for the resolution engine."""

import asyncio
from contextlib import asynccontextmanager
from datetime import UTC, datetime, time, timedelta
from uuid import uuid4

import pytest

from tenantguard.domain.entities import BusinessRule, Role
from tenantguard.domain.exceptions import StoreUnavailable, TenantMismatch, ValidationError
from tenantguard.domain.value_objects import (
    DayOfWeekCondition,
    DecisionSource,
    LocationCondition,
    RequestContext,
    RuleEffect,
    SubjectRef,
    TimeWindowCondition,
)
from tenantguard.infrastructure.permission.resolution_engine import PermissionResolver

from tests.conftest import FakeUnitOfWork, World, add_override

# Tuesday 2024-01-09 12:00 UTC
NOON_TUESDAY = datetime(2024, 1, 9, 12, 0, tzinfo=UTC)


def _ctx(at: datetime = NOON_TUESDAY, **kwargs) -> RequestContext:
    return RequestContext(at=at, **kwargs)


def _rule(world: World, subject: SubjectRef, condition, effect: RuleEffect, permission=None, **kw):
    rule = BusinessRule(
        id=uuid4(),
        business_id=kw.pop("business_id", world.business_a),
        subject=subject,
        condition=condition,
        effect=effect,
        created_at=kw.pop("created_at", NOON_TUESDAY - timedelta(days=1)),
        permission_id=world.permission(permission).id if permission else None,
    )
    world.store.rules[rule.id] = rule
    return rule


BUSINESS_HOURS = TimeWindowCondition(start=time(9), end=time(17))
NIGHT = TimeWindowCondition(start=time(22), end=time(6))


@pytest.fixture
def resolver(world: World) -> PermissionResolver:
    return PermissionResolver(world.uow_factory, world.catalog, timeout=1.0)


async def _authorize(resolver, world, user_id, permission, ctx=None, business_id=None):
    return await resolver.authorize(
        user_id, business_id or world.business_a, permission, ctx or _ctx()
    )


# --- Role layer ---


@pytest.mark.asyncio
async def test_role_grant_allows(resolver, world) -> None:
    decision = await _authorize(resolver, world, "staff-a", "customer:read")
    assert decision.allowed is True
    assert decision.source is DecisionSource.ROLE
    assert decision.evaluated_at == NOON_TUESDAY


@pytest.mark.asyncio
async def test_default_deny_without_grant(resolver, world) -> None:
    decision = await _authorize(resolver, world, "staff-a", "customer:delete")
    assert decision.allowed is False
    assert decision.source is DecisionSource.DEFAULT
    assert decision.reason == "no grant"


@pytest.mark.asyncio
async def test_user_without_role_is_denied(resolver, world) -> None:
    decision = await _authorize(resolver, world, "nobody", "customer:read")
    assert decision.allowed is False
    assert decision.source is DecisionSource.DEFAULT


@pytest.mark.asyncio
async def test_unknown_permission_is_denied(resolver, world) -> None:
    decision = await _authorize(resolver, world, "owner-a", "spaceship:launch")
    assert decision.allowed is False
    assert decision.reason == "unknown permission"


@pytest.mark.asyncio
async def test_business_role_grants(resolver, world) -> None:
    decision = await _authorize(resolver, world, "cashier-a", "pos:process")
    assert decision.allowed is True
    assert decision.source is DecisionSource.ROLE


# --- Overrides ---


@pytest.mark.asyncio
async def test_override_deny_beats_role_grant(resolver, world) -> None:
    override = add_override(world, "staff-a", "customer:read", False)
    decision = await _authorize(resolver, world, "staff-a", "customer:read")
    assert decision.allowed is False
    assert decision.source is DecisionSource.OVERRIDE
    assert decision.override_id == override.id


@pytest.mark.asyncio
async def test_override_allow_without_role_grant(resolver, world) -> None:
    add_override(world, "staff-a", "customer:delete", True)
    decision = await _authorize(resolver, world, "staff-a", "customer:delete")
    assert decision.allowed is True
    assert decision.source is DecisionSource.OVERRIDE


@pytest.mark.asyncio
async def test_expired_override_is_ignored(resolver, world) -> None:
    add_override(
        world,
        "staff-a",
        "customer:read",
        False,
        granted_at=NOON_TUESDAY - timedelta(hours=3),
        expires_at=NOON_TUESDAY - timedelta(hours=1),
    )
    decision = await _authorize(resolver, world, "staff-a", "customer:read")
    assert decision.allowed is True
    assert decision.source is DecisionSource.ROLE


@pytest.mark.asyncio
async def test_override_expiring_exactly_now_is_ignored(resolver, world) -> None:
    add_override(world, "staff-a", "customer:read", False, expires_at=NOON_TUESDAY)
    decision = await _authorize(resolver, world, "staff-a", "customer:read")
    assert decision.source is DecisionSource.ROLE


@pytest.mark.asyncio
async def test_override_reverts_to_role_after_expiry(resolver, world) -> None:
    """Role grant, then a one-hour deny override, then expiry without admin action."""
    add_override(
        world, "staff-a", "invoice:create", False,
        granted_at=NOON_TUESDAY, expires_at=NOON_TUESDAY + timedelta(hours=1),
    )
    during = await _authorize(
        resolver, world, "staff-a", "invoice:create", _ctx(NOON_TUESDAY + timedelta(minutes=30))
    )
    after = await _authorize(
        resolver, world, "staff-a", "invoice:create", _ctx(NOON_TUESDAY + timedelta(hours=2))
    )
    assert (during.allowed, during.source) == (False, DecisionSource.OVERRIDE)
    assert (after.allowed, after.source) == (True, DecisionSource.ROLE)


# --- Business rules ---


@pytest.mark.asyncio
async def test_deny_rule_beats_override_allow(resolver, world) -> None:
    add_override(world, "staff-a", "customer:read", True)
    rule = _rule(world, SubjectRef.user("staff-a"), BUSINESS_HOURS, RuleEffect.DENY, "customer:read")
    decision = await _authorize(resolver, world, "staff-a", "customer:read")
    assert decision.allowed is False
    assert decision.source is DecisionSource.RULE
    assert decision.matched_rule_id == rule.id


@pytest.mark.asyncio
async def test_deny_rule_applies_to_owner(resolver, world) -> None:
    _rule(world, SubjectRef.role(world.owner_role.id), NIGHT, RuleEffect.DENY)
    night = _ctx(datetime(2024, 1, 9, 23, 0, tzinfo=UTC))
    decision = await _authorize(resolver, world, "owner-a", "customer:read", night)
    assert decision.allowed is False
    assert decision.source is DecisionSource.RULE


@pytest.mark.asyncio
async def test_allow_rule_grants_without_role(resolver, world) -> None:
    _rule(world, SubjectRef.user("staff-a"), BUSINESS_HOURS, RuleEffect.ALLOW, "customer:delete")
    decision = await _authorize(resolver, world, "staff-a", "customer:delete")
    assert decision.allowed is True
    assert decision.source is DecisionSource.RULE


@pytest.mark.asyncio
async def test_override_deny_beats_allow_rule(resolver, world) -> None:
    add_override(world, "staff-a", "customer:delete", False)
    _rule(world, SubjectRef.user("staff-a"), BUSINESS_HOURS, RuleEffect.ALLOW, "customer:delete")
    decision = await _authorize(resolver, world, "staff-a", "customer:delete")
    assert decision.allowed is False
    assert decision.source is DecisionSource.OVERRIDE


@pytest.mark.asyncio
async def test_non_matching_rule_is_ignored(resolver, world) -> None:
    _rule(world, SubjectRef.user("staff-a"), NIGHT, RuleEffect.DENY, "customer:read")
    decision = await _authorize(resolver, world, "staff-a", "customer:read")
    assert decision.allowed is True
    assert decision.source is DecisionSource.ROLE


@pytest.mark.asyncio
async def test_rule_for_other_permission_is_ignored(resolver, world) -> None:
    _rule(world, SubjectRef.user("staff-a"), BUSINESS_HOURS, RuleEffect.DENY, "invoice:create")
    decision = await _authorize(resolver, world, "staff-a", "customer:read")
    assert decision.allowed is True


@pytest.mark.asyncio
async def test_role_rule_applies_to_members_only(resolver, world) -> None:
    _rule(world, SubjectRef.role(world.staff_role.id), BUSINESS_HOURS, RuleEffect.DENY)
    staff = await _authorize(resolver, world, "staff-a", "customer:read")
    owner = await _authorize(resolver, world, "owner-a", "customer:read")
    assert staff.allowed is False
    assert owner.allowed is True


@pytest.mark.asyncio
async def test_missing_location_makes_rule_neutral(resolver, world) -> None:
    _rule(
        world,
        SubjectRef.user("staff-a"),
        LocationCondition(locations=frozenset({"main-store"})),
        RuleEffect.ALLOW,
        "customer:delete",
    )
    without = await _authorize(resolver, world, "staff-a", "customer:delete")
    at_store = await _authorize(
        resolver, world, "staff-a", "customer:delete", _ctx(location="main-store")
    )
    assert without.allowed is False
    assert at_store.allowed is True


@pytest.mark.asyncio
async def test_weekend_rule_uses_day_of_week(resolver, world) -> None:
    _rule(world, SubjectRef.user("staff-a"), DayOfWeekCondition(days=frozenset({0, 6})), RuleEffect.DENY)
    tuesday = await _authorize(resolver, world, "staff-a", "customer:read")
    sunday = await _authorize(
        resolver, world, "staff-a", "customer:read", _ctx(datetime(2024, 1, 7, 12, tzinfo=UTC))
    )
    assert tuesday.allowed is True
    assert sunday.allowed is False


@pytest.mark.asyncio
async def test_first_deny_rule_is_deterministic(resolver, world) -> None:
    older = _rule(
        world, SubjectRef.user("staff-a"), BUSINESS_HOURS, RuleEffect.DENY,
        created_at=NOON_TUESDAY - timedelta(days=5),
    )
    _rule(world, SubjectRef.user("staff-a"), BUSINESS_HOURS, RuleEffect.DENY)
    decision = await _authorize(resolver, world, "staff-a", "customer:read")
    assert decision.matched_rule_id == older.id


# --- Tenant isolation ---


@pytest.mark.asyncio
async def test_data_of_other_business_does_not_leak(resolver, world) -> None:
    add_override(world, "owner-b", "customer:read", False)
    _rule(world, SubjectRef.user("owner-b"), BUSINESS_HOURS, RuleEffect.DENY)
    decision = await _authorize(
        resolver, world, "owner-b", "customer:read", business_id=world.business_b
    )
    assert decision.allowed is True
    assert decision.source is DecisionSource.ROLE


@pytest.mark.asyncio
async def test_user_role_in_one_business_not_valid_in_another(resolver, world) -> None:
    decision = await _authorize(
        resolver, world, "owner-a", "customer:read", business_id=world.business_b
    )
    assert decision.allowed is False


@pytest.mark.asyncio
async def test_foreign_role_raises_tenant_mismatch(resolver, world) -> None:
    world.store.user_roles[("staff-a", world.business_a)] = world.other_business_role.id
    with pytest.raises(TenantMismatch):
        await _authorize(resolver, world, "staff-a", "pos:process")


@pytest.mark.asyncio
async def test_foreign_rule_raises_tenant_mismatch(resolver, world) -> None:
    _rule(
        world, SubjectRef.user("staff-a"), BUSINESS_HOURS, RuleEffect.ALLOW,
        business_id=world.business_b,
    )

    async def leaky(self, business_id, subjects, permission_id):
        return [r for r in self._store.rules.values() if r.subject in subjects]

    world.patch("rules", "list_for_subjects", leaky)
    with pytest.raises(TenantMismatch):
        await _authorize(resolver, world, "staff-a", "customer:delete")


# --- Failures ---


@pytest.mark.asyncio
async def test_store_failure_is_an_error_not_a_decision(world) -> None:
    @asynccontextmanager
    async def broken():
        raise StoreUnavailable("Database unavailable")
        yield FakeUnitOfWork()

    resolver = PermissionResolver(broken, world.catalog)
    with pytest.raises(StoreUnavailable):
        await _authorize(resolver, world, "owner-a", "customer:read")


@pytest.mark.asyncio
async def test_unexpected_lookup_error_fails_closed(resolver, world) -> None:
    async def broken(self, business_id, subjects, permission_id):
        raise RuntimeError("driver bug")

    world.patch("rules", "list_for_subjects", broken)
    with pytest.raises(StoreUnavailable, match="lookups failed") as exc_info:
        await _authorize(resolver, world, "staff-a", "customer:read")
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_unreadable_stored_rule_fails_closed(resolver, world) -> None:
    async def corrupt(self, business_id, subjects, permission_id):
        raise ValidationError("time_window.start must be HH:MM")

    world.patch("rules", "list_for_subjects", corrupt)
    with pytest.raises(StoreUnavailable):
        await _authorize(resolver, world, "staff-a", "customer:read")


@pytest.mark.asyncio
async def test_timeout_fails_closed(world) -> None:
    @asynccontextmanager
    async def slow():
        await asyncio.sleep(1)
        yield FakeUnitOfWork(world.store)

    resolver = PermissionResolver(slow, world.catalog, timeout=0.01)
    with pytest.raises(StoreUnavailable, match="timed out"):
        await _authorize(resolver, world, "owner-a", "customer:read")


@pytest.mark.asyncio
async def test_per_call_timeout_overrides_default(world) -> None:
    @asynccontextmanager
    async def slow():
        await asyncio.sleep(0.05)
        yield FakeUnitOfWork(world.store)

    resolver = PermissionResolver(slow, world.catalog, timeout=0.001)
    decision = await resolver.authorize(
        "owner-a", world.business_a, "customer:read", _ctx(), timeout=5.0
    )
    assert decision.allowed is True


@pytest.mark.asyncio
async def test_system_role_with_no_grants(resolver, world) -> None:
    guest = Role(id=uuid4(), business_id=None, name="guest", is_system_role=True)
    world.store.roles[guest.id] = guest
    world.store.user_roles[("guest-a", world.business_a)] = guest.id
    decision = await _authorize(resolver, world, "guest-a", "customer:read")
    assert decision.allowed is False
