"""Business rule conditions.

A condition is a tagged variant: ``ConditionType`` is the discriminant and each
kind has its own typed payload. ``parse_condition`` validates raw payloads
(as stored in JSON or received from the API) and ``condition_matches`` evaluates
a condition against a request context. A condition whose required context
attribute is missing does not match.
"""

import ipaddress
import re
from dataclasses import dataclass
from datetime import time
from enum import StrEnum
from typing import Any, assert_never

from tenantguard.domain.exceptions import ValidationError
from tenantguard.domain.value_objects.request_context import RequestContext

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


class ConditionType(StrEnum):
    """Discriminant for condition payloads."""

    TIME_WINDOW = "time_window"
    DAY_OF_WEEK = "day_of_week"
    LOCATION = "location"


@dataclass(frozen=True)
class TimeWindowCondition:
    """Local time of day within [start, end]. start > end wraps midnight."""

    start: time
    end: time

    def to_payload(self) -> dict[str, Any]:
        return {"start": self.start.strftime("%H:%M"), "end": self.end.strftime("%H:%M")}


@dataclass(frozen=True)
class DayOfWeekCondition:
    """Local day of week in ``days`` (0 = Sunday .. 6 = Saturday)."""

    days: frozenset[int]

    def to_payload(self) -> dict[str, Any]:
        return {"days": sorted(self.days)}


@dataclass(frozen=True)
class LocationCondition:
    """Request location is one of ``locations`` or client IP is in ``networks``."""

    locations: frozenset[str]
    networks: tuple[IPNetwork, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        return {
            "locations": sorted(self.locations),
            "networks": [str(n) for n in self.networks],
        }


Condition = TimeWindowCondition | DayOfWeekCondition | LocationCondition


def condition_type_of(condition: Condition) -> ConditionType:
    """Discriminant for a parsed condition."""
    match condition:
        case TimeWindowCondition():
            return ConditionType.TIME_WINDOW
        case DayOfWeekCondition():
            return ConditionType.DAY_OF_WEEK
        case LocationCondition():
            return ConditionType.LOCATION
        case _:
            assert_never(condition)


def _parse_hhmm(value: Any, field: str) -> time:
    if not isinstance(value, str):
        raise ValidationError(f"time_window.{field} must be a string HH:MM")
    m = _HHMM.match(value.strip())
    if not m:
        raise ValidationError(f"time_window.{field} must be HH:MM (got {value!r})")
    return time(int(m.group(1)), int(m.group(2)))


def _parse_time_window(payload: dict[str, Any]) -> TimeWindowCondition:
    start = _parse_hhmm(payload.get("start"), "start")
    end = _parse_hhmm(payload.get("end"), "end")
    if start == end:
        raise ValidationError("time_window start and end must differ")
    return TimeWindowCondition(start=start, end=end)


def _parse_day_of_week(payload: dict[str, Any]) -> DayOfWeekCondition:
    days = payload.get("days")
    if not isinstance(days, list) or not days:
        raise ValidationError("day_of_week.days must be a non-empty list")
    parsed: set[int] = set()
    for d in days:
        if isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 6:
            raise ValidationError(f"day_of_week.days entries must be 0..6 (got {d!r})")
        parsed.add(d)
    return DayOfWeekCondition(days=frozenset(parsed))


def _parse_location(payload: dict[str, Any]) -> LocationCondition:
    locations = payload.get("locations") or []
    networks = payload.get("networks") or []
    if not isinstance(locations, list) or not isinstance(networks, list):
        raise ValidationError("location.locations and location.networks must be lists")
    if not locations and not networks:
        raise ValidationError("location condition needs at least one location or network")
    names: set[str] = set()
    for loc in locations:
        if not isinstance(loc, str) or not loc.strip():
            raise ValidationError(f"location.locations entries must be non-empty strings (got {loc!r})")
        names.add(loc.strip())
    nets: list[IPNetwork] = []
    for raw in networks:
        try:
            nets.append(ipaddress.ip_network(str(raw), strict=False))
        except ValueError as e:
            raise ValidationError(f"location.networks entry is not a CIDR: {raw!r}") from e
    return LocationCondition(locations=frozenset(names), networks=tuple(nets))


def parse_condition(condition_type: str, payload: dict[str, Any] | None) -> Condition:
    """Validate a raw condition payload. Raises ValidationError."""
    try:
        kind = ConditionType(condition_type)
    except ValueError as e:
        raise ValidationError(f"Unknown condition type: {condition_type!r}") from e
    if not isinstance(payload, dict):
        raise ValidationError("Condition payload must be an object")
    match kind:
        case ConditionType.TIME_WINDOW:
            return _parse_time_window(payload)
        case ConditionType.DAY_OF_WEEK:
            return _parse_day_of_week(payload)
        case ConditionType.LOCATION:
            return _parse_location(payload)
        case _:
            assert_never(kind)


def _time_window_matches(cond: TimeWindowCondition, context: RequestContext) -> bool:
    now = context.local_time().time().replace(second=0, microsecond=0)
    if cond.start <= cond.end:
        return cond.start <= now <= cond.end
    return now >= cond.start or now <= cond.end


def _location_matches(cond: LocationCondition, context: RequestContext) -> bool:
    if context.location is not None and context.location in cond.locations:
        return True
    if context.ip_address and cond.networks:
        try:
            ip = ipaddress.ip_address(context.ip_address)
        except ValueError:
            return False
        return any(ip in net for net in cond.networks)
    return False


def condition_matches(condition: Condition, context: RequestContext) -> bool:
    """Evaluate a condition against the request context."""
    match condition:
        case TimeWindowCondition():
            return _time_window_matches(condition, context)
        case DayOfWeekCondition():
            return context.weekday in condition.days
        case LocationCondition():
            return _location_matches(condition, context)
        case _:
            assert_never(condition)
