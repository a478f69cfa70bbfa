"""Unit tests for business rule conditions."""

from datetime import UTC, datetime, time

import pytest

from tenantguard.domain.exceptions import ValidationError
from tenantguard.domain.value_objects import (
    ConditionType,
    DayOfWeekCondition,
    LocationCondition,
    RequestContext,
    TimeWindowCondition,
    condition_matches,
    condition_type_of,
    parse_condition,
)


def _ctx(hour: int, minute: int = 0, *, day: int = 5, tz: str = "UTC", **kwargs) -> RequestContext:
    # 2024-01-05 is a Friday
    return RequestContext(at=datetime(2024, 1, day, hour, minute, tzinfo=UTC), timezone=tz, **kwargs)


class TestParseCondition:
    def test_time_window(self) -> None:
        cond = parse_condition("time_window", {"start": "09:00", "end": "17:30"})
        assert cond == TimeWindowCondition(start=time(9, 0), end=time(17, 30))
        assert condition_type_of(cond) is ConditionType.TIME_WINDOW

    @pytest.mark.parametrize(
        "payload",
        [
            {"start": "9am", "end": "17:00"},
            {"start": "24:00", "end": "17:00"},
            {"start": "09:00"},
            {"start": "09:00", "end": "09:00"},
        ],
    )
    def test_time_window_rejects_malformed(self, payload) -> None:
        with pytest.raises(ValidationError):
            parse_condition("time_window", payload)

    def test_day_of_week(self) -> None:
        cond = parse_condition("day_of_week", {"days": [1, 2, 3, 3]})
        assert cond == DayOfWeekCondition(days=frozenset({1, 2, 3}))

    @pytest.mark.parametrize("days", [[], [7], [-1], ["mon"], [True], None])
    def test_day_of_week_rejects_malformed(self, days) -> None:
        with pytest.raises(ValidationError):
            parse_condition("day_of_week", {"days": days})

    def test_location(self) -> None:
        cond = parse_condition(
            "location", {"locations": ["main-store"], "networks": ["10.0.0.0/8"]}
        )
        assert isinstance(cond, LocationCondition)
        assert cond.locations == frozenset({"main-store"})
        assert cond.to_payload() == {"locations": ["main-store"], "networks": ["10.0.0.0/8"]}

    def test_location_requires_something(self) -> None:
        with pytest.raises(ValidationError, match="at least one"):
            parse_condition("location", {"locations": [], "networks": []})

    def test_location_rejects_bad_cidr(self) -> None:
        with pytest.raises(ValidationError, match="CIDR"):
            parse_condition("location", {"networks": ["not-a-network"]})

    def test_unknown_type(self) -> None:
        with pytest.raises(ValidationError, match="Unknown condition type"):
            parse_condition("weather", {"sunny": True})

    def test_payload_must_be_object(self) -> None:
        with pytest.raises(ValidationError):
            parse_condition("time_window", ["09:00", "17:00"])

    def test_payload_round_trip(self) -> None:
        cond = parse_condition("time_window", {"start": "22:00", "end": "06:00"})
        assert parse_condition("time_window", cond.to_payload()) == cond


class TestTimeWindow:
    def test_inside_and_bounds_inclusive(self) -> None:
        cond = TimeWindowCondition(start=time(9), end=time(17))
        assert condition_matches(cond, _ctx(9, 0))
        assert condition_matches(cond, _ctx(12, 30))
        assert condition_matches(cond, _ctx(17, 0))
        assert not condition_matches(cond, _ctx(17, 1))
        assert not condition_matches(cond, _ctx(8, 59))

    def test_wraps_midnight(self) -> None:
        cond = TimeWindowCondition(start=time(22), end=time(6))
        assert condition_matches(cond, _ctx(23, 0))
        assert condition_matches(cond, _ctx(2, 0))
        assert not condition_matches(cond, _ctx(12, 0))

    def test_evaluated_in_subject_timezone(self) -> None:
        cond = TimeWindowCondition(start=time(9), end=time(17))
        # 20:00 UTC is 12:00 in Los Angeles (PST, UTC-8)
        assert condition_matches(cond, _ctx(20, tz="America/Los_Angeles"))
        assert not condition_matches(cond, _ctx(20))

    def test_unknown_timezone_falls_back_to_utc(self) -> None:
        cond = TimeWindowCondition(start=time(9), end=time(17))
        assert condition_matches(cond, _ctx(10, tz="Mars/Olympus"))


class TestDayOfWeek:
    def test_sunday_is_zero(self) -> None:
        sunday = _ctx(12, day=7)
        assert sunday.weekday == 0
        assert condition_matches(DayOfWeekCondition(days=frozenset({0})), sunday)

    def test_friday(self) -> None:
        cond = DayOfWeekCondition(days=frozenset({1, 2, 3, 4}))
        assert not condition_matches(cond, _ctx(12))
        assert condition_matches(DayOfWeekCondition(days=frozenset({5})), _ctx(12))

    def test_day_changes_with_timezone(self) -> None:
        # Friday 02:00 UTC is still Thursday in New York
        ctx = _ctx(2, tz="America/New_York")
        assert ctx.weekday == 4


class TestLocation:
    def test_named_location(self) -> None:
        cond = LocationCondition(locations=frozenset({"main-store"}))
        assert condition_matches(cond, _ctx(12, location="main-store"))
        assert not condition_matches(cond, _ctx(12, location="warehouse"))

    def test_network(self) -> None:
        cond = parse_condition("location", {"networks": ["192.168.1.0/24"]})
        assert condition_matches(cond, _ctx(12, ip_address="192.168.1.20"))
        assert not condition_matches(cond, _ctx(12, ip_address="10.1.1.1"))

    def test_missing_attributes_do_not_match(self) -> None:
        cond = parse_condition(
            "location", {"locations": ["main-store"], "networks": ["192.168.1.0/24"]}
        )
        assert not condition_matches(cond, _ctx(12))

    def test_garbage_ip_does_not_match(self) -> None:
        cond = parse_condition("location", {"networks": ["192.168.1.0/24"]})
        assert not condition_matches(cond, _ctx(12, ip_address="unknown"))
