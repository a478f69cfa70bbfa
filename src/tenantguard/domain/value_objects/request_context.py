"""Request attributes that contextual rules are evaluated against."""

from dataclasses import dataclass
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True)
class RequestContext:
    """Point in time and optional client attributes of one request.

    ``at`` must be timezone-aware. ``timezone`` is the business/user IANA zone
    used for time-of-day and day-of-week rules; unknown zones fall back to UTC.
    """

    at: datetime
    timezone: str = "UTC"
    ip_address: str | None = None
    location: str | None = None

    @classmethod
    def now(cls, **kwargs: object) -> "RequestContext":
        return cls(at=datetime.now(UTC), **kwargs)

    def local_time(self) -> datetime:
        """Request time in the subject's timezone."""
        try:
            zone = ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            zone = UTC
        return self.at.astimezone(zone)

    @property
    def weekday(self) -> int:
        """Day of week, 0 = Sunday .. 6 = Saturday."""
        return self.local_time().isoweekday() % 7
