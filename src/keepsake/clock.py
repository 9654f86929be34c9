"""Generation timestamps for resource provenance."""

from dataclasses import dataclass
from datetime import datetime, timezone

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


@dataclass(frozen=True)
class Timestamp:
    """A wall-clock instant in human-readable and numeric form."""

    datetime: str
    unix_timestamp: int

    @classmethod
    def from_datetime(cls, moment: datetime) -> "Timestamp":
        """Build a Timestamp from an aware datetime (naive values are taken as UTC)."""
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return cls(
            datetime=moment.strftime(DATETIME_FORMAT),
            unix_timestamp=int(moment.timestamp()),
        )


class SystemClock:
    """Clock reading the current UTC time."""

    def now(self) -> Timestamp:
        return Timestamp.from_datetime(datetime.now(timezone.utc))
