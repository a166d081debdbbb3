"""Time-of-day value type used by the scheduler."""

import re
from dataclasses import dataclass
from datetime import time
from typing import Union

from ..errors import InvalidInputError

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

_TWELVE_HOUR = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_TWENTY_FOUR_HOUR = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


@dataclass(frozen=True, order=True)
class WallClock:
    """A wall-clock time of day, stored as minutes since midnight.

    No calendar date or timezone is attached; adding minutes past
    midnight is the caller's concern (see ``split_day``).
    """

    minutes: int

    def __post_init__(self):
        if not isinstance(self.minutes, int) or isinstance(self.minutes, bool):
            raise InvalidInputError(f"Wall clock minutes must be an integer, got {self.minutes!r}")
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise InvalidInputError(f"Wall clock minutes out of range: {self.minutes}")

    @classmethod
    def of(cls, hour: int, minute: int = 0) -> "WallClock":
        if not 0 <= hour < 24 or not 0 <= minute < MINUTES_PER_HOUR:
            raise InvalidInputError(f"Invalid time of day: {hour}:{minute:02d}")
        return cls(hour * MINUTES_PER_HOUR + minute)

    @classmethod
    def from_time(cls, value: time) -> "WallClock":
        return cls.of(value.hour, value.minute)

    @classmethod
    def parse(cls, value: Union[str, time, "WallClock"]) -> "WallClock":
        """Parse "9:00 AM", "12:30 PM", "09:00" or "21:15:00"."""
        if isinstance(value, WallClock):
            return value
        if isinstance(value, time):
            return cls.from_time(value)
        if not isinstance(value, str):
            raise InvalidInputError(f"Unrecognized time value: {value!r}")

        match = _TWELVE_HOUR.match(value)
        if match:
            hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
            if not 1 <= hour <= 12:
                raise InvalidInputError(f"Invalid 12-hour time: {value!r}")
            if period == "AM":
                hour = 0 if hour == 12 else hour
            else:
                hour = 12 if hour == 12 else hour + 12
            return cls.of(hour, minute)

        match = _TWENTY_FOUR_HOUR.match(value)
        if match:
            return cls.of(int(match.group(1)), int(match.group(2)))

        raise InvalidInputError(f"Unrecognized time format: {value!r}")

    @property
    def hour(self) -> int:
        return self.minutes // MINUTES_PER_HOUR

    @property
    def minute(self) -> int:
        return self.minutes % MINUTES_PER_HOUR

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def split_day(self, offset_minutes: int):
        """Return (clock, day_offset) for this time plus ``offset_minutes``."""
        days, minutes = divmod(self.minutes + offset_minutes, MINUTES_PER_DAY)
        return WallClock(minutes), days

    def minutes_until(self, other: "WallClock") -> int:
        return other.minutes - self.minutes

    def format_12h(self) -> str:
        hour12 = self.hour % 12 or 12
        period = "PM" if self.hour >= 12 else "AM"
        return f"{hour12}:{self.minute:02d} {period}"

    def isoformat(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return self.format_12h()
