"""Client-facing booking time rounding.

Computed showing times (10:17 AM) are not practical to offer to a
client, so the time told to the client lands on an hour or half-hour
boundary. Rounding is display-only and never changes the schedule's
own offsets.
"""

from typing import Union

from .clock import WallClock, MINUTES_PER_DAY, MINUTES_PER_HOUR
from .models import SchedulingGranularity


def _rounded_minutes(clock: WallClock, granularity: SchedulingGranularity) -> int:
    hour_start = clock.hour * MINUTES_PER_HOUR
    minute = clock.minute

    if minute == 0:
        return clock.minutes

    if granularity == SchedulingGranularity.ON_THE_HOUR:
        # Always forward: a showing is never offered before it is ready.
        return hour_start + MINUTES_PER_HOUR

    if minute <= 15:
        return hour_start
    if minute <= 45:
        return hour_start + 30
    return hour_start + MINUTES_PER_HOUR


def round_for_booking(
    clock: Union[WallClock, str],
    granularity: Union[SchedulingGranularity, str],
) -> WallClock:
    """Round a showing time to the booking time offered to the client.

    on-the-hour: any minutes past the hour round up to the next hour.
    on-the-half-hour: :01-:15 round down to the hour, :16-:45 to the
    half hour, :46-:59 up to the next hour.

    Rounding past 23:59 wraps to 0:00 with no date rollover; use
    ``booking_crosses_midnight`` to detect it.
    """
    clock = WallClock.parse(clock)
    granularity = SchedulingGranularity.parse(granularity)
    return WallClock(_rounded_minutes(clock, granularity) % MINUTES_PER_DAY)


def booking_crosses_midnight(
    clock: Union[WallClock, str],
    granularity: Union[SchedulingGranularity, str],
) -> bool:
    clock = WallClock.parse(clock)
    granularity = SchedulingGranularity.parse(granularity)
    return _rounded_minutes(clock, granularity) >= MINUTES_PER_DAY
