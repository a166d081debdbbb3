"""Showing tour scheduler.

Lays out showing and travel blocks back to back in the order the
realtor chose, starting at the configured start time, and reports
whether the tour fits the available window. The visiting order is an
input and is never recomputed.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, Union

from ..errors import InvalidInputError, TravelTimeUnavailableError
from ..travel.provider import (
    CallableTravelTimeProvider,
    TravelMode,
    TravelTime,
    TravelTimeProvider,
    coerce_travel_time,
)
from .booking import round_for_booking
from .models import (
    ALLOWED_SHOWING_DURATIONS,
    ScheduleItem,
    ScheduleItemKind,
    Stop,
    TourConfig,
    TourSchedule,
    directions_url,
)


def validate_tour(stops: Sequence[Stop], config: TourConfig):
    """Raise InvalidInputError if the tour cannot be scheduled."""
    if not stops:
        raise InvalidInputError("At least one stop is required", field="stops")

    if config.end_time <= config.start_time:
        raise InvalidInputError(
            f"End time {config.end_time} must be after start time {config.start_time}",
            field="end_time",
        )

    default = config.default_showing_duration_minutes
    if default not in ALLOWED_SHOWING_DURATIONS:
        raise InvalidInputError(
            f"Default showing duration must be one of {list(ALLOWED_SHOWING_DURATIONS)} minutes, got {default}",
            field="default_showing_duration_minutes",
        )

    seen = set()
    for index, stop in enumerate(stops):
        if stop.id in seen:
            raise InvalidInputError(f"Duplicate stop id: {stop.id}", field=f"stops[{index}].id")
        seen.add(stop.id)

        if stop.location is None or not stop.location.is_valid:
            raise InvalidInputError(
                f"Stop {stop.id} ({stop.address or 'no address'}) has no valid coordinates",
                field=f"stops[{index}].location",
            )

        duration = stop.showing_duration_minutes
        if duration is None:
            continue
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise InvalidInputError(
                f"Showing duration for stop {stop.id} must be a positive number of minutes, got {duration!r}",
                field=f"stops[{index}].showing_duration_minutes",
            )


class TourScheduler:
    """Computes tour schedules against a travel-time provider.

    Holds no state between calls, so one instance can serve concurrent
    requests. With ``max_workers > 1`` the legs are looked up in
    parallel and reassembled in stop order.
    """

    def __init__(
        self,
        provider: Union[TravelTimeProvider, Callable],
        max_workers: int = 1,
        mode: TravelMode = TravelMode.DRIVING,
    ):
        if not isinstance(provider, TravelTimeProvider):
            if not callable(provider):
                raise TypeError("provider must be a TravelTimeProvider or a callable")
            provider = CallableTravelTimeProvider(provider)
        self.provider = provider
        self.max_workers = max(1, int(max_workers))
        self.mode = mode

    def compute_schedule(self, stops: Sequence[Stop], config: TourConfig) -> TourSchedule:
        """Build the schedule for ``stops`` visited in the given order.

        Raises:
            InvalidInputError: stops or config cannot be scheduled.
            TravelTimeUnavailableError: any leg could not be resolved.
                No partial schedule is produced.
        """
        stops = list(stops)
        validate_tour(stops, config)
        legs = self._resolve_legs(stops)

        granularity = config.scheduling_granularity
        items: List[ScheduleItem] = []
        cursor = 0
        showing_minutes = 0
        distance_km = 0.0

        for index, stop in enumerate(stops):
            if index > 0:
                leg = legs[index - 1]
                clock, day = config.start_time.split_day(cursor)
                items.append(ScheduleItem(
                    kind=ScheduleItemKind.TRAVEL,
                    start_offset_minutes=cursor,
                    duration_minutes=leg.duration_minutes,
                    time=clock,
                    day_offset=day,
                    address=stop.address,
                    from_stop_id=stops[index - 1].id,
                    to_stop_id=stop.id,
                    distance_km=leg.distance_km,
                ))
                cursor += leg.duration_minutes
                distance_km += leg.distance_km

            duration = stop.duration_for(config)
            clock, day = config.start_time.split_day(cursor)
            items.append(ScheduleItem(
                kind=ScheduleItemKind.SHOWING,
                start_offset_minutes=cursor,
                duration_minutes=duration,
                time=clock,
                day_offset=day,
                address=stop.address,
                stop=stop,
                booking_time=round_for_booking(clock, granularity),
            ))
            cursor += duration
            showing_minutes += duration

        window = config.window_minutes
        end_clock, end_day = config.start_time.split_day(cursor)

        return TourSchedule(
            items=tuple(items),
            total_duration_minutes=cursor,
            total_drive_time_minutes=cursor - showing_minutes,
            total_showing_time_minutes=showing_minutes,
            window_minutes=window,
            can_fit_in_window=cursor <= window,
            start_time=config.start_time,
            end_time=end_clock,
            end_day_offset=end_day,
            total_distance_km=distance_km,
            granularity=granularity,
            directions_url=directions_url(stops),
        )

    def _resolve_legs(self, stops: List[Stop]) -> List[TravelTime]:
        pairs = list(zip(stops, stops[1:]))
        if not pairs:
            return []

        if self.max_workers == 1 or len(pairs) == 1:
            return [self._fetch_leg(i, a, b) for i, (a, b) in enumerate(pairs)]

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pairs))) as pool:
            futures = [pool.submit(self._fetch_leg, i, a, b) for i, (a, b) in enumerate(pairs)]
            legs = []
            for future in futures:
                try:
                    legs.append(future.result())
                except TravelTimeUnavailableError:
                    for pending in futures:
                        pending.cancel()
                    raise
            return legs

    def _fetch_leg(self, index: int, origin: Stop, destination: Stop) -> TravelTime:
        def unavailable(message: str) -> TravelTimeUnavailableError:
            return TravelTimeUnavailableError(
                message,
                leg_index=index,
                from_stop_id=origin.id,
                to_stop_id=destination.id,
            )

        try:
            travel = coerce_travel_time(
                self.provider.get_duration(origin.location, destination.location, self.mode)
            )
            duration = float(travel.duration_minutes)
            distance = float(travel.distance_km or 0.0)
        except Exception as e:
            raise unavailable(
                f"Travel time unavailable from {origin.address or origin.id} "
                f"to {destination.address or destination.id}: {e}"
            ) from e

        if not math.isfinite(duration) or not math.isfinite(distance):
            raise unavailable(f"Non-finite travel time from {origin.id} to {destination.id}: {duration}")
        minutes = int(round(duration))
        if minutes < 0:
            raise unavailable(f"Negative travel time from {origin.id} to {destination.id}: {minutes}")
        return TravelTime(duration_minutes=minutes, distance_km=distance)


def compute_schedule(
    stops: Sequence[Stop],
    config: TourConfig,
    provider: Union[TravelTimeProvider, Callable],
    max_workers: int = 1,
) -> TourSchedule:
    """Compute a schedule with a one-off scheduler."""
    return TourScheduler(provider, max_workers=max_workers).compute_schedule(stops, config)
