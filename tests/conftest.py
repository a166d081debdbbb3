"""Shared fixtures for the tour engine test suite."""

import tempfile
from pathlib import Path

import pytest

from tour_engine.errors import TravelTimeUnavailableError
from tour_engine.scheduling import Stop, TourConfig
from tour_engine.travel import TravelTime, TravelTimeProvider


class FixedTravelTimes(TravelTimeProvider):
    """Returns preset leg durations in call order, keyed by destination."""

    def __init__(self, minutes_by_destination, fail_for=None):
        self.minutes_by_destination = minutes_by_destination
        self.fail_for = set(fail_for or [])
        self.calls = []

    def get_duration(self, origin, destination, mode=None):
        key = (destination.latitude, destination.longitude)
        self.calls.append((origin, destination, mode))
        if key in self.fail_for:
            raise TravelTimeUnavailableError("ZERO_RESULTS")
        return TravelTime(duration_minutes=self.minutes_by_destination[key], distance_km=5.0)


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def three_stops():
    """Three stops along a short route."""
    return [
        Stop(id="p1", address="123 Main St", location=(40.10, -83.00)),
        Stop(id="p2", address="456 Oak Ave", location=(40.12, -83.02)),
        Stop(id="p3", address="789 Elm Dr", location=(40.15, -83.05)),
    ]


@pytest.fixture
def morning_config():
    """9:00-11:00 window with 30 minute showings."""
    return TourConfig(
        start_time="9:00 AM",
        end_time="11:00 AM",
        default_showing_duration_minutes=30,
        scheduling_granularity="on-the-hour",
    )


@pytest.fixture
def leg_provider():
    """15 minutes to the second stop, 20 to the third."""
    return FixedTravelTimes({
        (40.12, -83.02): 15,
        (40.15, -83.05): 20,
    })


@pytest.fixture
def failing_provider():
    """Second leg has no route."""
    return FixedTravelTimes(
        {(40.12, -83.02): 15, (40.15, -83.05): 20},
        fail_for=[(40.15, -83.05)],
    )
