"""Scheduling module for showing tours."""

from .clock import WallClock
from .models import (
    ALLOWED_SHOWING_DURATIONS,
    SchedulingGranularity,
    ScheduleItemKind,
    Stop,
    TourConfig,
    ScheduleItem,
    TourSchedule,
    ShowingTour,
)
from .booking import round_for_booking, booking_crosses_midnight
from .tour_scheduler import TourScheduler, compute_schedule, validate_tour

__all__ = [
    "WallClock",
    "ALLOWED_SHOWING_DURATIONS",
    "SchedulingGranularity",
    "ScheduleItemKind",
    "Stop",
    "TourConfig",
    "ScheduleItem",
    "TourSchedule",
    "ShowingTour",
    "round_for_booking",
    "booking_crosses_midnight",
    "TourScheduler",
    "compute_schedule",
    "validate_tour",
]
