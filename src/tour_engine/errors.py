"""Exceptions raised by the tour engine."""

from typing import Optional


class TourEngineError(Exception):
    """Base class for tour engine errors."""


class InvalidInputError(TourEngineError, ValueError):
    """Stops or configuration cannot be scheduled."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class TravelTimeUnavailableError(TourEngineError):
    """A travel-time lookup failed or returned no route."""

    def __init__(
        self,
        message: str,
        leg_index: Optional[int] = None,
        from_stop_id: Optional[str] = None,
        to_stop_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.leg_index = leg_index
        self.from_stop_id = from_stop_id
        self.to_stop_id = to_stop_id


class TourNotFoundError(TourEngineError, KeyError):
    """No saved tour with the given id."""

    def __init__(self, tour_id: str):
        super().__init__(tour_id)
        self.tour_id = tour_id

    def __str__(self) -> str:
        return f"Tour not found: {self.tour_id}"
