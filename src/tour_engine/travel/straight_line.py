"""Straight-line travel time estimate.

Opt-in only: configured explicitly for offline use or demos, never
substituted for a failed real lookup.
"""

import math

from ..geo import GeoPoint, haversine_km
from .provider import TravelMode, TravelTime, TravelTimeProvider

# Rough average: one minute per 100 m of straight-line distance.
METERS_PER_MINUTE = 100.0
MIN_DURATION_MINUTES = 1


class StraightLineTravelTimeProvider(TravelTimeProvider):
    """Estimates legs from great-circle distance."""

    def __init__(self, meters_per_minute: float = METERS_PER_MINUTE):
        self.meters_per_minute = meters_per_minute

    def get_duration(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: TravelMode = TravelMode.DRIVING,
    ) -> TravelTime:
        distance_km = haversine_km(origin, destination)
        minutes = math.ceil(distance_km * 1000 / self.meters_per_minute)
        return TravelTime(
            duration_minutes=max(MIN_DURATION_MINUTES, minutes),
            distance_km=distance_km,
        )
