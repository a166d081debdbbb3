"""Travel-time provider interface and generic adapters."""

import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Tuple, Union

from ..errors import TravelTimeUnavailableError
from ..geo import GeoPoint


class TravelMode(Enum):
    """Travel modes understood by the providers."""
    DRIVING = "driving"
    WALKING = "walking"
    BICYCLING = "bicycling"
    TRANSIT = "transit"


@dataclass(frozen=True)
class TravelTime:
    """Result of one leg lookup."""

    duration_minutes: int
    distance_km: float = 0.0


class TravelTimeProvider(ABC):
    """Resolves the travel time of a single leg.

    Implementations either return a valid ``TravelTime`` or raise
    ``TravelTimeUnavailableError``; they never substitute zero.
    """

    @abstractmethod
    def get_duration(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: TravelMode = TravelMode.DRIVING,
    ) -> TravelTime:
        """Return the travel time from origin to destination."""


def coerce_travel_time(result: Any) -> TravelTime:
    """Accept a TravelTime or a mapping with duration/distance keys."""
    if isinstance(result, TravelTime):
        return result
    if isinstance(result, dict):
        duration = result.get("duration_minutes", result.get("durationMinutes"))
        distance = result.get("distance_km", result.get("distanceKm", 0.0))
        if duration is None:
            raise TravelTimeUnavailableError("Travel time result has no duration")
        return TravelTime(duration_minutes=int(round(duration)), distance_km=float(distance or 0.0))
    raise TravelTimeUnavailableError(f"Unrecognized travel time result: {result!r}")


class CallableTravelTimeProvider(TravelTimeProvider):
    """Adapts a plain ``travel_time(origin, destination, mode)`` function."""

    def __init__(self, func: Callable[[GeoPoint, GeoPoint, TravelMode], Union[TravelTime, Dict[str, Any]]]):
        self.func = func

    def get_duration(self, origin, destination, mode=TravelMode.DRIVING) -> TravelTime:
        return coerce_travel_time(self.func(origin, destination, mode))


class CachingTravelTimeProvider(TravelTimeProvider):
    """Memoizes another provider's successful lookups.

    Entries expire after ``ttl_seconds`` and the least recently used
    entry is evicted once ``max_entries`` is reached. Failed lookups are
    not cached so a later call can still succeed.
    """

    DEFAULT_TTL_SECONDS = 6 * 60 * 60
    DEFAULT_MAX_ENTRIES = 10_000

    def __init__(
        self,
        provider: TravelTimeProvider,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, int(max_entries))
        self._clock = clock
        self._cache: "OrderedDict[Tuple[float, float, float, float, str], Tuple[float, TravelTime]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_duration(self, origin, destination, mode=TravelMode.DRIVING) -> TravelTime:
        key = (origin.latitude, origin.longitude, destination.latitude, destination.longitude, mode.value)
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                stored_at, cached = entry
                if self._clock() - stored_at < self.ttl_seconds:
                    self._cache.move_to_end(key)
                    self.hits += 1
                    return cached
                del self._cache[key]

        result = self.provider.get_duration(origin, destination, mode)

        with self._lock:
            self.misses += 1
            self._cache[key] = (self._clock(), result)
            self._cache.move_to_end(key)
            while len(self._cache) > self.max_entries:
                self._cache.popitem(last=False)
        return result

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear(self):
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0
