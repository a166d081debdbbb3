"""Travel-time providers for tour scheduling."""

from typing import Optional

from .provider import (
    TravelMode,
    TravelTime,
    TravelTimeProvider,
    CallableTravelTimeProvider,
    CachingTravelTimeProvider,
    coerce_travel_time,
)
from .google_maps import GoogleMapsTravelTimeProvider
from .straight_line import StraightLineTravelTimeProvider

PROVIDERS = {
    "google": GoogleMapsTravelTimeProvider,
    "straight_line": StraightLineTravelTimeProvider,
}


def build_travel_time_provider(
    name: str = "google",
    api_key: Optional[str] = None,
    cache: bool = True,
) -> TravelTimeProvider:
    """Build a configured provider by name."""
    key = name.strip().lower().replace("-", "_")
    if key not in PROVIDERS:
        raise ValueError(f"Unknown travel time provider: {name}. Choose from: {', '.join(PROVIDERS)}")

    if key == "google":
        provider = GoogleMapsTravelTimeProvider(api_key=api_key)
    else:
        provider = StraightLineTravelTimeProvider()

    return CachingTravelTimeProvider(provider) if cache else provider


__all__ = [
    "TravelMode",
    "TravelTime",
    "TravelTimeProvider",
    "CallableTravelTimeProvider",
    "CachingTravelTimeProvider",
    "GoogleMapsTravelTimeProvider",
    "StraightLineTravelTimeProvider",
    "PROVIDERS",
    "build_travel_time_provider",
    "coerce_travel_time",
]
