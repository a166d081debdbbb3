"""Geographic points and straight-line distance."""

import math
from dataclasses import dataclass
from typing import Any, Dict

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair."""

    latitude: float
    longitude: float

    @property
    def is_valid(self) -> bool:
        try:
            lat, lng = float(self.latitude), float(self.longitude)
        except (TypeError, ValueError):
            return False
        if math.isnan(lat) or math.isnan(lng):
            return False
        return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0

    def as_param(self) -> str:
        return f"{self.latitude},{self.longitude}"

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeoPoint":
        return cls(latitude=data["latitude"], longitude=data["longitude"])


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometres."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.longitude - a.longitude)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))
