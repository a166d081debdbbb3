"""Data model for showing tours and their computed schedules."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Sequence, Tuple, Union

from ..errors import InvalidInputError
from ..geo import GeoPoint
from .clock import WallClock

# Showing durations offered in the tour configuration form.
ALLOWED_SHOWING_DURATIONS = (15, 30, 45, 60, 90, 120)
DEFAULT_SHOWING_DURATION = 30


class SchedulingGranularity(Enum):
    """Boundary that client-facing booking times are rounded to."""
    ON_THE_HOUR = "on-the-hour"
    ON_THE_HALF_HOUR = "on-the-half-hour"

    @classmethod
    def parse(cls, value: Union[str, "SchedulingGranularity"]) -> "SchedulingGranularity":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        aliases = {
            "hour": cls.ON_THE_HOUR,
            "on-the-hour": cls.ON_THE_HOUR,
            "half-hour": cls.ON_THE_HALF_HOUR,
            "halfhour": cls.ON_THE_HALF_HOUR,
            "on-the-half-hour": cls.ON_THE_HALF_HOUR,
        }
        if normalized not in aliases:
            raise InvalidInputError(
                f"Unknown scheduling granularity: {value!r}", field="scheduling_granularity"
            )
        return aliases[normalized]


class ScheduleItemKind(Enum):
    """Kind of block in a tour schedule."""
    SHOWING = "showing"
    TRAVEL = "travel"


@dataclass
class Stop:
    """One property visited on a tour."""

    id: str
    address: str = ""
    location: Optional[GeoPoint] = None
    mls_id: str = ""
    showing_duration_minutes: Optional[int] = None  # None = use the tour default

    def __post_init__(self):
        if isinstance(self.location, (tuple, list)):
            self.location = GeoPoint(*self.location)

    def duration_for(self, config: "TourConfig") -> int:
        if self.showing_duration_minutes is None:
            return config.default_showing_duration_minutes
        return self.showing_duration_minutes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "address": self.address,
            "mls_id": self.mls_id,
            "latitude": self.location.latitude if self.location else None,
            "longitude": self.location.longitude if self.location else None,
            "showing_duration_minutes": self.showing_duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Stop":
        location = None
        if data.get("latitude") is not None and data.get("longitude") is not None:
            location = GeoPoint(data["latitude"], data["longitude"])
        return cls(
            id=str(data["id"]),
            address=data.get("address", ""),
            location=location,
            mls_id=data.get("mls_id") or "",
            showing_duration_minutes=data.get("showing_duration_minutes"),
        )


@dataclass
class TourConfig:
    """Scheduling parameters for a tour."""

    start_time: WallClock
    end_time: WallClock
    default_showing_duration_minutes: int = DEFAULT_SHOWING_DURATION
    scheduling_granularity: SchedulingGranularity = SchedulingGranularity.ON_THE_HOUR
    showing_date: Optional[date] = None
    name: str = ""
    description: str = ""

    def __post_init__(self):
        self.start_time = WallClock.parse(self.start_time)
        self.end_time = WallClock.parse(self.end_time)
        self.scheduling_granularity = SchedulingGranularity.parse(self.scheduling_granularity)
        if isinstance(self.showing_date, str):
            self.showing_date = date.fromisoformat(self.showing_date)

    @property
    def window_minutes(self) -> int:
        return self.start_time.minutes_until(self.end_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "showing_date": self.showing_date.isoformat() if self.showing_date else None,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "default_showing_duration_minutes": self.default_showing_duration_minutes,
            "scheduling_granularity": self.scheduling_granularity.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TourConfig":
        return cls(
            start_time=data["start_time"],
            end_time=data["end_time"],
            default_showing_duration_minutes=data.get(
                "default_showing_duration_minutes", DEFAULT_SHOWING_DURATION
            ),
            scheduling_granularity=data.get(
                "scheduling_granularity", SchedulingGranularity.ON_THE_HOUR.value
            ),
            showing_date=data.get("showing_date"),
            name=data.get("name", ""),
            description=data.get("description") or "",
        )


@dataclass(frozen=True)
class ScheduleItem:
    """One showing or travel block in a computed schedule."""

    kind: ScheduleItemKind
    start_offset_minutes: int
    duration_minutes: int
    time: WallClock
    day_offset: int = 0
    address: str = ""

    # Showing blocks
    stop: Optional[Stop] = None
    booking_time: Optional[WallClock] = None

    # Travel blocks
    from_stop_id: Optional[str] = None
    to_stop_id: Optional[str] = None
    distance_km: Optional[float] = None

    @property
    def end_offset_minutes(self) -> int:
        return self.start_offset_minutes + self.duration_minutes

    @property
    def is_showing(self) -> bool:
        return self.kind == ScheduleItemKind.SHOWING

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "kind": self.kind.value,
            "start_offset_minutes": self.start_offset_minutes,
            "duration_minutes": self.duration_minutes,
            "time": self.time.isoformat(),
            "display_time": self.time.format_12h(),
            "day_offset": self.day_offset,
            "address": self.address,
        }
        if self.is_showing:
            data["stop"] = self.stop.to_dict() if self.stop else None
            data["booking_time"] = self.booking_time.isoformat() if self.booking_time else None
        else:
            data["from_stop_id"] = self.from_stop_id
            data["to_stop_id"] = self.to_stop_id
            data["distance_km"] = self.distance_km
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleItem":
        booking = data.get("booking_time")
        return cls(
            kind=ScheduleItemKind(data["kind"]),
            start_offset_minutes=data["start_offset_minutes"],
            duration_minutes=data["duration_minutes"],
            time=WallClock.parse(data["time"]),
            day_offset=data.get("day_offset", 0),
            address=data.get("address", ""),
            stop=Stop.from_dict(data["stop"]) if data.get("stop") else None,
            booking_time=WallClock.parse(booking) if booking else None,
            from_stop_id=data.get("from_stop_id"),
            to_stop_id=data.get("to_stop_id"),
            distance_km=data.get("distance_km"),
        )


@dataclass(frozen=True)
class TourSchedule:
    """Computed schedule for a (stops, config) pair."""

    items: Tuple[ScheduleItem, ...]
    total_duration_minutes: int
    total_drive_time_minutes: int
    total_showing_time_minutes: int
    window_minutes: int
    can_fit_in_window: bool
    start_time: WallClock
    end_time: WallClock
    end_day_offset: int = 0
    total_distance_km: float = 0.0
    granularity: SchedulingGranularity = SchedulingGranularity.ON_THE_HOUR
    directions_url: Optional[str] = None

    @property
    def showings(self) -> List[ScheduleItem]:
        return [item for item in self.items if item.kind == ScheduleItemKind.SHOWING]

    @property
    def travel_legs(self) -> List[ScheduleItem]:
        return [item for item in self.items if item.kind == ScheduleItemKind.TRAVEL]

    @property
    def overrun_minutes(self) -> int:
        return max(0, self.total_duration_minutes - self.window_minutes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_duration_minutes": self.total_duration_minutes,
            "total_drive_time_minutes": self.total_drive_time_minutes,
            "total_showing_time_minutes": self.total_showing_time_minutes,
            "total_distance_km": round(self.total_distance_km, 2),
            "window_minutes": self.window_minutes,
            "can_fit_in_window": self.can_fit_in_window,
            "overrun_minutes": self.overrun_minutes,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "end_day_offset": self.end_day_offset,
            "granularity": self.granularity.value,
            "directions_url": self.directions_url,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TourSchedule":
        return cls(
            items=tuple(ScheduleItem.from_dict(item) for item in data.get("items", [])),
            total_duration_minutes=data["total_duration_minutes"],
            total_drive_time_minutes=data["total_drive_time_minutes"],
            total_showing_time_minutes=data["total_showing_time_minutes"],
            window_minutes=data["window_minutes"],
            can_fit_in_window=data["can_fit_in_window"],
            start_time=WallClock.parse(data["start_time"]),
            end_time=WallClock.parse(data["end_time"]),
            end_day_offset=data.get("end_day_offset", 0),
            total_distance_km=data.get("total_distance_km", 0.0),
            granularity=SchedulingGranularity.parse(
                data.get("granularity", SchedulingGranularity.ON_THE_HOUR.value)
            ),
            directions_url=data.get("directions_url"),
        )


@dataclass
class ShowingTour:
    """A named, saved tour owned by one account."""

    name: str
    stops: List[Stop]
    config: TourConfig
    id: str = ""
    owner_id: str = "default"
    description: str = ""
    schedule: Optional[TourSchedule] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "stops": [stop.to_dict() for stop in self.stops],
            "config": self.config.to_dict(),
            "schedule": self.schedule.to_dict() if self.schedule else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShowingTour":
        return cls(
            id=data["id"],
            owner_id=data.get("owner_id", "default"),
            name=data["name"],
            description=data.get("description") or "",
            stops=[Stop.from_dict(s) for s in data.get("stops", [])],
            config=TourConfig.from_dict(data["config"]),
            schedule=TourSchedule.from_dict(data["schedule"]) if data.get("schedule") else None,
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


def directions_url(stops: Sequence[Stop]) -> Optional[str]:
    """Google Maps directions link through the stops in order."""
    points = [stop.location for stop in stops if stop.location is not None]
    if not points:
        return None
    return "https://www.google.com/maps/dir/" + "/".join(p.as_param() for p in points)
