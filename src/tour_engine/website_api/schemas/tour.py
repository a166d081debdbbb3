"""Pydantic models for tour calculation and saved tour requests."""

from datetime import date
from typing import Optional, List, Dict, Any
from pydantic import AliasChoices, BaseModel, Field

from ...scheduling.models import Stop, TourConfig, DEFAULT_SHOWING_DURATION


class StopPayload(BaseModel):
    id: str
    address: str = ""
    mls_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    showing_duration_minutes: Optional[int] = None

    def to_stop(self) -> Stop:
        return Stop.from_dict(self.model_dump())


class TourConfigPayload(BaseModel):
    name: str = ""
    description: Optional[str] = None
    showing_date: Optional[date] = None
    start_time: str = Field(..., description='Start of the window, e.g. "9:00 AM" or "09:00"')
    end_time: str = Field(..., description='End of the window, e.g. "11:00 AM" or "11:00"')
    default_showing_duration_minutes: int = DEFAULT_SHOWING_DURATION
    scheduling_granularity: str = Field(
        "on-the-hour",
        validation_alias=AliasChoices("scheduling_granularity", "start_time_type"),
        description="on-the-hour or on-the-half-hour",
    )

    def to_config(self) -> TourConfig:
        return TourConfig(
            start_time=self.start_time,
            end_time=self.end_time,
            default_showing_duration_minutes=self.default_showing_duration_minutes,
            scheduling_granularity=self.scheduling_granularity,
            showing_date=self.showing_date,
            name=self.name,
            description=self.description or "",
        )


class CalculateTourRequest(BaseModel):
    stops: List[StopPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("stops", "properties"),
    )
    config: TourConfigPayload


class SaveTourRequest(BaseModel):
    name: str
    description: Optional[str] = None
    stops: List[StopPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("stops", "properties"),
    )
    config: TourConfigPayload
    schedule: Optional[Dict[str, Any]] = None
    compute_schedule: bool = False


class DeleteTourResponse(BaseModel):
    success: bool
    id: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: str
