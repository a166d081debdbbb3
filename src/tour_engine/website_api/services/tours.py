"""Tour service for the calculate and saved-tour routes."""

import logging
from pathlib import Path
from typing import Callable, Optional, List

from ...errors import InvalidInputError, TourNotFoundError, TravelTimeUnavailableError
from ...scheduling import ShowingTour, TourSchedule, TourScheduler
from ...storage import TourStore
from ...travel import build_travel_time_provider
from ..config import settings
from ..schemas.tour import CalculateTourRequest, SaveTourRequest

logger = logging.getLogger(__name__)


class TourService:
    """Service layer tying the scheduler to the tour store.

    The scheduler may be supplied later through ``scheduler_factory`` so
    store-only routes keep working when travel lookups are misconfigured.
    """

    def __init__(
        self,
        scheduler: Optional[TourScheduler],
        store: TourStore,
        scheduler_factory: Optional[Callable[[], TourScheduler]] = None,
    ):
        self.scheduler = scheduler
        self.store = store
        self.scheduler_factory = scheduler_factory

    def get_scheduler(self) -> TourScheduler:
        if self.scheduler is None:
            if self.scheduler_factory is None:
                raise TravelTimeUnavailableError("No travel time provider configured")
            try:
                self.scheduler = self.scheduler_factory()
            except ValueError as e:
                logger.error(f"Travel time provider is not configured: {e}")
                raise TravelTimeUnavailableError(f"Travel time provider is not configured: {e}") from e
        return self.scheduler

    def calculate(self, payload: CalculateTourRequest) -> TourSchedule:
        stops = [s.to_stop() for s in payload.stops]
        config = payload.config.to_config()
        schedule = self.get_scheduler().compute_schedule(stops, config)
        logger.info(
            f"Calculated tour: {len(stops)} stops, {schedule.total_duration_minutes} min "
            f"(window {schedule.window_minutes} min, fits={schedule.can_fit_in_window})"
        )
        return schedule

    def _build_tour(self, owner_id: str, payload: SaveTourRequest, tour_id: str = "") -> ShowingTour:
        if not payload.name.strip() or not payload.stops:
            raise InvalidInputError("Name and stops are required")

        stops = [s.to_stop() for s in payload.stops]
        config = payload.config.to_config()
        config.name = payload.name
        config.description = payload.description or ""

        schedule = None
        if payload.schedule:
            try:
                schedule = TourSchedule.from_dict(payload.schedule)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise InvalidInputError(f"Invalid schedule: {e}", field="schedule") from e
        elif payload.compute_schedule:
            schedule = self.get_scheduler().compute_schedule(stops, config)

        return ShowingTour(
            id=tour_id,
            owner_id=owner_id,
            name=payload.name,
            description=payload.description or "",
            stops=stops,
            config=config,
            schedule=schedule,
        )

    def save_tour(self, owner_id: str, payload: SaveTourRequest) -> ShowingTour:
        tour = self._build_tour(owner_id, payload)
        self.store.save(tour)
        return tour

    def update_tour(self, owner_id: str, tour_id: str, payload: SaveTourRequest) -> ShowingTour:
        self.get_tour(owner_id, tour_id)
        tour = self._build_tour(owner_id, payload, tour_id=tour_id)
        self.store.save(tour)
        return tour

    def list_tours(self, owner_id: str) -> List[ShowingTour]:
        return self.store.list(owner_id)

    def get_tour(self, owner_id: str, tour_id: str) -> ShowingTour:
        tour = self.store.get(tour_id)
        if tour is None or tour.owner_id != owner_id:
            raise TourNotFoundError(tour_id)
        return tour

    def delete_tour(self, owner_id: str, tour_id: str):
        self.get_tour(owner_id, tour_id)
        self.store.delete(tour_id)


_service: Optional[TourService] = None


def _build_scheduler() -> TourScheduler:
    provider = build_travel_time_provider(
        settings.travel_provider,
        api_key=settings.google_maps_api_key or None,
    )
    return TourScheduler(provider, max_workers=settings.travel_workers)


def get_tour_service() -> TourService:
    """Shared service built from settings on first use."""
    global _service
    if _service is None:
        _service = TourService(
            scheduler=None,
            store=TourStore(Path(settings.data_path)),
            scheduler_factory=_build_scheduler,
        )
    return _service


def reset_tour_service():
    """Drop the shared service so the next request rebuilds it from settings."""
    global _service
    _service = None
