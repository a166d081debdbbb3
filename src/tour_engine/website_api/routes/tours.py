"""Showing tour routes: calculate, save, list, get, delete."""

import logging
from fastapi import APIRouter, Depends, HTTPException

from ...errors import InvalidInputError, TourNotFoundError, TravelTimeUnavailableError
from ..middleware.auth import get_owner_id, verify_signature
from ..schemas.tour import (
    CalculateTourRequest,
    DeleteTourResponse,
    ErrorResponse,
    SaveTourRequest,
)
from ..services.tours import TourService, get_tour_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1/tours",
    tags=["tours"],
    dependencies=[Depends(verify_signature)],
    responses={401: {"model": ErrorResponse}},
)

CALCULATION_FAILED = "Failed to calculate tour schedule. Please try again."


def _validation_error(e: InvalidInputError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"success": False, "error": "validation_error", "detail": str(e), "field": e.field},
    )


def _not_found(e: TourNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"success": False, "error": "not_found", "detail": str(e)},
    )


def _travel_error(e: TravelTimeUnavailableError) -> HTTPException:
    logger.warning(f"Travel time unavailable (leg {e.leg_index}): {e}")
    return HTTPException(
        status_code=502,
        detail={"success": False, "error": "travel_time_unavailable", "detail": CALCULATION_FAILED},
    )


@router.post(
    "/calculate",
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def calculate_tour(
    payload: CalculateTourRequest,
    service: TourService = Depends(get_tour_service),
):
    """Compute the schedule for an ordered list of stops."""
    try:
        return service.calculate(payload).to_dict()
    except InvalidInputError as e:
        raise _validation_error(e)
    except TravelTimeUnavailableError as e:
        raise _travel_error(e)


@router.get("")
def list_tours(
    owner_id: str = Depends(get_owner_id),
    service: TourService = Depends(get_tour_service),
):
    """List saved tours for the calling account, newest first."""
    return [tour.to_dict() for tour in service.list_tours(owner_id)]


@router.post(
    "",
    status_code=201,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def save_tour(
    payload: SaveTourRequest,
    owner_id: str = Depends(get_owner_id),
    service: TourService = Depends(get_tour_service),
):
    """Save a named tour with its stops, config and optional schedule."""
    try:
        return service.save_tour(owner_id, payload).to_dict()
    except InvalidInputError as e:
        raise _validation_error(e)
    except TravelTimeUnavailableError as e:
        raise _travel_error(e)


@router.get("/{tour_id}", responses={404: {"model": ErrorResponse}})
def get_tour(
    tour_id: str,
    owner_id: str = Depends(get_owner_id),
    service: TourService = Depends(get_tour_service),
):
    try:
        return service.get_tour(owner_id, tour_id).to_dict()
    except TourNotFoundError as e:
        raise _not_found(e)


@router.put(
    "/{tour_id}",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def update_tour(
    tour_id: str,
    payload: SaveTourRequest,
    owner_id: str = Depends(get_owner_id),
    service: TourService = Depends(get_tour_service),
):
    """Re-save an existing tour (last write wins)."""
    try:
        return service.update_tour(owner_id, tour_id, payload).to_dict()
    except TourNotFoundError as e:
        raise _not_found(e)
    except InvalidInputError as e:
        raise _validation_error(e)
    except TravelTimeUnavailableError as e:
        raise _travel_error(e)


@router.delete(
    "/{tour_id}",
    response_model=DeleteTourResponse,
    responses={404: {"model": ErrorResponse}},
)
def delete_tour(
    tour_id: str,
    owner_id: str = Depends(get_owner_id),
    service: TourService = Depends(get_tour_service),
):
    try:
        service.delete_tour(owner_id, tour_id)
    except TourNotFoundError as e:
        raise _not_found(e)
    return DeleteTourResponse(success=True, id=tour_id)
