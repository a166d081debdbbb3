"""Storage layer for saved showing tours."""

from .tour_store import TourStore

__all__ = ["TourStore"]
