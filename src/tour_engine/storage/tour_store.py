"""JSON-file storage for saved showing tours."""

import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Dict

from ..scheduling.models import ShowingTour

logger = logging.getLogger(__name__)


def default_data_path() -> Path:
    return Path.home() / ".tour-engine" / "tours.json"


class TourStore:
    """Persist named showing tours, one file for all owners.

    Saving an existing id replaces the stored tour (last write wins).
    """

    def __init__(self, data_path: Optional[Path] = None):
        """Initialize tour store."""
        self.data_path = Path(data_path) if data_path else default_data_path()
        self.tours: Dict[str, ShowingTour] = {}
        self._lock = threading.Lock()
        self._load_data()

    def _load_data(self):
        """Load saved tours."""
        if not self.data_path.exists():
            return
        try:
            with open(self.data_path, 'r') as f:
                data = json.load(f)

            for tour_data in data.get("tours", []):
                tour = ShowingTour.from_dict(tour_data)
                self.tours[tour.id] = tour

        except Exception as e:
            logger.error(f"Error loading tours from {self.data_path}: {e}")

    def _save_data(self, tours: Dict[str, ShowingTour]):
        """Write ``tours`` atomically; the caller swaps them in on success."""
        self.data_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "tours": [tour.to_dict() for tour in tours.values()],
            "updated_at": datetime.now().isoformat()
        }

        fd, tmp_path = tempfile.mkstemp(dir=self.data_path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.data_path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def save(self, tour: ShowingTour) -> str:
        """Create or replace a tour; returns its id.

        If the write fails the store and the tour are left unchanged.
        """
        with self._lock:
            previous = (tour.id, tour.created_at, tour.updated_at)
            now = datetime.now()
            if not tour.id:
                tour.id = f"tour_{uuid.uuid4().hex[:12]}"
                tour.created_at = now
            elif tour.id in self.tours:
                tour.created_at = self.tours[tour.id].created_at
            tour.updated_at = now

            tours = dict(self.tours)
            tours[tour.id] = tour
            try:
                self._save_data(tours)
            except Exception:
                tour.id, tour.created_at, tour.updated_at = previous
                raise
            self.tours = tours

        logger.info(f"Saved tour {tour.id} ({tour.name}) with {len(tour.stops)} stops")
        return tour.id

    def list(self, owner_id: str) -> List[ShowingTour]:
        """Tours for one owner, newest first."""
        with self._lock:
            owned = [t for t in self.tours.values() if t.owner_id == owner_id]
        return sorted(owned, key=lambda t: t.created_at, reverse=True)

    def get(self, tour_id: str) -> Optional[ShowingTour]:
        with self._lock:
            return self.tours.get(tour_id)

    def delete(self, tour_id: str) -> bool:
        """Delete a tour. Returns False if it did not exist."""
        with self._lock:
            if tour_id not in self.tours:
                return False
            tours = {key: tour for key, tour in self.tours.items() if key != tour_id}
            self._save_data(tours)
            self.tours = tours

        logger.info(f"Deleted tour {tour_id}")
        return True
