"""Google Maps Distance Matrix travel-time provider."""

import logging
import os
import time
from typing import Any, Dict, Optional

import requests

from ..errors import TravelTimeUnavailableError
from ..geo import GeoPoint
from .provider import TravelMode, TravelTime, TravelTimeProvider

logger = logging.getLogger(__name__)


class _RetryableLookupError(Exception):
    """Transient lookup failure worth another attempt."""


class GoogleMapsTravelTimeProvider(TravelTimeProvider):
    """Travel times from the Google Maps Distance Matrix API."""

    BASE_URL = "https://maps.googleapis.com/maps/api"

    # Per-call timeout in seconds. Distance Matrix p99 is well under this.
    DEFAULT_TIMEOUT = 10
    MAX_RETRIES = 2
    RETRY_BACKOFF = [1, 2]  # seconds

    RETRYABLE_STATUSES = {"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        sleep=time.sleep,
    ):
        self.api_key = api_key or os.getenv("GOOGLE_MAPS_API_KEY", "")
        if not self.api_key:
            raise ValueError("Google Maps API key is required")
        self.session = session or requests.Session()
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._sleep = sleep

    def get_duration(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: TravelMode = TravelMode.DRIVING,
    ) -> TravelTime:
        params = {
            "origins": origin.as_param(),
            "destinations": destination.as_param(),
            "mode": mode.value,
            "key": self.api_key,
        }

        for attempt in range(1 + self.MAX_RETRIES):
            try:
                return self._lookup(params)
            except _RetryableLookupError as e:
                if attempt >= self.MAX_RETRIES:
                    logger.error(f"Distance Matrix lookup failed after {attempt + 1} attempts: {e}")
                    raise TravelTimeUnavailableError(str(e)) from e
                wait = self.RETRY_BACKOFF[attempt]
                logger.info(
                    f"Distance Matrix transient error (attempt {attempt + 1}/{1 + self.MAX_RETRIES}), "
                    f"retrying in {wait}s: {e}"
                )
                self._sleep(wait)

        raise TravelTimeUnavailableError("Distance Matrix lookup failed")

    def _lookup(self, params: Dict[str, Any]) -> TravelTime:
        url = f"{self.BASE_URL}/distancematrix/json"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            raise _RetryableLookupError(f"Distance Matrix request error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TravelTimeUnavailableError(f"Distance Matrix request error: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise _RetryableLookupError(f"Distance Matrix HTTP {response.status_code}")
        if response.status_code != 200:
            raise TravelTimeUnavailableError(f"Distance Matrix HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise TravelTimeUnavailableError("Distance Matrix returned invalid JSON") from e

        status = data.get("status", "") if isinstance(data, dict) else ""
        if status in self.RETRYABLE_STATUSES:
            raise _RetryableLookupError(f"Distance Matrix API status {status}")
        if status != "OK":
            raise TravelTimeUnavailableError(f"Distance Matrix API failed: {status or 'no status'}")

        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise TravelTimeUnavailableError("Distance Matrix response has no route element") from e

        if not isinstance(element, dict) or element.get("status") != "OK":
            status = element.get("status") if isinstance(element, dict) else None
            raise TravelTimeUnavailableError(f"No route found: {status}")

        try:
            seconds = float(element["duration"]["value"])
            meters = float((element.get("distance") or {}).get("value", 0))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise TravelTimeUnavailableError("Distance Matrix route element has no duration") from e

        return TravelTime(
            duration_minutes=int(round(seconds / 60)),
            distance_km=meters / 1000.0,
        )
