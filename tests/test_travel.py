"""Tests for travel-time providers.

The Google adapter is exercised against a mocked requests session so no
network access or API key is needed.
"""

from unittest.mock import MagicMock

import pytest
import requests

from tour_engine.errors import TravelTimeUnavailableError
from tour_engine.geo import GeoPoint, haversine_km
from tour_engine.travel import (
    CachingTravelTimeProvider,
    CallableTravelTimeProvider,
    GoogleMapsTravelTimeProvider,
    StraightLineTravelTimeProvider,
    TravelMode,
    TravelTime,
    build_travel_time_provider,
    coerce_travel_time,
)

ORIGIN = GeoPoint(40.10, -83.00)
DESTINATION = GeoPoint(40.12, -83.02)


def _matrix_response(seconds=900, meters=4200, status="OK", element_status="OK"):
    element = {"status": element_status}
    if element_status == "OK":
        element["duration"] = {"value": seconds}
        element["distance"] = {"value": meters}
    return {"status": status, "rows": [{"elements": [element]}]}


def _http_response(payload=None, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def _session(*responses):
    session = MagicMock()
    session.get.side_effect = list(responses)
    return session


class TestGoogleMapsTravelTimeProvider:
    """Tests for the Distance Matrix adapter."""

    def _provider(self, session, sleeps=None):
        recorded = sleeps if sleeps is not None else []
        return GoogleMapsTravelTimeProvider(
            api_key="fake-key", session=session, sleep=recorded.append,
        )

    def test_ok_response(self):
        session = _session(_http_response(_matrix_response(seconds=930, meters=4200)))

        result = self._provider(session).get_duration(ORIGIN, DESTINATION)

        assert result == TravelTime(duration_minutes=16, distance_km=4.2)

    def test_request_parameters(self):
        session = _session(_http_response(_matrix_response()))

        self._provider(session).get_duration(ORIGIN, DESTINATION, TravelMode.WALKING)

        args, kwargs = session.get.call_args
        assert args[0] == "https://maps.googleapis.com/maps/api/distancematrix/json"
        assert kwargs["params"] == {
            "origins": "40.1,-83.0",
            "destinations": "40.12,-83.02",
            "mode": "walking",
            "key": "fake-key",
        }
        assert kwargs["timeout"] == GoogleMapsTravelTimeProvider.DEFAULT_TIMEOUT

    def test_no_route_raises(self):
        session = _session(_http_response(_matrix_response(element_status="ZERO_RESULTS")))

        with pytest.raises(TravelTimeUnavailableError, match="ZERO_RESULTS"):
            self._provider(session).get_duration(ORIGIN, DESTINATION)

    def test_request_denied_is_not_retried(self):
        session = _session(_http_response({"status": "REQUEST_DENIED"}))
        sleeps = []

        with pytest.raises(TravelTimeUnavailableError, match="REQUEST_DENIED"):
            self._provider(session, sleeps).get_duration(ORIGIN, DESTINATION)

        assert session.get.call_count == 1
        assert sleeps == []

    def test_over_query_limit_is_retried(self):
        session = _session(
            _http_response({"status": "OVER_QUERY_LIMIT"}),
            _http_response(_matrix_response(seconds=600)),
        )
        sleeps = []

        result = self._provider(session, sleeps).get_duration(ORIGIN, DESTINATION)

        assert result.duration_minutes == 10
        assert session.get.call_count == 2
        assert sleeps == [1]

    def test_server_errors_exhaust_retries(self):
        session = _session(
            _http_response(status_code=500),
            _http_response(status_code=503),
            _http_response(status_code=500),
        )
        sleeps = []

        with pytest.raises(TravelTimeUnavailableError, match="HTTP 500"):
            self._provider(session, sleeps).get_duration(ORIGIN, DESTINATION)

        assert session.get.call_count == 3
        assert sleeps == [1, 2]

    def test_timeout_is_retried(self):
        session = _session(
            requests.exceptions.Timeout("read timed out"),
            _http_response(_matrix_response(seconds=1200)),
        )

        result = self._provider(session).get_duration(ORIGIN, DESTINATION)

        assert result.duration_minutes == 20

    def test_client_error_status(self):
        session = _session(_http_response(status_code=403))

        with pytest.raises(TravelTimeUnavailableError, match="HTTP 403"):
            self._provider(session).get_duration(ORIGIN, DESTINATION)

    def test_invalid_json(self):
        response = _http_response()
        response.json.side_effect = ValueError("no json")
        session = _session(response)

        with pytest.raises(TravelTimeUnavailableError, match="invalid JSON"):
            self._provider(session).get_duration(ORIGIN, DESTINATION)

    def test_missing_element(self):
        session = _session(_http_response({"status": "OK", "rows": []}))

        with pytest.raises(TravelTimeUnavailableError):
            self._provider(session).get_duration(ORIGIN, DESTINATION)

    def test_ok_element_without_duration(self):
        session = _session(_http_response({"status": "OK", "rows": [{"elements": [{"status": "OK"}]}]}))

        with pytest.raises(TravelTimeUnavailableError, match="no duration"):
            self._provider(session).get_duration(ORIGIN, DESTINATION)

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)

        with pytest.raises(ValueError, match="API key"):
            GoogleMapsTravelTimeProvider()

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "env-key")

        assert GoogleMapsTravelTimeProvider(session=MagicMock()).api_key == "env-key"


class TestStraightLineTravelTimeProvider:
    """Tests for the opt-in great-circle estimate."""

    def test_estimate_from_distance(self):
        provider = StraightLineTravelTimeProvider(meters_per_minute=500)
        distance = haversine_km(ORIGIN, DESTINATION)

        result = provider.get_duration(ORIGIN, DESTINATION)

        assert result.distance_km == pytest.approx(distance)
        assert result.duration_minutes >= distance * 1000 / 500

    def test_same_point_takes_a_minute(self):
        result = StraightLineTravelTimeProvider().get_duration(ORIGIN, ORIGIN)

        assert result.duration_minutes == 1
        assert result.distance_km == 0.0

    def test_haversine_known_distance(self):
        # One degree of latitude is about 111 km
        assert haversine_km(GeoPoint(40.0, -83.0), GeoPoint(41.0, -83.0)) == pytest.approx(111.19, abs=0.1)


class TestCachingTravelTimeProvider:
    """Tests for the memoizing wrapper."""

    def test_repeated_lookups_hit_cache(self):
        inner = MagicMock()
        inner.get_duration.return_value = TravelTime(duration_minutes=12)
        provider = CachingTravelTimeProvider(inner)

        first = provider.get_duration(ORIGIN, DESTINATION)
        second = provider.get_duration(ORIGIN, DESTINATION)

        assert first == second
        assert inner.get_duration.call_count == 1
        assert (provider.hits, provider.misses) == (1, 1)

    def test_mode_is_part_of_key(self):
        inner = MagicMock()
        inner.get_duration.return_value = TravelTime(duration_minutes=12)
        provider = CachingTravelTimeProvider(inner)

        provider.get_duration(ORIGIN, DESTINATION, TravelMode.DRIVING)
        provider.get_duration(ORIGIN, DESTINATION, TravelMode.WALKING)

        assert inner.get_duration.call_count == 2

    def test_failures_are_not_cached(self):
        inner = MagicMock()
        inner.get_duration.side_effect = [
            TravelTimeUnavailableError("OVER_QUERY_LIMIT"),
            TravelTime(duration_minutes=8),
        ]
        provider = CachingTravelTimeProvider(inner)

        with pytest.raises(TravelTimeUnavailableError):
            provider.get_duration(ORIGIN, DESTINATION)

        assert provider.get_duration(ORIGIN, DESTINATION).duration_minutes == 8

    def test_clear(self):
        inner = MagicMock()
        inner.get_duration.return_value = TravelTime(duration_minutes=12)
        provider = CachingTravelTimeProvider(inner)
        provider.get_duration(ORIGIN, DESTINATION)

        provider.clear()
        provider.get_duration(ORIGIN, DESTINATION)

        assert inner.get_duration.call_count == 2
        assert provider.hits == 0


class TestProviderHelpers:
    """Tests for coercion, callables and the provider factory."""

    def test_coerce_mapping(self):
        assert coerce_travel_time({"duration_minutes": 14.6, "distance_km": 3}) == TravelTime(15, 3.0)
        assert coerce_travel_time({"durationMinutes": 9}) == TravelTime(9, 0.0)

    def test_coerce_rejects_unknown(self):
        with pytest.raises(TravelTimeUnavailableError):
            coerce_travel_time({"distance_km": 3})
        with pytest.raises(TravelTimeUnavailableError):
            coerce_travel_time(None)

    def test_callable_provider_passes_mode(self):
        seen = []

        def travel_time(origin, destination, mode):
            seen.append(mode)
            return TravelTime(duration_minutes=5)

        result = CallableTravelTimeProvider(travel_time).get_duration(ORIGIN, DESTINATION, TravelMode.TRANSIT)

        assert result.duration_minutes == 5
        assert seen == [TravelMode.TRANSIT]

    def test_build_straight_line(self):
        provider = build_travel_time_provider("straight-line")

        assert isinstance(provider, CachingTravelTimeProvider)
        assert isinstance(provider.provider, StraightLineTravelTimeProvider)

    def test_build_without_cache(self):
        provider = build_travel_time_provider("straight_line", cache=False)

        assert isinstance(provider, StraightLineTravelTimeProvider)

    def test_build_google_with_key(self):
        provider = build_travel_time_provider("google", api_key="fake-key", cache=False)

        assert isinstance(provider, GoogleMapsTravelTimeProvider)
        assert provider.api_key == "fake-key"

    def test_build_unknown(self):
        with pytest.raises(ValueError, match="Unknown travel time provider"):
            build_travel_time_provider("teleport")


class TestCacheExpiry:
    """TTL and size bounds of the caching provider."""

    def _inner(self):
        inner = MagicMock()
        inner.get_duration.return_value = TravelTime(duration_minutes=12)
        return inner

    def test_entries_expire(self):
        now = [1000.0]
        inner = self._inner()
        provider = CachingTravelTimeProvider(inner, ttl_seconds=60, clock=lambda: now[0])

        provider.get_duration(ORIGIN, DESTINATION)
        now[0] += 59
        provider.get_duration(ORIGIN, DESTINATION)
        assert inner.get_duration.call_count == 1

        now[0] += 2
        provider.get_duration(ORIGIN, DESTINATION)
        assert inner.get_duration.call_count == 2

    def test_least_recently_used_is_evicted(self):
        inner = self._inner()
        provider = CachingTravelTimeProvider(inner, max_entries=2)
        third = GeoPoint(40.15, -83.05)

        provider.get_duration(ORIGIN, DESTINATION)
        provider.get_duration(ORIGIN, third)
        provider.get_duration(ORIGIN, DESTINATION)
        provider.get_duration(DESTINATION, third)

        assert provider.size == 2
        provider.get_duration(ORIGIN, DESTINATION)
        assert inner.get_duration.call_count == 3
        provider.get_duration(ORIGIN, third)
        assert inner.get_duration.call_count == 4
