from __future__ import annotations

import hashlib
import logging
import time
from typing import Any

import httpx
from django.conf import settings
from django.core.cache import cache

from fuel_tracker.exceptions import ExternalServiceError, NoRouteFoundError
from fuel_tracker.services.types import GeoPoint, RouteData

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND = "route not found"


class OsrmClient:
    """Driving route between two points from an OSRM ``/route`` endpoint."""

    def __init__(self) -> None:
        self.base_url = settings.OSRM_BASE_URL.rstrip("/")
        self.timeout = settings.OSRM_TIMEOUT_SECONDS
        self.retry_count = settings.OSRM_RETRY_COUNT

    def route(self, start: GeoPoint, finish: GeoPoint) -> RouteData:
        key = self._cache_key(start, finish)
        cached = cache.get(key)
        if cached:
            return _route_from_cache(cached)

        path = ";".join(f"{point.longitude:.6f},{point.latitude:.6f}" for point in (start, finish))
        payload = self._request(f"{self.base_url}/route/v1/driving/{path}")
        route = self._parse_response(payload)

        cache.set(key, _route_to_cache(route), timeout=settings.ROUTE_CACHE_TTL_SECONDS)
        logger.debug("Route %s -> %s: %.0f m", start, finish, route.distance_meters)
        return route

    def _request(self, endpoint: str) -> Any:
        params = {"overview": "full", "geometries": "geojson", "steps": "false"}
        attempts = self.retry_count + 1

        for attempt in range(attempts):
            try:
                response = httpx.get(endpoint, params=params, timeout=self.timeout)
                # OSRM answers unroutable pairs with 400 and a JSON body.
                if response.status_code != 400:
                    response.raise_for_status()
                return response.json()
            except (httpx.HTTPError, ValueError) as exc:
                if attempt + 1 >= attempts:
                    logger.error("Routing request failed after %s attempts: %s", attempts, exc)
                    raise ExternalServiceError("Routing request failed") from exc
                time.sleep(0.3 * (attempt + 1))

        raise ExternalServiceError("Routing request failed")

    @staticmethod
    def _cache_key(start: GeoPoint, finish: GeoPoint) -> str:
        encoded = f"{start.latitude:.5f}:{start.longitude:.5f}>{finish.latitude:.5f}:{finish.longitude:.5f}"
        return "route:" + hashlib.sha256(encoded.encode()).hexdigest()

    @staticmethod
    def _parse_response(payload: Any) -> RouteData:
        if not isinstance(payload, dict) or payload.get("code") != "Ok":
            raise NoRouteFoundError(ROUTE_NOT_FOUND)

        routes = payload.get("routes") or []
        if not routes:
            raise NoRouteFoundError(ROUTE_NOT_FOUND)

        try:
            best = routes[0]
            geometry = best.get("geometry") or {}
            # GeoJSON positions may carry an altitude after lon/lat.
            coordinates = [
                (float(position[0]), float(position[1]))
                for position in geometry.get("coordinates", [])
            ]
            if len(coordinates) < 2 or best.get("distance") is None:
                raise NoRouteFoundError(ROUTE_NOT_FOUND)

            return RouteData(
                coordinates=coordinates,
                distance_meters=float(best["distance"]),
                duration_seconds=float(best.get("duration") or 0.0),
            )
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
            raise NoRouteFoundError(ROUTE_NOT_FOUND) from exc


def _route_to_cache(route: RouteData) -> dict[str, Any]:
    return {
        "coordinates": [list(coord) for coord in route.coordinates],
        "distance_meters": route.distance_meters,
        "duration_seconds": route.duration_seconds,
    }


def _route_from_cache(data: dict[str, Any]) -> RouteData:
    return RouteData(
        coordinates=[(lon, lat) for lon, lat in data["coordinates"]],
        distance_meters=data["distance_meters"],
        duration_seconds=data["duration_seconds"],
    )
