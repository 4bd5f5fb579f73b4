from __future__ import annotations

import hashlib
import logging
import time
from typing import Any

import httpx
from django.conf import settings
from django.core.cache import cache

from fuel_tracker.exceptions import AddressNotFoundError, ExternalServiceError
from fuel_tracker.services.types import GeocodeResult, GeoPoint

logger = logging.getLogger(__name__)

MIN_SUGGESTION_QUERY_LENGTH = 3


class GeocodingClient:
    def __init__(self) -> None:
        self.base_url = settings.GEOCODING_BASE_URL.rstrip("/")
        self.timeout = settings.GEOCODING_TIMEOUT_SECONDS
        self.retry_count = settings.GEOCODING_RETRY_COUNT
        self.user_agent = settings.GEOCODING_USER_AGENT
        self.country_codes = list(settings.GEOCODING_COUNTRY_CODES)
        self.language = settings.GEOCODING_LANGUAGE

    def geocode(self, query: str) -> GeocodeResult:
        cache_key = self._cache_key(query, self.country_codes)
        cached = cache.get(cache_key)
        if cached:
            return GeocodeResult(
                point=GeoPoint(latitude=cached["latitude"], longitude=cached["longitude"]),
                label=cached["label"],
                country_code=cached["country_code"],
            )

        payload = self._search(query, limit=1)
        matches = self._parse_results(payload)
        if not matches:
            raise AddressNotFoundError("address not found")

        result = matches[0]
        cache.set(
            cache_key,
            {
                "latitude": result.point.latitude,
                "longitude": result.point.longitude,
                "label": result.label,
                "country_code": result.country_code,
            },
            timeout=settings.GEOCODE_CACHE_TTL_SECONDS,
        )
        return result

    def suggest(self, query: str, limit: int = 5) -> list[GeocodeResult]:
        if len(query.strip()) < MIN_SUGGESTION_QUERY_LENGTH:
            return []
        return self._parse_results(self._search(query, limit=limit))[:limit]

    def _search(self, query: str, limit: int) -> Any:
        params: dict[str, Any] = {
            "q": query,
            "format": "jsonv2",
            "limit": limit,
            "addressdetails": 1,
        }
        if self.country_codes:
            params["countrycodes"] = ",".join(self.country_codes)
        if self.language:
            params["accept-language"] = self.language

        for attempt in range(self.retry_count + 1):
            try:
                response = httpx.get(
                    f"{self.base_url}/search",
                    params=params,
                    timeout=self.timeout,
                    headers={
                        "Accept": "application/json",
                        "User-Agent": self.user_agent,
                    },
                )
                response.raise_for_status()
                return response.json()
            except httpx.HTTPError as exc:
                if attempt >= self.retry_count:
                    logger.error("Geocoding request failed for %r: %s", query, exc)
                    raise ExternalServiceError("Geocoding request failed") from exc
                time.sleep(0.3 * (attempt + 1))

        raise ExternalServiceError("Geocoding request failed")

    @staticmethod
    def _cache_key(query: str, country_codes: list[str]) -> str:
        scope = ",".join(country_codes)
        digest = hashlib.sha256(f"{query.strip().lower()}|{scope}".encode()).hexdigest()
        return f"geocode:{digest}"

    def _parse_results(self, payload: Any) -> list[GeocodeResult]:
        if not isinstance(payload, list):
            return []

        allowed = {code.lower() for code in self.country_codes}
        results: list[GeocodeResult] = []
        for item in payload:
            try:
                latitude = float(item["lat"])
                longitude = float(item["lon"])
            except (KeyError, TypeError, ValueError):
                continue

            country_code = str((item.get("address") or {}).get("country_code", "")).lower()
            if allowed and country_code and country_code not in allowed:
                continue

            display_name = str(item.get("display_name") or "")
            label = str(item.get("name") or display_name.split(",")[0]).strip()
            results.append(
                GeocodeResult(
                    point=GeoPoint(latitude=latitude, longitude=longitude),
                    label=label or display_name,
                    country_code=country_code,
                )
            )
        return results
