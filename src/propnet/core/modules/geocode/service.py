from typing import Any

import httpx
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from propnet.core.core import Service
from propnet.core.modules.geocode.cache import GeocodeCache
from propnet.core.modules.geocode.models import GeocodeResponse, GeocodeResult, PlaceSuggestion
from propnet.errors import NotFoundError, ServiceUnavailableError, UpstreamError, ValidationError

logger = structlog.get_logger(__name__)

MAPS_BASE_URL = "https://maps.googleapis.com/maps/api"
TIMEOUT_SECONDS = 10.0


class GeocodeService(Service):
    """Proxy to the Google Maps geocoding and place autocomplete APIs."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._cache: GeocodeCache | None = None

    @property
    def cache(self) -> GeocodeCache:
        if self._cache is None:
            config = self.core.config
            self._cache = GeocodeCache(config.geocode_cache_ttl_seconds, config.geocode_cache_max_entries)
        return self._cache

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=MAPS_BASE_URL, timeout=TIMEOUT_SECONDS)

    def _api_key(self) -> str:
        api_key = self.core.config.google_maps_api_key
        if not api_key:
            raise ServiceUnavailableError("Google Maps API key is not configured")
        return api_key

    async def geocode(self, address: str) -> GeocodeResponse:
        """Resolve an address to coordinates, serving repeated lookups from the cache."""
        address = address.strip()
        if not address:
            raise ValidationError("address query parameter is required")

        cached = self.cache.get(address)
        if cached is not None:
            return GeocodeResponse(**cached.model_dump(), cached=True)

        api_key = self._api_key()
        async with self._make_client() as client:
            resp = await client.get("/geocode/json", params={"address": address, "key": api_key})
        if resp.status_code >= 400:
            raise UpstreamError(f"Geocoding failed: HTTP {resp.status_code}")

        data: dict[str, Any] = resp.json()
        results = data.get("results") or []
        if data.get("status") != "OK" or not results:
            logger.info("geocode_no_result", status=data.get("status"), error=data.get("error_message"))
            raise NotFoundError("Address not found")

        best = results[0]
        location = (best.get("geometry") or {}).get("location") or {}
        lat, lng = location.get("lat"), location.get("lng")
        if not isinstance(lat, int | float) or not isinstance(lng, int | float):
            raise UpstreamError("Invalid geocode response")

        result = GeocodeResult(latitude=lat, longitude=lng, formatted_address=best.get("formatted_address", address))
        self.cache.set(address, result)
        return GeocodeResponse(**result.model_dump(), cached=False)

    async def autocomplete(self, text: str) -> list[PlaceSuggestion]:
        """Suggest places for partially typed input."""
        text = text.strip()
        if not text:
            return []

        api_key = self._api_key()
        async with self._make_client() as client:
            resp = await client.get("/place/autocomplete/json", params={"input": text, "key": api_key})
        if resp.status_code >= 400:
            raise UpstreamError(f"Place autocomplete failed: HTTP {resp.status_code}")

        data: dict[str, Any] = resp.json()
        status = data.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            logger.warning("autocomplete_failed", status=status, error=data.get("error_message"))
            raise UpstreamError("Place autocomplete failed")

        return [
            PlaceSuggestion(place_id=p["place_id"], description=p.get("description", ""))
            for p in data.get("predictions", [])
            if "place_id" in p
        ]
