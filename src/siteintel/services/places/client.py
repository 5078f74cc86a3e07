"""HTTP client for the Google Places API (New)."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Sequence

import httpx

from ...config import settings
from ...models.domain import LatLng, POIRecord
from .cache import PlacesCache, build_cache_key
from .strategies import SpatialQueryStrategy, get_strategy
from .strategies.base import RawPlace

NEARBY_SEARCH_PATH = "/places:searchNearby"
TEXT_SEARCH_PATH = "/places:searchText"

_BASIC_FIELDS = (
    "places.id",
    "places.displayName",
    "places.location",
    "places.types",
    "places.businessStatus",
)
_ADVANCED_FIELDS = _BASIC_FIELDS + (
    "places.rating",
    "places.userRatingCount",
    "places.priceLevel",
    "places.formattedAddress",
)
_RETRYABLE_STATUS = {429, 500, 502, 503, 504}

logger = logging.getLogger(__name__)


class FieldTier(str, Enum):
    """Field projection sent as ``X-Goog-FieldMask``.

    BASIC bills at the lower SKU and is enough when only counts matter;
    ADVANCED adds rating, price and address for categories shown with detail.
    """

    BASIC = "basic"
    ADVANCED = "advanced"

    @property
    def field_mask(self) -> str:
        return ",".join(_ADVANCED_FIELDS if self is FieldTier.ADVANCED else _BASIC_FIELDS)


class PlacesConfigurationError(RuntimeError):
    """Raised when the provider credential is not configured."""


class PlacesProviderError(RuntimeError):
    """Raised for non-success provider responses after retries are exhausted."""


def _as_float(value: Any, default: float | None = None) -> float | None:
    if isinstance(value, bool):
        return default
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _as_int(value: Any) -> int | None:
    number = _as_float(value)
    return int(number) if number is not None else None


def _as_str(value: Any) -> str | None:
    return str(value) if value is not None and not isinstance(value, (dict, list)) else None


def map_place(place: dict[str, Any]) -> POIRecord:
    """Convert one provider place payload into a ``POIRecord``.

    This is the only place that trusts the provider's response shape; every
    optional field gets an explicit default and values of the wrong type are
    treated as missing.
    """
    display_name = place.get("displayName")
    if isinstance(display_name, dict):
        display_name = display_name.get("text")
    name = _as_str(display_name) or "Unknown"

    location = place.get("location")
    if not isinstance(location, dict):
        location = {}
    types = place.get("types")
    if not isinstance(types, (list, tuple)):
        types = ()
    return POIRecord(
        id=_as_str(place.get("id")) or name,
        display_name=name,
        location=LatLng(
            lat=_as_float(location.get("latitude"), 0.0),
            lng=_as_float(location.get("longitude"), 0.0),
        ),
        types=tuple(str(t) for t in types),
        rating=_as_float(place.get("rating")),
        user_rating_count=_as_int(place.get("userRatingCount")),
        price_level=_as_str(place.get("priceLevel")),
        formatted_address=_as_str(place.get("formattedAddress")),
        business_status=_as_str(place.get("businessStatus")),
    )


def map_places(places: Sequence[dict[str, Any]]) -> list[POIRecord]:
    """Map a provider page, keeping the first occurrence of each id."""
    seen: set[str] = set()
    records: list[POIRecord] = []
    for place in places:
        if not isinstance(place, dict):
            logger.debug(f"Skipping non-object place payload: {place!r}")
            continue
        record = map_place(place)
        if record.id in seen:
            continue
        seen.add(record.id)
        records.append(record)
    return records


def _places_of(data: dict[str, Any]) -> list[Any]:
    places = data.get("places") or []
    if not isinstance(places, list):
        raise PlacesProviderError(f"Places API returned 'places' as {type(places).__name__}, expected a list")
    return places


class PlacesClient:
    def __init__(
        self,
        api_key: str | None = None,
        *,
        cache: PlacesCache | None = None,
        strategy: SpatialQueryStrategy | None = None,
        http_client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        max_result_count: int | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_places_api_key
        if not self.api_key:
            raise PlacesConfigurationError(
                "Google Places API key is not configured. Set SITEINTEL_GOOGLE_PLACES_API_KEY."
            )
        self.cache = cache if cache is not None else PlacesCache()
        self.strategy = strategy or get_strategy()
        self.base_url = (base_url or settings.places_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.places_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.places_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.places_backoff_seconds
        self.max_result_count = max_result_count or settings.places_max_result_count
        self._http_client = http_client

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=5.0)) as client:
            yield client

    def _headers(self, field_tier: FieldTier) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_tier.field_mask,
        }

    async def _post(self, path: str, body: dict[str, Any], field_tier: FieldTier) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        attempt = 0
        async with self._client() as client:
            while True:
                try:
                    response = await client.post(url, json=body, headers=self._headers(field_tier))
                    if response.status_code in _RETRYABLE_STATUS and attempt < self.max_retries:
                        attempt += 1
                        logger.debug(
                            f"Places API returned {response.status_code}, retrying (attempt {attempt}/{self.max_retries})"
                        )
                        await asyncio.sleep(self.backoff_seconds * attempt)
                        continue
                    if not response.is_success:
                        raise PlacesProviderError(
                            f"Places API error {response.status_code} for {path}: {response.text[:300]}"
                        )
                    data = response.json()
                    if not isinstance(data, dict):
                        raise PlacesProviderError(
                            f"Places API returned an unexpected {type(data).__name__} body for {path}"
                        )
                    return data
                except (httpx.TimeoutException, httpx.TransportError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise PlacesProviderError(
                            f"Places API request to {path} failed after {self.max_retries} retries: {exc}"
                        ) from exc
                    wait_time = self.backoff_seconds * attempt
                    logger.debug(f"Places API network error, retrying in {wait_time:.1f}s: {exc}")
                    await asyncio.sleep(wait_time)

    async def fetch_zone(
        self,
        lat: float,
        lng: float,
        radius_m: float,
        place_types: Sequence[str],
        *,
        primary_only: bool = False,
        field_tier: FieldTier = FieldTier.ADVANCED,
    ) -> list[RawPlace]:
        """Issue one searchNearby request restricted to a circle."""
        type_key = "includedPrimaryTypes" if primary_only else "includedTypes"
        body = {
            type_key: list(place_types),
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": lat, "longitude": lng},
                    "radius": float(radius_m),
                },
            },
            "maxResultCount": self.max_result_count,
            "rankPreference": "DISTANCE",
        }
        data = await self._post(NEARBY_SEARCH_PATH, body, field_tier)
        return [place for place in _places_of(data) if isinstance(place, dict)]

    async def _fetch_category(
        self,
        lat: float,
        lng: float,
        radius_m: float,
        place_types: Sequence[str],
        primary_only: bool,
        field_tier: FieldTier,
    ) -> list[POIRecord]:
        async def zone(zone_lat: float, zone_lng: float, zone_radius: float) -> list[RawPlace]:
            return await self.fetch_zone(
                zone_lat, zone_lng, zone_radius, place_types, primary_only=primary_only, field_tier=field_tier
            )

        raw = await self.strategy.fetch(zone, lat=lat, lng=lng, radius_m=radius_m)
        return map_places(raw)

    async def nearby_search(
        self,
        lat: float,
        lng: float,
        radius_m: float,
        place_types: Sequence[str],
        primary_only: bool = False,
        field_tier: FieldTier = FieldTier.ADVANCED,
        use_cache: bool = True,
    ) -> list[POIRecord]:
        """Cached, deduplicated category search.

        Provider failures degrade to an empty list, which is not cached.
        The memory key ignores field tier and primary-only matching, so
        callers that need ADVANCED fields regardless of what an earlier
        query stored pass ``use_cache=False`` for a direct fetch.
        """
        if not place_types:
            raise ValueError("At least one place type is required for nearby search.")
        cache_key = build_cache_key(lat, lng, radius_m, place_types)

        def fetch() -> Awaitable[list[POIRecord]]:
            return self._fetch_category(lat, lng, radius_m, place_types, primary_only, field_tier)

        if use_cache:
            cached = self.cache.get_memory(cache_key)
            if cached is not None:
                return cached

        try:
            result = await (self.cache.deduplicated_fetch(cache_key, fetch) if use_cache else fetch())
        except (PlacesProviderError, httpx.HTTPError, ValueError) as exc:
            logger.error(f"nearbySearch failed for [{', '.join(place_types)}]: {exc}")
            return []

        if use_cache:
            self.cache.set_memory(cache_key, result)
        logger.info(f"Places API fetch: {len(result)} results for [{', '.join(place_types)}]")
        return result

    async def text_search(
        self,
        query: str,
        lat: float | None = None,
        lng: float | None = None,
    ) -> list[POIRecord]:
        """Free-text search, optionally biased toward a location. Never cached."""
        body: dict[str, Any] = {"textQuery": query, "maxResultCount": self.max_result_count}
        if lat is not None and lng is not None:
            body["locationBias"] = {
                "circle": {
                    "center": {"latitude": lat, "longitude": lng},
                    "radius": settings.text_search_bias_radius_m,
                },
            }
        try:
            data = await self._post(TEXT_SEARCH_PATH, body, FieldTier.ADVANCED)
        except (PlacesProviderError, httpx.HTTPError, ValueError) as exc:
            logger.error(f"Text search failed for {query!r}: {exc}")
            return []
        return map_places(_places_of(data))
