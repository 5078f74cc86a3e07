import asyncio
import json

import httpx
import pytest

from siteintel.config import settings
from siteintel.persistence.kv_store import MemoryKeyValueStore
from siteintel.services.places.cache import PlacesCache, build_cache_key
from siteintel.services.places.client import (
    FieldTier,
    PlacesClient,
    PlacesConfigurationError,
    map_place,
    map_places,
)
from siteintel.services.places.strategies import MultiZoneQuery, SingleZoneQuery, get_strategy

SITE = (12.9121, 77.6446)


def _place(pid: str | None, name: str = "Place", lat: float = 12.9125, lng: float = 77.6450, **extra) -> dict:
    payload = {
        "displayName": {"text": name},
        "location": {"latitude": lat, "longitude": lng},
        "types": ["gym", "point_of_interest"],
    }
    if pid is not None:
        payload["id"] = pid
    payload.update(extra)
    return payload


class RecordingHandler:
    """httpx mock transport handler that records requests and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[min(len(self.requests), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def _client(handler, strategy=None, **kwargs) -> PlacesClient:
    return PlacesClient(
        "test-key",
        cache=kwargs.pop("cache", None) or PlacesCache(MemoryKeyValueStore()),
        strategy=strategy or SingleZoneQuery(),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        backoff_seconds=0,
        **kwargs,
    )


def test_map_place_applies_defaults():
    record = map_place({})

    assert record.id == "Unknown"
    assert record.display_name == "Unknown"
    assert (record.location.lat, record.location.lng) == (0.0, 0.0)
    assert record.types == ()
    assert record.rating is None
    assert record.price_level is None


def test_map_place_reads_extended_fields():
    record = map_place(
        _place(
            "g1",
            "Cult HSR",
            rating=4.6,
            userRatingCount=812,
            priceLevel="PRICE_LEVEL_EXPENSIVE",
            formattedAddress="14th Main, HSR Layout",
            businessStatus="OPERATIONAL",
        )
    )

    assert record.display_name == "Cult HSR"
    assert record.rating == 4.6
    assert record.user_rating_count == 812
    assert record.price_level == "PRICE_LEVEL_EXPENSIVE"
    assert record.has_any_type({"gym"})


def test_map_places_keeps_first_occurrence():
    records = map_places([_place("a", "First"), _place("a", "Duplicate"), _place("b", "Second")])

    assert [record.display_name for record in records] == ["First", "Second"]


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.setattr(settings, "google_places_api_key", None)

    with pytest.raises(PlacesConfigurationError):
        PlacesClient()


def test_repeated_nearby_search_hits_memory_cache():
    handler = RecordingHandler(httpx.Response(200, json={"places": [_place("g1"), _place("g2")]}))
    client = _client(handler)

    async def scenario():
        first = await client.nearby_search(*SITE, 1000, ["gym"])
        second = await client.nearby_search(*SITE, 1000, ["gym"])
        return first, second

    first, second = asyncio.run(scenario())

    assert len(handler.requests) == 1
    assert [place.id for place in first] == ["g1", "g2"]
    assert second is first


def test_concurrent_nearby_searches_issue_one_request():
    handler = RecordingHandler(httpx.Response(200, json={"places": [_place("g1")]}))
    client = _client(handler)

    async def scenario():
        return await asyncio.gather(*(client.nearby_search(*SITE, 1000, ["gym"]) for _ in range(4)))

    results = asyncio.run(scenario())

    assert len(handler.requests) == 1
    assert all(len(result) == 1 for result in results)


def test_nearby_request_body_and_headers():
    handler = RecordingHandler(httpx.Response(200, json={"places": []}))
    client = _client(handler)

    asyncio.run(
        client.nearby_search(
            *SITE, 1000, ["corporate_office", "coworking_space"], primary_only=True, field_tier=FieldTier.BASIC
        )
    )

    request = handler.requests[0]
    body = handler.body()
    assert request.url.path.endswith("/places:searchNearby")
    assert request.headers["X-Goog-Api-Key"] == "test-key"
    assert "places.rating" not in request.headers["X-Goog-FieldMask"]
    assert body["includedPrimaryTypes"] == ["corporate_office", "coworking_space"]
    assert "includedTypes" not in body
    assert body["locationRestriction"]["circle"]["radius"] == 1000.0
    assert body["maxResultCount"] == 20


def test_advanced_field_mask_includes_rating():
    assert "places.rating" in FieldTier.ADVANCED.field_mask
    assert "places.priceLevel" in FieldTier.ADVANCED.field_mask
    assert "places.id" in FieldTier.BASIC.field_mask


def test_provider_error_returns_empty_and_is_not_cached():
    handler = RecordingHandler(httpx.Response(500, text="boom"))
    client = _client(handler, max_retries=2)

    result = asyncio.run(client.nearby_search(*SITE, 1000, ["gym"]))

    assert result == []
    assert len(handler.requests) == 3
    assert client.cache.get_memory(build_cache_key(*SITE, 1000, ["gym"])) is None


def test_rate_limited_request_is_retried():
    handler = RecordingHandler(
        httpx.Response(429, text="slow down"),
        httpx.Response(200, json={"places": [_place("g1")]}),
    )
    client = _client(handler, max_retries=2)

    result = asyncio.run(client.nearby_search(*SITE, 1000, ["gym"]))

    assert [place.id for place in result] == ["g1"]
    assert len(handler.requests) == 2


def test_client_error_is_not_retried():
    handler = RecordingHandler(httpx.Response(403, text="forbidden"))
    client = _client(handler, max_retries=2)

    assert asyncio.run(client.nearby_search(*SITE, 1000, ["gym"])) == []
    assert len(handler.requests) == 1


def test_transport_errors_exhaust_retries():
    handler = RecordingHandler(httpx.ConnectError("connection refused"))
    client = _client(handler, max_retries=1)

    assert asyncio.run(client.nearby_search(*SITE, 1000, ["gym"])) == []
    assert len(handler.requests) == 2


def test_nearby_search_requires_types():
    client = _client(RecordingHandler(httpx.Response(200, json={})))

    with pytest.raises(ValueError):
        asyncio.run(client.nearby_search(*SITE, 1000, []))


def test_single_zone_drops_places_outside_radius():
    handler = RecordingHandler(
        httpx.Response(
            200,
            json={
                "places": [
                    _place("inside"),
                    _place("outside", lat=13.5, lng=77.6446),
                    {"id": "no-location", "displayName": {"text": "Somewhere"}},
                ]
            },
        )
    )
    client = _client(handler)

    result = asyncio.run(client.nearby_search(*SITE, 1000, ["gym"]))

    assert [place.id for place in result] == ["inside", "no-location"]


def test_text_search_bias_and_error_handling():
    handler = RecordingHandler(
        httpx.Response(200, json={"places": [_place("t1", "Yoga Loft")]}),
        httpx.Response(200, json={"places": []}),
        httpx.Response(503, text="unavailable"),
    )
    client = _client(handler, max_retries=0)

    async def scenario():
        biased = await client.text_search("yoga", *SITE)
        unbiased = await client.text_search("yoga", SITE[0], None)
        failed = await client.text_search("yoga")
        return biased, unbiased, failed

    biased, unbiased, failed = asyncio.run(scenario())

    assert [place.display_name for place in biased] == ["Yoga Loft"]
    assert "locationBias" in handler.body(0)
    assert "locationBias" not in handler.body(1)
    assert unbiased == []
    assert failed == []
    assert handler.requests[0].url.path.endswith("/places:searchText")


def test_multi_zone_merges_and_deduplicates():
    strategy = MultiZoneQuery(sub_radius_factor=0.7)
    calls = []

    async def fetch_zone(lat, lng, radius_m):
        calls.append((lat, lng, radius_m))
        return [
            _place("shared", lat=12.9122, lng=77.6447),
            _place(f"zone-{len(calls)}", lat=12.9123, lng=77.6448),
            _place("far", lat=12.95, lng=77.70),
        ]

    result = asyncio.run(strategy.fetch(fetch_zone, lat=SITE[0], lng=SITE[1], radius_m=1000))

    ids = [place["id"] for place in result]
    assert len(calls) == 5
    assert calls[0][2] == 1000
    assert all(radius == pytest.approx(700) for _, _, radius in calls[1:])
    assert ids.count("shared") == 1
    assert "far" not in ids
    assert len(ids) == 6


def test_multi_zone_survives_partial_failure():
    strategy = MultiZoneQuery()
    attempts = 0

    async def flaky_zone(lat, lng, radius_m):
        nonlocal attempts
        attempts += 1
        if attempts % 2:
            raise RuntimeError("zone failed")
        return [_place(f"p{attempts}")]

    result = asyncio.run(strategy.fetch(flaky_zone, lat=SITE[0], lng=SITE[1], radius_m=1000))

    assert sorted(place["id"] for place in result) == ["p2", "p4"]


def test_multi_zone_raises_when_every_zone_fails():
    async def broken_zone(lat, lng, radius_m):
        raise RuntimeError("provider down")

    with pytest.raises(RuntimeError):
        asyncio.run(MultiZoneQuery().fetch(broken_zone, lat=SITE[0], lng=SITE[1], radius_m=1000))


def test_multi_zone_without_id_falls_back_to_name():
    async def fetch_zone(lat, lng, radius_m):
        return [_place(None, "Nameless Gym")]

    result = asyncio.run(MultiZoneQuery().fetch(fetch_zone, lat=SITE[0], lng=SITE[1], radius_m=1000))

    assert len(result) == 1


def test_get_strategy_by_name():
    assert isinstance(get_strategy("single_zone"), SingleZoneQuery)
    assert isinstance(get_strategy("multi_zone"), MultiZoneQuery)
    with pytest.raises(ValueError):
        get_strategy("hexagonal")


def test_map_place_tolerates_wrong_types():
    record = map_place(
        {
            "id": 42,
            "displayName": "Plain String Gym",
            "location": [12.9, 77.6],
            "types": "gym",
            "rating": "n/a",
            "userRatingCount": {"count": 3},
            "priceLevel": ["PRICE_LEVEL_MODERATE"],
        }
    )

    assert record.id == "42"
    assert record.display_name == "Plain String Gym"
    assert (record.location.lat, record.location.lng) == (0.0, 0.0)
    assert record.types == ()
    assert record.rating is None
    assert record.user_rating_count is None
    assert record.price_level is None


def test_map_places_skips_non_object_entries():
    records = map_places(["not a place", None, _place("g1")])

    assert [record.id for record in records] == ["g1"]


@pytest.mark.parametrize(
    "payload",
    [
        ["not", "a", "dict"],
        "unexpected",
        {"places": {"id": "g1"}},
        {"places": "none"},
    ],
)
def test_unexpected_body_shape_degrades_to_empty(payload):
    handler = RecordingHandler(httpx.Response(200, json=payload))
    client = _client(handler)

    result = asyncio.run(client.nearby_search(*SITE, 1000, ["gym"]))

    assert result == []
    assert client.cache.get_memory(build_cache_key(*SITE, 1000, ["gym"])) is None


def test_non_object_places_are_dropped_from_page():
    handler = RecordingHandler(httpx.Response(200, json={"places": [42, "x", _place("g1")]}))
    client = _client(handler)

    result = asyncio.run(client.nearby_search(*SITE, 1000, ["gym"]))

    assert [place.id for place in result] == ["g1"]


def test_text_search_with_unexpected_body_returns_empty():
    handler = RecordingHandler(httpx.Response(200, json=[1, 2, 3]))
    client = _client(handler)

    assert asyncio.run(client.text_search("yoga")) == []


def test_multi_zone_tolerates_string_display_name_and_bad_location():
    async def fetch_zone(lat, lng, radius_m):
        return [
            {"displayName": "Bare Name Gym", "location": {"latitude": 12.9122, "longitude": 77.6447}},
            {"id": "bad-location", "location": "somewhere"},
        ]

    result = asyncio.run(MultiZoneQuery().fetch(fetch_zone, lat=SITE[0], lng=SITE[1], radius_m=1000))

    assert result == [{"displayName": "Bare Name Gym", "location": {"latitude": 12.9122, "longitude": 77.6447}}]


def test_uncached_search_bypasses_basic_projection():
    handler = RecordingHandler(
        httpx.Response(200, json={"places": [_place("a1")]}),
        httpx.Response(200, json={"places": [_place("a1", rating=4.4)]}),
    )
    client = _client(handler)

    async def scenario():
        basic = await client.nearby_search(*SITE, 1000, ["apartment_complex"], field_tier=FieldTier.BASIC)
        advanced = await client.nearby_search(
            *SITE, 1000, ["apartment_complex"], field_tier=FieldTier.ADVANCED, use_cache=False
        )
        return basic, advanced

    basic, advanced = asyncio.run(scenario())

    assert basic[0].rating is None
    assert advanced[0].rating == 4.4
    assert len(handler.requests) == 2
    assert "places.rating" in handler.requests[1].headers["X-Goog-FieldMask"]
    assert client.cache.get_memory(build_cache_key(*SITE, 1000, ["apartment_complex"])) is basic
