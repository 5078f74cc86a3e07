"""POI provider access: client, cache and post-fetch filters."""

from .cache import PlacesCache, build_cache_key, build_ward_key
from .client import FieldTier, PlacesClient, PlacesConfigurationError, PlacesProviderError, map_place

__all__ = [
    "PlacesCache",
    "PlacesClient",
    "PlacesConfigurationError",
    "PlacesProviderError",
    "FieldTier",
    "build_cache_key",
    "build_ward_key",
    "map_place",
]
