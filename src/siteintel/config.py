"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DATA_ROOT = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SITEINTEL_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Site Intelligence API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level for the service.")

    google_places_api_key: Optional[str] = Field(
        default=None,
        description="Google Places API (New) key. Live intelligence is unavailable without it.",
    )
    places_base_url: str = Field(default="https://places.googleapis.com/v1")
    places_timeout_seconds: float = Field(default=10.0, gt=0.0)
    places_category_timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        description="Upper bound for a single category query during aggregation.",
    )
    places_max_retries: int = Field(default=2, ge=0)
    places_backoff_seconds: float = Field(default=0.5, ge=0.0)
    places_max_result_count: int = Field(default=20, ge=1, le=20)
    places_query_strategy: Literal["single_zone", "multi_zone"] = Field(
        default="single_zone",
        description="single_zone issues one query per category; multi_zone adds four quadrant sub-queries.",
    )
    multi_zone_sub_radius_factor: float = Field(default=0.7, gt=0.0, le=1.0)
    text_search_bias_radius_m: float = Field(default=2000.0, gt=0.0)

    memory_cache_ttl_seconds: float = Field(default=15 * 60, gt=0.0)
    memory_cache_max_entries: int = Field(default=50, ge=1)
    durable_cache_ttl_seconds: float = Field(default=24 * 60 * 60, gt=0.0)
    durable_cache_max_entries: int = Field(default=30, ge=1)
    durable_cache_backend: Literal["file", "memory"] = Field(default="file")
    cache_root: Path = Field(default=Path("data/cache"), description="Directory for the durable cache store.")

    reference_points_file: Path = Field(
        default=PACKAGE_DATA_ROOT / "reference_points.json",
        description="Static GeoPoint dataset used by distance-decay scoring.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("cache_root", "reference_points_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
