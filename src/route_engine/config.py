"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_ENGINE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Optimization Engine"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level for the service.")
    timezone: str = Field(
        default="America/New_York",
        description="IANA timezone used for hour-of-day traffic buckets and calendar-day time windows.",
    )
    default_start_latitude: float = Field(default=40.7589, ge=-90.0, le=90.0)
    default_start_longitude: float = Field(default=-73.9851, ge=-180.0, le=180.0)

    cache_ttl_seconds: float = Field(default=900.0, gt=0.0, description="Freshness window for cached routes.")
    task_duration_minutes: float = Field(default=30.0, ge=0.0)
    average_speed_mph: float = Field(default=25.0, gt=0.0)
    typical_travel_time_seconds: float = Field(default=1800.0, gt=0.0)
    dense_urban_bounds: tuple[float, float, float, float] = Field(
        default=(40.7, -74.0, 40.8, -73.9),
        description="(min_lat, min_lon, max_lat, max_lon) of the area with one extra traffic severity step.",
    )

    exhaustive_max_stops: int = Field(default=5, ge=1)
    exhaustive_max_permutations: int = Field(default=120, ge=1)
    genetic_max_stops: int = Field(default=15, ge=1)
    genetic_population_size: int = Field(default=50, ge=2)
    genetic_generations: int = Field(default=100, ge=0)
    genetic_elite_count: int = Field(default=10, ge=0)
    genetic_tournament_size: int = Field(default=3, ge=1)
    genetic_mutation_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    genetic_seed: Optional[int] = Field(
        default=None,
        description="Seed for the genetic solver's random source. Unset means a fresh process-level source.",
    )

    running_late_threshold_seconds: float = Field(default=600.0, ge=0.0)
    traffic_delay_ratio_threshold: float = Field(default=0.5, ge=0.0)
    traffic_improvement_ratio: float = Field(default=0.9, gt=0.0, le=1.0)

    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when materializing driving directions.",
    )
    osrm_max_retries: int = Field(default=3, ge=0)
    osrm_backoff_seconds: float = Field(default=1.0, ge=0.0)
    directions_timeout_seconds: float = Field(default=10.0, gt=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

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

    @field_validator("dense_urban_bounds", mode="before")
    @classmethod
    def _parse_bounds_from_env(cls, value: Any) -> tuple[float, float, float, float]:
        """Parse the bounding box from a JSON array or comma-separated string."""
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except (json.JSONDecodeError, TypeError):
                parsed = [item.strip() for item in value.split(",") if item.strip()]
            value = parsed
        items = tuple(float(item) for item in value)
        if len(items) != 4:
            raise ValueError("dense_urban_bounds needs exactly four values: min_lat, min_lon, max_lat, max_lon")
        min_lat, min_lon, max_lat, max_lon = items
        if min_lat >= max_lat or min_lon >= max_lon:
            raise ValueError("dense_urban_bounds minimums must be below maximums")
        return items


settings = Settings()
