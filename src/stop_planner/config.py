"""Application configuration and settings management."""

from typing import Annotated, Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PLANNER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Stop Planner API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level applied by create_app().")
    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Planning constants
    service_days: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY"),
        description="Days of the week on which service is offered. Sunday is never a service day.",
    )
    proximity_radius_m: float = Field(default=3218.0, gt=0.0, description="Radius (meters) for counting nearby stops.")
    drift_savings_threshold_m: float = Field(
        default=804.672,
        ge=0.0,
        description="Minimum average-distance reduction (meters) before a day move is suggested.",
    )
    balance_tolerance: float = Field(default=0.2, ge=0.0, description="Allowed deviation from the mean day load.")
    travel_speed_mph: float = Field(default=25.0, gt=0.0, description="Average travel speed for minute estimates.")
    max_passes: int = Field(default=20, ge=0, description="Upper bound on local-search passes during reorganization.")
    max_nearby_stops: int = Field(default=5, ge=0, le=5)
    distance_unit: Literal["miles", "km"] = "miles"

    # Suggestion oracle (Anthropic Messages API)
    oracle_api_key: Optional[str] = Field(
        default=None,
        description="API key for the suggestion oracle. The oracle is disabled when unset.",
    )
    oracle_base_url: str = Field(default="https://api.anthropic.com")
    oracle_model: str = Field(default="claude-sonnet-4-20250514")
    oracle_api_version: str = Field(default="2023-06-01")
    oracle_timeout_seconds: float = Field(default=20.0, gt=0.0)
    oracle_max_tokens_placement: int = Field(default=1024, ge=1)
    oracle_max_tokens_drift: int = Field(default=2048, ge=1)
    oracle_max_tokens_reorg: int = Field(default=4096, ge=1)

    @field_validator("frontend_allowed_origins", "service_days", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        # Return empty tuple if value is None or empty
        return tuple()

    @field_validator("service_days")
    @classmethod
    def _validate_service_days(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        from .models.domain import ServiceDay

        days: list[str] = []
        for item in value:
            day = ServiceDay.parse(item)
            if day.value not in days:
                days.append(day.value)
        return tuple(days)

    @property
    def oracle_enabled(self) -> bool:
        return bool(self.oracle_api_key)


settings = Settings()
