"""
Configuration and logging setup.

Settings are built once per process and passed explicitly to the provider
adapters; nothing reads credentials from module globals.
"""

import logging
import os
import sys
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

TravelMode = Literal["driving", "walking", "bicycling", "transit"]


class Settings(BaseModel):
    """Process-wide configuration for the provider adapters and the service"""

    google_maps_api_key: str = Field(..., min_length=1, description="Google Maps Platform API key")
    travel_mode: TravelMode = Field("driving", description="Travel mode for every metric lookup")
    max_concurrent_requests: int = Field(10, ge=1, description="Max in-flight provider calls")
    provider_timeout_seconds: float = Field(10.0, gt=0, description="Per-call provider timeout")
    request_timeout_seconds: float | None = Field(
        30.0, gt=0, description="Budget for a whole meeting point search (None disables)"
    )
    retry_attempts: int = Field(3, ge=1, description="Attempts per provider call, including the first")
    retry_base_delay: float = Field(0.5, ge=0, description="Initial backoff delay in seconds")
    retry_max_delay: float = Field(8.0, ge=0, description="Upper bound for a single backoff delay")
    geocoding_cache_size: int = Field(1000, ge=1)
    reverse_geocoding_cache_size: int = Field(500, ge=1)
    reverse_geocoding_cache_ttl: int = Field(3600, ge=1, description="Seconds")
    log_level: str = Field("INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper().strip()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables (and a .env file if present).

        Raises:
            ValueError: If GOOGLE_MAPS_API_KEY is not set
        """
        load_dotenv()

        api_key = os.getenv("GOOGLE_MAPS_API_KEY")
        if not api_key:
            raise ValueError("Google Maps API key required (set GOOGLE_MAPS_API_KEY env var)")

        request_timeout = os.getenv("REQUEST_TIMEOUT", "30")
        return cls(
            google_maps_api_key=api_key,
            travel_mode=os.getenv("TRAVEL_MODE", "driving").lower(),
            max_concurrent_requests=int(os.getenv("MAX_CONCURRENT_REQUESTS", "10")),
            provider_timeout_seconds=float(os.getenv("PROVIDER_TIMEOUT", "10")),
            request_timeout_seconds=float(request_timeout) if request_timeout else None,
            retry_attempts=int(os.getenv("RETRY_ATTEMPTS", "3")),
            retry_base_delay=float(os.getenv("RETRY_BASE_DELAY", "0.5")),
            retry_max_delay=float(os.getenv("RETRY_MAX_DELAY", "8")),
            geocoding_cache_size=int(os.getenv("GEOCODING_CACHE_SIZE", "1000")),
            reverse_geocoding_cache_size=int(os.getenv("REVERSE_GEOCODING_CACHE_SIZE", "500")),
            reverse_geocoding_cache_ttl=int(os.getenv("REVERSE_GEOCODING_CACHE_TTL", "3600")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging on stderr; stdout carries the MCP stdio protocol."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
