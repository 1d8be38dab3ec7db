"""Settings shared by Request and Date, validated with Pydantic."""

import os
from typing import List, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

DEFAULT_REQUEST_URI = "https://www.example.com/"

ENV_PREFIX = "WEBUTILS_"


class Settings(BaseModel):
    """
    Process-level defaults.

    Passed explicitly to ``Request`` and ``Date`` instead of living in
    module globals. A ``Settings()`` with no arguments gives the defaults.
    """

    default_request_uri: str = Field(default=DEFAULT_REQUEST_URI)
    body_methods: List[str] = Field(default_factory=lambda: ["POST", "PUT"])
    max_nesting_level: int = Field(default=64, ge=1)
    timezone: str = Field(default="UTC")
    date_format: str = Field(default="Y-m-d H:i:s")
    language: str = Field(default="en")

    @field_validator("body_methods")
    @classmethod
    def validate_body_methods(cls, v: List[str]) -> List[str]:
        return [method.strip().upper() for method in v if method.strip()]

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown time zone {v!r}")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``WEBUTILS_*`` environment variables."""
        if environ is None:
            environ = os.environ

        values = {}
        for name in ("default_request_uri", "timezone", "date_format", "language", "max_nesting_level"):
            value = environ.get(ENV_PREFIX + name.upper())
            if value:
                values[name] = value

        methods = environ.get(ENV_PREFIX + "BODY_METHODS")
        if methods:
            values["body_methods"] = methods.split(",")

        return cls(**values)

