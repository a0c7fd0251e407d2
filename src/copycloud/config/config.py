"""Client configuration."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from copycloud.core.constants import (
    API_VERSION,
    CLIENT_TYPE,
    DEFAULT_BASE_URL,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
)

ENV_PREFIX = "COPYCLOUD_"


class CloudApiConfig(BaseModel):
    """Connection, credential and transfer settings for a CloudApi client."""

    base_url: str = Field(DEFAULT_BASE_URL, description="Base API URL, endpoints are appended")
    consumer_key: str = Field("", description="OAuth consumer key")
    consumer_secret: str = Field("", description="OAuth consumer secret", repr=False)
    access_token: str = Field("", description="OAuth access token", repr=False)
    token_secret: str = Field("", description="OAuth access token secret", repr=False)

    wire_generation: int = Field(
        1,
        ge=1,
        le=2,
        description="Part wire format: 1 = fixed binary structs, 2 = JSON + NUL + binary tail",
    )
    timeout: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0, description="Per request timeout (seconds)")
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, description="max_items per list_objects page")
    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, ge=1, description="Part size for file uploads (bytes)")
    api_version: str = Field(API_VERSION, description="X-Api-Version header value")
    client_type: str = Field(CLIENT_TYPE, description="X-Client-Type header value")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL: {v!r}")
        return v.rstrip("/")

    @property
    def has_credentials(self) -> bool:
        return all(
            (self.consumer_key, self.consumer_secret, self.access_token, self.token_secret)
        )

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "CloudApiConfig":
        """Load settings from ``COPYCLOUD_*`` variables; unset ones keep defaults."""
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                data[name] = raw
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str) -> "CloudApiConfig":
        """Load configuration from YAML file (optionally nested under ``copycloud:``)."""
        import yaml

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        if isinstance(data.get("copycloud"), dict):
            data = data["copycloud"]
        return cls(**data)

    @classmethod
    def from_dict(cls, data: dict) -> "CloudApiConfig":
        return cls(**data)


__all__ = ["CloudApiConfig", "ENV_PREFIX"]
