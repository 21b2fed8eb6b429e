"""Client configuration model.

This module defines the ClientConfig schema used to parse the sync client's
settings from JSON or from the environment.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

ENV_PREFIX = "PARTNER_ORDERS_"


class ClientConfig(BaseModel):
    """Settings for one partner's order sync client.

    JSON example:
        {
          "base_url": "http://localhost:8080/api",
          "partner_id": 7,
          "api_token": "...",
          "poll_interval_s": 15
        }
    """

    base_url: str = Field(..., min_length=1)
    partner_id: Union[int, str]

    api_token: str | None = None
    timeout_s: float = Field(10.0, gt=0)

    poll_interval_s: float = Field(30.0, ge=0)
    status_filter: str | None = None

    event_log_path: Path | None = None
    # Merge a redelivered new-order notification instead of duplicating it.
    dedupe_inbound: bool = True

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, cfg_obj: dict[str, Any]) -> ClientConfig:
        """Create a ClientConfig instance from a JSON-compatible object."""
        return cls.model_validate(cfg_obj)

    @classmethod
    def from_json_file(cls, path: str | Path) -> ClientConfig:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        return cls.from_json_obj(json.loads(path.read_text(encoding="utf-8")))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Create a ClientConfig from ``PARTNER_ORDERS_*`` variables.

        Example: PARTNER_ORDERS_BASE_URL, PARTNER_ORDERS_PARTNER_ID.
        """
        env = os.environ if environ is None else environ

        data: dict[str, Any] = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in env:
                data[name] = env[key]
        return cls.model_validate(data)

    @model_validator(mode="after")
    def validate_base_url(self) -> ClientConfig:
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return self
