from __future__ import annotations

import os

from pydantic import BaseModel

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_ONECALL_URL = "https://api.openweathermap.org/data/3.0/onecall"


class ConfigError(RuntimeError):
    pass


class ProviderConfig(BaseModel):
    """
    Everything the resolver needs to talk to OpenWeatherMap.
    Built once per request from the environment, or by hand in tests.
    """
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    onecall_url: str = DEFAULT_ONECALL_URL

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        api_key = (os.getenv("OPENWEATHER_API_KEY") or "").strip()
        if not api_key:
            raise ConfigError("OpenWeatherMap API key not configured")

        base_url = (os.getenv("OPENWEATHER_BASE_URL") or "").strip() or DEFAULT_BASE_URL
        onecall_url = (os.getenv("OPENWEATHER_ONECALL_URL") or "").strip() or DEFAULT_ONECALL_URL
        return cls(api_key=api_key, base_url=base_url.rstrip("/"), onecall_url=onecall_url)
