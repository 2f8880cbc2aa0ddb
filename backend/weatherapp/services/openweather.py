from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import ProviderConfig

logger = logging.getLogger(__name__)

NOT_FOUND = "not_found"
UNAUTHORIZED = "unauthorized"
RATE_LIMITED = "rate_limited"
OTHER = "other"

_STATUS_CLASSES = {
    404: NOT_FOUND,
    401: UNAUTHORIZED,
    429: RATE_LIMITED,
}


class UpstreamError(RuntimeError):
    """
    A failed OpenWeatherMap call, tagged with its status class so callers
    can tell a bad query apart from a bad key or a throttled account.
    """

    def __init__(
        self,
        status_class: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        query: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_class = status_class
        self.message = message
        self.status_code = status_code
        self.query = query

    def __repr__(self) -> str:
        return f"UpstreamError({self.status_class!r}, {self.message!r}, query={self.query!r})"


def status_class_for(status_code: int) -> str:
    return _STATUS_CLASSES.get(status_code, OTHER)


def _error_message(response: httpx.Response) -> str:
    # OWM error bodies look like {"cod": "404", "message": "city not found"}
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"

    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"


class OpenWeatherClient:
    """
    Thin wrapper around the OpenWeatherMap 2.5 endpoints and One Call 3.0.

    One AsyncClient per call, so nothing is shared between requests.
    `transport` lets tests swap in httpx.MockTransport.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self._transport = transport

    async def fetch(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        GET <base_url>/<endpoint> and return the decoded JSON body.
        """
        return await self.get_json(f"{self.config.base_url}/{endpoint.lstrip('/')}", params)

    async def fetch_onecall(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self.get_json(self.config.onecall_url, params)

    async def get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Raises UpstreamError for any HTTP error status, transport failure
        or undecodable body. The API key is added here and never logged.
        """
        query = params.get("q")

        logger.debug(f"[get_json] GET {url} params={params}")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                r = await client.get(url, params={**params, "appid": self.config.api_key})
        except httpx.RequestError as e:
            raise UpstreamError(OTHER, f"Request error: {e}", query=query) from e

        if r.status_code >= 400:
            raise UpstreamError(
                status_class_for(r.status_code),
                _error_message(r),
                status_code=r.status_code,
                query=query,
            )

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError(OTHER, "Upstream returned a non-JSON body", status_code=r.status_code, query=query) from e

        if not isinstance(data, dict):
            raise UpstreamError(OTHER, "Unexpected response shape from OpenWeatherMap", status_code=r.status_code, query=query)

        return data
