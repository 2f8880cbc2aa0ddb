"""
Shared fixtures: a resolver wired to httpx.MockTransport so no test
touches the network.
"""

from typing import Callable, List

import httpx
import pytest

from weatherapp.services.config import ProviderConfig
from weatherapp.services.resolver import WeatherResolver

BASE_URL = "https://api.test/data/2.5"
ONECALL_URL = "https://api.test/data/3.0/onecall"


@pytest.fixture
def config():
    return ProviderConfig(api_key="test-key", base_url=BASE_URL, onecall_url=ONECALL_URL)


@pytest.fixture
def calls() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_resolver(config, calls) -> Callable[[Callable[[httpx.Request], httpx.Response]], WeatherResolver]:
    """
    make_resolver(responder) -> WeatherResolver whose every upstream request
    is recorded in `calls` and answered by `responder(request)`.
    """

    def factory(responder):
        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return responder(request)

        return WeatherResolver(config, transport=httpx.MockTransport(handler))

    return factory
