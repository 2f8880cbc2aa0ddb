"""
The API key travels in the query string, so nothing that logs request URLs
may log at INFO once the app has configured logging.
"""

import logging

import httpx
import pytest

from weatherapp.main import QUIET_LOGGERS, configure_logging
from weatherapp.schemas.weather import LocationQuery
from weatherapp.services.config import ProviderConfig
from weatherapp.services.resolver import WeatherResolver

from payloads import current_payload, not_found

SECRET = "SECRET-KEY-123"


@pytest.fixture
def app_logging():
    saved = {name: logging.getLogger(name).level for name in QUIET_LOGGERS}
    configure_logging()
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_http_client_loggers_quieted(app_logging):
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).getEffectiveLevel() >= logging.WARNING


@pytest.mark.asyncio
@pytest.mark.parametrize("responder", [
    lambda r: httpx.Response(200, json=current_payload()),
    lambda r: not_found(),
])
async def test_api_key_never_logged(app_logging, caplog, responder):
    caplog.set_level(logging.DEBUG)
    resolver = WeatherResolver(
        ProviderConfig(api_key=SECRET, base_url="https://api.test/data/2.5"),
        transport=httpx.MockTransport(responder),
    )

    await resolver.resolve_current(LocationQuery(city="Pune"))

    assert caplog.records
    for record in caplog.records:
        assert SECRET not in record.getMessage()
