from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx

from ..schemas.weather import (
    CityWeatherEntry,
    ForecastReport,
    LocationQuery,
    NormalizedCurrent,
    OneCallReport,
    SearchReport,
)
from .aggregator import group_forecast_by_day
from .config import ProviderConfig
from .normalize import (
    forecast_location,
    normalize_current,
    normalize_forecast_samples,
    normalize_onecall,
    wind_speed_unit,
)
from .openweather import NOT_FOUND, OTHER, OpenWeatherClient, UpstreamError

logger = logging.getLogger(__name__)

CURRENT_ENDPOINT = "weather"
FORECAST_ENDPOINT = "forecast"

# Country suffixes tried for short, unqualified city names. OWM disambiguates
# with "city,country" and most of our unqualified lookups are Indian cities.
DOMESTIC_SUFFIXES = ("India", "IN")
MAX_UNQUALIFIED_TOKENS = 2

MAX_CITIES = 10


@dataclass
class Success:
    location_id: str
    payload: Any


@dataclass
class Failure:
    error: UpstreamError

    @property
    def status_class(self) -> str:
        return self.error.status_class

    @property
    def message(self) -> str:
        return self.error.message


ResolutionResult = Union[Success, Failure]


def build_candidates(city: str) -> List[str]:
    """
    Ordered query strings to try for a free-text city.

    "Pune"          -> ["Pune", "Pune,India", "Pune,IN"]
    "Navi Mumbai"   -> ["Navi Mumbai", "Navi Mumbai,India", "Navi Mumbai,IN"]
    "Paris,FR"      -> ["Paris,FR"]
    """
    candidates = [city]

    if "," not in city and len(city.split(" ")) <= MAX_UNQUALIFIED_TOKENS:
        candidates.extend(f"{city},{suffix}" for suffix in DOMESTIC_SUFFIXES)

    # dedupe, keep order
    return list(dict.fromkeys(candidates))


def _location_params(query: LocationQuery, units: str) -> List[Dict[str, Any]]:
    if query.has_coordinates:
        return [{"lat": query.lat, "lon": query.lon, "units": units}]
    return [{"q": c, "units": units} for c in build_candidates(query.city or "")]


def _location_id(params: Dict[str, Any]) -> str:
    if "q" in params:
        return str(params["q"])
    return f"{params['lat']},{params['lon']}"


class WeatherResolver:
    """
    Resolves a location against OpenWeatherMap and normalizes what comes back.

    Free-text queries are expanded into candidates and tried one at a time;
    only "not found" moves on to the next candidate. Anything else (bad key,
    throttling, network) is returned straight away.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.client = OpenWeatherClient(config, transport=transport)

    async def resolve(self, query: LocationQuery, endpoint: str, units: str = "metric") -> ResolutionResult:
        last_error: Optional[UpstreamError] = None

        for params in _location_params(query, units):
            candidate = _location_id(params)
            logger.info(f"[resolve] Trying {endpoint} for '{candidate}'")

            try:
                payload = await self.client.fetch(endpoint, params)
            except UpstreamError as e:
                logger.info(f"[resolve] '{candidate}' failed: {e.status_class} - {e.message}")
                if e.status_class != NOT_FOUND:
                    return Failure(e)
                last_error = e
                continue

            logger.info(f"[resolve] '{candidate}' resolved")
            return Success(location_id=candidate, payload=payload)

        if last_error is None:
            last_error = UpstreamError(NOT_FOUND, "No location to try")
        logger.warning(f"[resolve] No candidate matched; last error: {last_error.message}")
        return Failure(last_error)

    async def resolve_current(
        self,
        query: LocationQuery,
        units: str = "metric",
    ) -> Union[NormalizedCurrent, Failure]:
        result = await self.resolve(query, CURRENT_ENDPOINT, units)
        if isinstance(result, Failure):
            return result
        try:
            return self._current(result.payload, units)
        except UpstreamError as e:
            return Failure(e)

    async def resolve_forecast(
        self,
        query: LocationQuery,
        units: str = "metric",
    ) -> Union[ForecastReport, Failure]:
        result = await self.resolve(query, FORECAST_ENDPOINT, units)
        if isinstance(result, Failure):
            return result
        try:
            return self._forecast(result.payload, units)
        except UpstreamError as e:
            return Failure(e)

    async def resolve_search(
        self,
        query: LocationQuery,
        units: str = "metric",
    ) -> Union[SearchReport, Failure]:
        """
        Current weather and forecast together, per candidate.

        Both calls for a candidate run concurrently; the candidate only
        counts as resolved when both succeed.
        """
        last_error: Optional[UpstreamError] = None

        for params in _location_params(query, units):
            candidate = _location_id(params)
            logger.info(f"[resolve_search] Trying '{candidate}'")

            results = await asyncio.gather(
                self.client.fetch(CURRENT_ENDPOINT, params),
                self.client.fetch(FORECAST_ENDPOINT, params),
                return_exceptions=True,
            )

            errors: List[UpstreamError] = []
            for r in results:
                if isinstance(r, UpstreamError):
                    errors.append(r)
                elif isinstance(r, BaseException):
                    raise r

            fatal = [e for e in errors if e.status_class != NOT_FOUND]
            if fatal:
                logger.info(f"[resolve_search] '{candidate}' failed: {fatal[0].status_class} - {fatal[0].message}")
                return Failure(fatal[0])

            if errors:
                logger.info(f"[resolve_search] '{candidate}' not found")
                last_error = errors[-1]
                continue

            current_payload, forecast_payload = results
            logger.info(f"[resolve_search] '{candidate}' resolved")
            try:
                return SearchReport(
                    current=self._current(current_payload, units),
                    forecast=self._forecast(forecast_payload, units),
                )
            except UpstreamError as e:
                return Failure(e)

        if last_error is None:
            last_error = UpstreamError(NOT_FOUND, "No location to try")
        logger.warning(f"[resolve_search] No candidate matched; last error: {last_error.message}")
        return Failure(last_error)

    async def resolve_onecall(
        self,
        query: LocationQuery,
        units: str = "metric",
        exclude: Optional[str] = None,
    ) -> Union[OneCallReport, Failure]:
        """
        One Call 3.0 takes coordinates only, so there is a single attempt.
        `exclude` (e.g. "minutely,alerts") is passed through unchanged.
        """
        if not query.has_coordinates:
            raise ValueError("One Call needs coordinates, not a city name")

        params: Dict[str, Any] = {"lat": query.lat, "lon": query.lon, "units": units}
        if exclude:
            params["exclude"] = exclude

        logger.info(f"[resolve_onecall] Fetching {query.lat},{query.lon}")
        try:
            payload = await self.client.fetch_onecall(params)
        except UpstreamError as e:
            logger.info(f"[resolve_onecall] failed: {e.status_class} - {e.message}")
            return Failure(e)

        try:
            return normalize_onecall(payload, units)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            return Failure(UpstreamError(OTHER, f"Unexpected /onecall payload: missing {e}"))

    async def resolve_many(self, cities: List[str], units: str = "metric") -> List[CityWeatherEntry]:
        """
        Current weather for several cities at once. One city failing does not
        affect the others.
        """

        async def one(city: str) -> CityWeatherEntry:
            try:
                query = LocationQuery(city=city)
            except ValueError:
                return CityWeatherEntry(city=city, success=False, error="Invalid city name")

            out = await self.resolve_current(query, units)
            if isinstance(out, Failure):
                msg = "City not found" if out.status_class == NOT_FOUND else "Failed to fetch data"
                return CityWeatherEntry(city=city, success=False, error=msg)
            return CityWeatherEntry(city=city, success=True, data=out)

        return list(await asyncio.gather(*(one(c) for c in cities)))

    def _current(self, payload: Dict[str, Any], units: str) -> NormalizedCurrent:
        try:
            return normalize_current(payload, units)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise UpstreamError(OTHER, f"Unexpected /weather payload: missing {e}") from e

    def _forecast(self, payload: Dict[str, Any], units: str) -> ForecastReport:
        try:
            label, coords = forecast_location(payload)
            samples = normalize_forecast_samples(payload)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise UpstreamError(OTHER, f"Unexpected /forecast payload: missing {e}") from e

        days = group_forecast_by_day(samples)
        logger.info(f"[resolve_forecast] {len(samples)} samples -> {len(days)} days for {label}")

        return ForecastReport(
            location=label,
            coordinates=coords,
            wind_speed_unit=wind_speed_unit(units),
            days=days,
        )
