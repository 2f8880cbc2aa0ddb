from datetime import datetime, timezone
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from ...schemas.weather import (
    LocationQuery,
    MultipleCitiesRequest,
    Units,
    WeatherEnvelope,
)
from ...services.config import ConfigError, ProviderConfig
from ...services.openweather import NOT_FOUND, RATE_LIMITED, UNAUTHORIZED
from ...services.resolver import MAX_CITIES, Failure, WeatherResolver

router = APIRouter()


# status_class -> (HTTP status, message shown to the user)
_FAILURE_RESPONSES = {
    NOT_FOUND: (404, "Location not found. Please check the city name and try again."),
    UNAUTHORIZED: (401, "API key is invalid or not activated yet. Please check your OpenWeatherMap API key."),
    RATE_LIMITED: (429, "API rate limit exceeded. Please try again later."),
}
_DEFAULT_FAILURE: Tuple[int, str] = (502, "Failed to fetch weather data")


def get_resolver() -> WeatherResolver:
    try:
        config = ProviderConfig.from_env()
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return WeatherResolver(config)


def _location_query(city: Optional[str], lat: Optional[float], lon: Optional[float]) -> LocationQuery:
    """
    A city takes precedence over coordinates.
    """
    try:
        if city:
            return LocationQuery(city=city)
        return LocationQuery(lat=lat, lon=lon)
    except ValidationError as e:
        msg = e.errors()[0].get("msg", "Invalid location").removeprefix("Value error, ")
        if lat is not None and lon is not None:
            msg = "Invalid coordinates. Latitude must be between -90 and 90, longitude between -180 and 180."
        raise HTTPException(status_code=400, detail=msg)


def _raise_for_failure(failure: Failure) -> None:
    status, msg = _FAILURE_RESPONSES.get(failure.status_class, _DEFAULT_FAILURE)
    raise HTTPException(status_code=status, detail=msg)


def _envelope(data) -> WeatherEnvelope:
    return WeatherEnvelope(success=True, data=data, timestamp=datetime.now(timezone.utc))


@router.get("/current", response_model=WeatherEnvelope)
async def current_weather(
    city: Optional[str] = Query(None, description="City name, e.g. 'Pune' or 'Paris,FR'"),
    lat: Optional[float] = Query(None),
    lon: Optional[float] = Query(None),
    units: Units = Query("metric"),
    resolver: WeatherResolver = Depends(get_resolver),
) -> WeatherEnvelope:
    query = _location_query(city, lat, lon)

    result = await resolver.resolve_current(query, units)
    if isinstance(result, Failure):
        _raise_for_failure(result)

    return _envelope(result)


@router.get("/forecast", response_model=WeatherEnvelope)
async def forecast(
    city: Optional[str] = Query(None),
    lat: Optional[float] = Query(None),
    lon: Optional[float] = Query(None),
    units: Units = Query("metric"),
    resolver: WeatherResolver = Depends(get_resolver),
) -> WeatherEnvelope:
    """
    5-day outlook, one entry per day.
    """
    query = _location_query(city, lat, lon)

    result = await resolver.resolve_forecast(query, units)
    if isinstance(result, Failure):
        _raise_for_failure(result)

    return _envelope(result)


@router.get("/search", response_model=WeatherEnvelope)
async def search(
    city: Optional[str] = Query(None),
    lat: Optional[float] = Query(None),
    lon: Optional[float] = Query(None),
    units: Units = Query("metric"),
    resolver: WeatherResolver = Depends(get_resolver),
) -> WeatherEnvelope:
    """
    Current conditions and the daily forecast in one go. Either both come
    back or the request fails.
    """
    query = _location_query(city, lat, lon)

    result = await resolver.resolve_search(query, units)
    if isinstance(result, Failure):
        _raise_for_failure(result)

    return _envelope(result)


@router.get("/onecall", response_model=WeatherEnvelope)
async def onecall(
    lat: Optional[float] = Query(None),
    lon: Optional[float] = Query(None),
    units: Units = Query("metric"),
    exclude: Optional[str] = Query(None, description="Comma-separated blocks to skip, e.g. 'minutely,alerts'"),
    resolver: WeatherResolver = Depends(get_resolver),
) -> WeatherEnvelope:
    """
    Current, hourly (24h) and daily (7d) data from One Call 3.0.
    Needs a One Call subscription on the API key.
    """
    if lat is None or lon is None:
        raise HTTPException(status_code=400, detail="Please provide coordinates (lat, lon) for One Call API")
    query = _location_query(None, lat, lon)

    result = await resolver.resolve_onecall(query, units, exclude=exclude)
    if isinstance(result, Failure):
        _raise_for_failure(result)

    return _envelope(result)


@router.post("/multiple", response_model=WeatherEnvelope)
async def multiple_cities(
    payload: MultipleCitiesRequest,
    resolver: WeatherResolver = Depends(get_resolver),
) -> WeatherEnvelope:
    if not payload.cities:
        raise HTTPException(status_code=400, detail="Please provide an array of city names")
    if len(payload.cities) > MAX_CITIES:
        raise HTTPException(status_code=400, detail=f"Maximum {MAX_CITIES} cities allowed per request")

    entries = await resolver.resolve_many(payload.cities, payload.units)
    return _envelope(entries)
