from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple

from ..schemas.weather import (
    Coordinates,
    DailyFeelsLike,
    DailyTemperatures,
    ForecastSample,
    NormalizedCurrent,
    OneCallCurrent,
    OneCallDaily,
    OneCallHourly,
    OneCallReport,
    WeatherCondition,
)

WIND_SPEED_UNITS = {
    "metric": "m/s",
    "imperial": "mph",
}


def round_half_away(value: float) -> int:
    """
    Round half away from zero: 2.5 -> 3, -2.5 -> -3.
    """
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def wind_speed_unit(units: str) -> str:
    return WIND_SPEED_UNITS.get(units, "m/s")


def _instant(epoch_s: int) -> datetime:
    return datetime.fromtimestamp(int(epoch_s), tz=timezone.utc)


def _location_label(name: str, country: str) -> str:
    return f"{name}, {country}"


def normalize_current(data: Dict[str, Any], units: str) -> NormalizedCurrent:
    """
    Map a /weather payload onto the stable current-weather schema.
    """
    main = data["main"]
    weather0 = data["weather"][0]
    wind = data.get("wind") or {}
    sys_ = data["sys"]

    return NormalizedCurrent(
        location=_location_label(data["name"], sys_.get("country", "")),
        coordinates=Coordinates(lat=data["coord"]["lat"], lon=data["coord"]["lon"]),
        temperature=round_half_away(main["temp"]),
        feels_like=round_half_away(main["feels_like"]),
        description=weather0["description"],
        icon=weather0["icon"],
        humidity=main["humidity"],
        pressure=main["pressure"],
        wind_speed=wind.get("speed", 0.0),
        wind_direction=wind.get("deg"),
        wind_speed_unit=wind_speed_unit(units),
        visibility_km=_km(data.get("visibility")),
        cloudiness=(data.get("clouds") or {}).get("all", 0),
        sunrise=_instant(sys_["sunrise"]),
        sunset=_instant(sys_["sunset"]),
        timezone=data.get("timezone", 0),
    )


def normalize_sample(item: Dict[str, Any]) -> ForecastSample:
    main = item["main"]
    weather0 = item["weather"][0]
    wind = item.get("wind") or {}

    return ForecastSample(
        # dt_txt is kept as the provider wrote it; grouping depends on that
        local_time=datetime.fromisoformat(item["dt_txt"]),
        timestamp=item["dt"],
        temperature=round_half_away(main["temp"]),
        feels_like=round_half_away(main["feels_like"]),
        description=weather0["description"],
        icon=weather0["icon"],
        humidity=main["humidity"],
        pressure=main["pressure"],
        wind_speed=wind.get("speed", 0.0),
        wind_direction=wind.get("deg"),
        cloudiness=(item.get("clouds") or {}).get("all", 0),
        precipitation_probability=float(item.get("pop", 0)) * 100,
    )


def normalize_forecast_samples(data: Dict[str, Any]) -> List[ForecastSample]:
    return [normalize_sample(item) for item in data.get("list", [])]


def forecast_location(data: Dict[str, Any]) -> Tuple[str, Coordinates]:
    """
    Returns (label, Coordinates) for a /forecast payload.
    """
    city = data["city"]
    coords = Coordinates(lat=city["coord"]["lat"], lon=city["coord"]["lon"])
    return _location_label(city["name"], city.get("country", "")), coords


HOURLY_LIMIT = 24
DAILY_LIMIT = 7


def _km(metres: Optional[float]) -> Optional[float]:
    return metres / 1000 if metres is not None else None


def _percent(pop: float) -> int:
    return round_half_away(float(pop) * 100)


def _condition(block: Dict[str, Any]) -> WeatherCondition:
    return WeatherCondition(**block["weather"][0])


def _onecall_current(c: Dict[str, Any]) -> OneCallCurrent:
    return OneCallCurrent(
        time=_instant(c["dt"]),
        sunrise=_instant(c["sunrise"]),
        sunset=_instant(c["sunset"]),
        temperature=round_half_away(c["temp"]),
        feels_like=round_half_away(c["feels_like"]),
        pressure=c["pressure"],
        humidity=c["humidity"],
        dew_point=round_half_away(c["dew_point"]),
        uv_index=c.get("uvi", 0.0),
        clouds=c.get("clouds", 0),
        visibility_km=_km(c.get("visibility")),
        wind_speed=c.get("wind_speed", 0.0),
        wind_direction=c.get("wind_deg"),
        weather=_condition(c),
    )


def _onecall_hour(h: Dict[str, Any]) -> OneCallHourly:
    return OneCallHourly(
        time=_instant(h["dt"]),
        temperature=round_half_away(h["temp"]),
        feels_like=round_half_away(h["feels_like"]),
        pressure=h["pressure"],
        humidity=h["humidity"],
        dew_point=round_half_away(h["dew_point"]),
        uv_index=h.get("uvi", 0.0),
        clouds=h.get("clouds", 0),
        visibility_km=_km(h.get("visibility")),
        wind_speed=h.get("wind_speed", 0.0),
        wind_direction=h.get("wind_deg"),
        weather=_condition(h),
        pop=_percent(h.get("pop", 0)),
    )


def _onecall_day(d: Dict[str, Any]) -> OneCallDaily:
    temp = d["temp"]
    feels = d["feels_like"]

    return OneCallDaily(
        time=_instant(d["dt"]),
        sunrise=_instant(d["sunrise"]),
        sunset=_instant(d["sunset"]),
        moonrise=_instant(d["moonrise"]),
        moonset=_instant(d["moonset"]),
        moon_phase=d["moon_phase"],
        summary=d.get("summary"),
        temperature=DailyTemperatures(
            day=round_half_away(temp["day"]),
            min=round_half_away(temp["min"]),
            max=round_half_away(temp["max"]),
            night=round_half_away(temp["night"]),
            evening=round_half_away(temp["eve"]),
            morning=round_half_away(temp["morn"]),
        ),
        feels_like=DailyFeelsLike(
            day=round_half_away(feels["day"]),
            night=round_half_away(feels["night"]),
            evening=round_half_away(feels["eve"]),
            morning=round_half_away(feels["morn"]),
        ),
        pressure=d["pressure"],
        humidity=d["humidity"],
        dew_point=round_half_away(d["dew_point"]),
        wind_speed=d.get("wind_speed", 0.0),
        wind_direction=d.get("wind_deg"),
        weather=_condition(d),
        clouds=d.get("clouds", 0),
        pop=_percent(d.get("pop", 0)),
        uv_index=d.get("uvi", 0.0),
    )


def normalize_onecall(data: Dict[str, Any], units: str) -> OneCallReport:
    """
    Map a One Call 3.0 payload: current conditions, the next 24 hours and
    the next 7 days. Blocks missing from the payload (see `exclude`) stay None.
    """
    current = data.get("current")
    hourly = data.get("hourly")
    daily = data.get("daily")

    return OneCallReport(
        coordinates=Coordinates(lat=data["lat"], lon=data["lon"]),
        timezone=data["timezone"],
        timezone_offset=data.get("timezone_offset", 0),
        wind_speed_unit=wind_speed_unit(units),
        current=_onecall_current(current) if current else None,
        hourly=[_onecall_hour(h) for h in hourly[:HOURLY_LIMIT]] if hourly is not None else None,
        daily=[_onecall_day(d) for d in daily[:DAILY_LIMIT]] if daily is not None else None,
    )
