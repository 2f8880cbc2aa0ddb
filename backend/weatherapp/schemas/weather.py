from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Units = Literal["metric", "imperial"]


class Coordinates(BaseModel):
    lat: float
    lon: float


class LocationQuery(BaseModel):
    """
    Either a free-text city or a lat/lon pair, never both.
    """
    city: Optional[str] = None
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lon: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def _one_variant(self) -> "LocationQuery":
        if self.city is not None:
            self.city = self.city.strip()
            if not self.city:
                raise ValueError("Please enter a city name")
            if self.lat is not None or self.lon is not None:
                raise ValueError("Provide either a city name or coordinates, not both")
            return self

        if self.lat is None or self.lon is None:
            raise ValueError("Please provide either city name or coordinates (lat, lon)")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.city is None


class NormalizedCurrent(BaseModel):
    location: str
    coordinates: Coordinates
    temperature: int
    feels_like: int
    description: str
    icon: str
    humidity: int
    pressure: int
    wind_speed: float
    wind_direction: Optional[int] = None
    wind_speed_unit: str
    visibility_km: Optional[float] = None
    cloudiness: int
    sunrise: datetime
    sunset: datetime
    timezone: int  # offset from UTC in seconds


class ForecastSample(BaseModel):
    """One 3-hour reading from the forecast list."""
    model_config = ConfigDict(frozen=True)

    local_time: datetime  # provider wall-clock, not converted
    timestamp: int
    temperature: int
    feels_like: int
    description: str
    icon: str
    humidity: int
    pressure: int
    wind_speed: float
    wind_direction: Optional[int] = None
    cloudiness: int
    precipitation_probability: float  # 0–100


class DailyForecast(ForecastSample):
    """
    Representative sample for one calendar day, plus the range across
    every sample of that day.
    """
    day_key: str
    min_temp: int
    max_temp: int


class ForecastReport(BaseModel):
    location: str
    coordinates: Coordinates
    wind_speed_unit: str
    days: List[DailyForecast]


class SearchReport(BaseModel):
    current: NormalizedCurrent
    forecast: ForecastReport


class MultipleCitiesRequest(BaseModel):
    cities: List[str] = []
    units: Units = "metric"


class CityWeatherEntry(BaseModel):
    city: str
    success: bool
    data: Optional[NormalizedCurrent] = None
    error: Optional[str] = None


class WeatherEnvelope(BaseModel):
    success: bool = True
    data: Any
    timestamp: datetime


class WeatherCondition(BaseModel):
    id: int
    main: str
    description: str
    icon: str


class OneCallCurrent(BaseModel):
    time: datetime
    sunrise: datetime
    sunset: datetime
    temperature: int
    feels_like: int
    pressure: int
    humidity: int
    dew_point: int
    uv_index: float
    clouds: int
    visibility_km: Optional[float] = None
    wind_speed: float
    wind_direction: Optional[int] = None
    weather: WeatherCondition


class OneCallHourly(BaseModel):
    time: datetime
    temperature: int
    feels_like: int
    pressure: int
    humidity: int
    dew_point: int
    uv_index: float
    clouds: int
    visibility_km: Optional[float] = None
    wind_speed: float
    wind_direction: Optional[int] = None
    weather: WeatherCondition
    pop: int  # 0–100


class DailyTemperatures(BaseModel):
    day: int
    min: int
    max: int
    night: int
    evening: int
    morning: int


class DailyFeelsLike(BaseModel):
    day: int
    night: int
    evening: int
    morning: int


class OneCallDaily(BaseModel):
    time: datetime
    sunrise: datetime
    sunset: datetime
    moonrise: datetime
    moonset: datetime
    moon_phase: float
    summary: Optional[str] = None
    temperature: DailyTemperatures
    feels_like: DailyFeelsLike
    pressure: int
    humidity: int
    dew_point: int
    wind_speed: float
    wind_direction: Optional[int] = None
    weather: WeatherCondition
    clouds: int
    pop: int  # 0–100
    uv_index: float


class OneCallReport(BaseModel):
    """
    One Call 3.0 response; blocks left out via `exclude` stay None.
    """
    coordinates: Coordinates
    timezone: str
    timezone_offset: int
    wind_speed_unit: str
    current: Optional[OneCallCurrent] = None
    hourly: Optional[List[OneCallHourly]] = None
    daily: Optional[List[OneCallDaily]] = None
