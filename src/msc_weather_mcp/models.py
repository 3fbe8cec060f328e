from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    # Finite only; range is deliberately not checked
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float
    longitude: float


class StationRecord(BaseModel):
    code: str
    name: str = ""
    region: str
    coordinates: Coordinates


class Conditions(BaseModel):
    time: Optional[datetime] = None
    description: str = ""
    icon_code: Optional[str] = None
    temp_c: Optional[float] = None
    feels_like_c: Optional[float] = None
    dewpoint_c: Optional[float] = None
    pressure_kpa: Optional[float] = None
    pressure_tendency: Optional[str] = None
    chance_of_precip_percent: Optional[int] = None
    visible_dist_km: Optional[float] = None
    humidity: Optional[int] = None
    windspeed_kmph: Optional[float] = None
    wind_gust_kmph: Optional[float] = None
    winddir_degree: Optional[float] = None
    wind_direction: Optional[str] = None


class Astronomy(BaseModel):
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None


class DayForecast(BaseModel):
    forecast_date: date
    slots: List[Conditions] = Field(default_factory=list)
    astronomy: Astronomy = Field(default_factory=Astronomy)


class ForecastPeriod(BaseModel):
    name: str
    summary: str = ""
    icon_code: Optional[str] = None
    chance_of_precip_percent: Optional[int] = None
    temp_c: Optional[float] = None
    temp_class: Optional[str] = None
    precip_types: List[str] = Field(default_factory=list)
    accumulation_amount: Optional[float] = None
    accumulation_units: Optional[str] = None
    humidex: Optional[float] = None
    wind_chill: Optional[float] = None
    uv_index: Optional[float] = None
    uv_category: Optional[str] = None


class YesterdayConditions(BaseModel):
    high_c: Optional[float] = None
    low_c: Optional[float] = None
    precip: Optional[str] = None
    precip_units: Optional[str] = None


class AlmanacEntry(BaseModel):
    kind: str
    class_name: str
    period: Optional[str] = None
    year: Optional[int] = None
    value: Optional[float] = None
    units: Optional[str] = None


class WeatherReport(BaseModel):
    """Normalized report handed to the rendering layer"""

    location: str
    geo_loc: Coordinates
    station_code: str
    region: str
    issued: Optional[datetime] = None
    current: Conditions = Field(default_factory=Conditions)
    days: List[DayForecast] = Field(default_factory=list)
    periods: List[ForecastPeriod] = Field(default_factory=list)
    yesterday: YesterdayConditions = Field(default_factory=YesterdayConditions)
    almanac: List[AlmanacEntry] = Field(default_factory=list)
    almanac_pop_percent: Optional[int] = None
    warnings: List[str] = Field(default_factory=list)
