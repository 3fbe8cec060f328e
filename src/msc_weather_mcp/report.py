"""Projection of a decoded bulletin into the report handed to renderers.

This is the only place that reads the wire model. Leaf values are parsed
here; anything missing or malformed becomes ``None`` instead of an error.
"""

import logging
import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Optional

from msc_weather_mcp import bulletin
from msc_weather_mcp.models import (
    AlmanacEntry,
    Astronomy,
    Conditions,
    Coordinates,
    DayForecast,
    ForecastPeriod,
    StationRecord,
    WeatherReport,
    YesterdayConditions,
)

logger = logging.getLogger("msc_weather.report")

UTC_ZONE = "UTC"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
HOURLY_TIMESTAMP_FORMAT = "%Y%m%d%H%M"

# Day and night period per forecast day
PERIODS_PER_DAY = 2

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]


def to_float(text: Optional[str]) -> Optional[float]:
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def to_int(text: Optional[str]) -> Optional[int]:
    value = to_float(text)
    return None if value is None else int(round(value))


def compass_degrees(direction: str) -> Optional[float]:
    try:
        return COMPASS_POINTS.index(direction.upper()) * 22.5
    except ValueError:
        return None


def utc_offset_zone(utc_offset: str) -> Optional[tzinfo]:
    hours = to_float(utc_offset)
    if hours is None:
        return None
    try:
        return timezone(timedelta(hours=hours))
    except (ValueError, OverflowError):
        return None


def parse_date_time(entry: bulletin.DateTime) -> Optional[datetime]:
    """Timestamp of a ``dateTime`` record in its own zone"""
    zone = utc_offset_zone(entry.utc_offset)
    try:
        moment = datetime.strptime(entry.time_stamp, TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return moment.replace(tzinfo=zone) if zone is not None else moment


def find_date_time(entries: List[bulletin.DateTime], name: str) -> Optional[bulletin.DateTime]:
    """Prefer the local-zone record for ``name``, fall back to the UTC one"""
    named = [entry for entry in entries if entry.name == name]
    for entry in named:
        if entry.zone != UTC_ZONE:
            return entry
    return named[0] if named else None


def local_time(entries: List[bulletin.DateTime], name: str) -> Optional[datetime]:
    entry = find_date_time(entries, name)
    return parse_date_time(entry) if entry is not None else None


def _current_conditions(current: bulletin.CurrentConditions) -> Conditions:
    temp_c = to_float(current.temperature.text)
    feels_like = to_float(current.wind_chill.text)
    if feels_like is None:
        feels_like = to_float(current.humidex.text)

    return Conditions(
        time=local_time(current.date_time, "observation"),
        description=current.condition,
        icon_code=current.icon_code.text or None,
        temp_c=temp_c,
        feels_like_c=feels_like if feels_like is not None else temp_c,
        dewpoint_c=to_float(current.dewpoint.text),
        pressure_kpa=to_float(current.pressure.text),
        pressure_tendency=current.pressure.tendency or None,
        visible_dist_km=to_float(current.visibility.text),
        humidity=to_int(current.relative_humidity.text),
        windspeed_kmph=to_float(current.wind.speed.text),
        wind_gust_kmph=to_float(current.wind.gust.text),
        winddir_degree=to_float(current.wind.bearing.text),
        wind_direction=current.wind.direction or None,
    )


def _hourly_conditions(hour: bulletin.HourlyForecast, zone: tzinfo) -> Optional[Conditions]:
    try:
        moment = datetime.strptime(hour.date_time_utc, HOURLY_TIMESTAMP_FORMAT)
        moment = moment.replace(tzinfo=timezone.utc).astimezone(zone)
    except (ValueError, OverflowError):
        logger.debug(f"Skipping hourly forecast with timestamp {hour.date_time_utc!r}")
        return None

    temp_c = to_float(hour.temperature.text)
    feels_like = to_float(hour.wind_chill.text)
    if feels_like is None:
        feels_like = to_float(hour.humidex.text)

    direction = hour.wind.direction.text
    return Conditions(
        time=moment,
        description=hour.condition,
        icon_code=hour.icon_code.text or None,
        temp_c=temp_c,
        feels_like_c=feels_like if feels_like is not None else temp_c,
        chance_of_precip_percent=to_int(hour.lop.text),
        windspeed_kmph=to_float(hour.wind.speed.text),
        wind_gust_kmph=to_float(hour.wind.gust.text),
        winddir_degree=compass_degrees(direction),
        wind_direction=direction or None,
    )


def _days(document: bulletin.SiteData, num_days: int) -> List[DayForecast]:
    group = document.hourly_forecast_group
    issued = find_date_time(group.date_time, "forecastIssue")
    zone = (issued and utc_offset_zone(issued.utc_offset)) or timezone.utc

    days: Dict[date, DayForecast] = {}
    for hour in group.hourly_forecast:
        slot = _hourly_conditions(hour, zone)
        if slot is None:
            continue
        key = slot.time.date()
        if key not in days:
            if len(days) >= num_days:
                break
            days[key] = DayForecast(forecast_date=key)
        days[key].slots.append(slot)

    sunrise = local_time(document.rise_set.date_time, "sunrise")
    sunset = local_time(document.rise_set.date_time, "sunset")
    for day in days.values():
        day.astronomy = Astronomy(
            sunrise=sunrise if sunrise is not None and sunrise.date() == day.forecast_date else None,
            sunset=sunset if sunset is not None and sunset.date() == day.forecast_date else None,
        )

    return list(days.values())


def _period(forecast: bulletin.Forecast) -> ForecastPeriod:
    calculated = forecast.wind_chill.calculated
    return ForecastPeriod(
        name=forecast.period.text_forecast_name or forecast.period.text,
        summary=forecast.text_summary,
        icon_code=forecast.abbreviated_forecast.icon_code.text or None,
        chance_of_precip_percent=to_int(forecast.abbreviated_forecast.pop.text),
        temp_c=to_float(forecast.temperatures.temperature.text),
        temp_class=forecast.temperatures.temperature.class_ or None,
        precip_types=[precip.text for precip in forecast.precipitation.precip_type if precip.text],
        accumulation_amount=to_float(forecast.precipitation.accumulation.amount.text),
        accumulation_units=forecast.precipitation.accumulation.amount.units or None,
        humidex=to_float(forecast.humidex),
        wind_chill=to_float(calculated[0].text) if calculated else None,
        uv_index=to_float(forecast.uv.index),
        uv_category=forecast.uv.category or None,
    )


def _yesterday(yesterday: bulletin.YesterdayConditions) -> YesterdayConditions:
    temperatures = {temp.class_: to_float(temp.text) for temp in yesterday.temperature}
    return YesterdayConditions(
        high_c=temperatures.get("high"),
        low_c=temperatures.get("low"),
        precip=yesterday.precip.text or None,
        precip_units=yesterday.precip.units or None,
    )


def _almanac(almanac: bulletin.Almanac) -> List[AlmanacEntry]:
    entries = []
    for kind, values in (("temperature", almanac.temperature), ("precipitation", almanac.precipitation)):
        for value in values:
            entries.append(
                AlmanacEntry(
                    kind=kind,
                    class_name=value.class_,
                    period=value.period or None,
                    year=to_int(value.year),
                    value=to_float(value.text),
                    units=value.units or None,
                )
            )
    return entries


def build_report(
    document: bulletin.SiteData,
    coords: Coordinates,
    station: StationRecord,
    num_days: int,
) -> WeatherReport:
    """Project a bulletin into a report limited to ``num_days`` of forecast"""
    num_days = max(num_days, 0)
    location = document.location

    name = location.name.text or station.code
    if location.province.code:
        name = f"{name}, {location.province.code}"

    return WeatherReport(
        location=name,
        geo_loc=coords,
        station_code=station.code,
        region=station.region,
        issued=local_time(document.forecast_group.date_time, "forecastIssue"),
        current=_current_conditions(document.current_conditions),
        days=_days(document, num_days),
        periods=[_period(forecast) for forecast in document.forecast_group.forecast[: num_days * PERIODS_PER_DAY]],
        yesterday=_yesterday(document.yesterday_conditions),
        almanac=_almanac(document.almanac),
        almanac_pop_percent=to_int(document.almanac.pop.text),
        warnings=[event.description for event in document.warnings.event if event.description],
    )
