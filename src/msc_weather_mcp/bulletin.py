"""Decode-only model of the MSC citypage ``siteData`` XML document.

The classes mirror the provider's wire format element for element. Every leaf
is kept as text: numbers are parsed where they are used (see ``report``), so a
missing or odd value never fails decoding. Attributes are aliased with a ``@``
prefix and element text with ``#text``.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, get_origin

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from msc_weather_mcp.client import download, open_client
from msc_weather_mcp.config import Config, config
from msc_weather_mcp.errors import BulletinDecodeError, BulletinFetchError, BulletinReadError

logger = logging.getLogger("msc_weather.bulletin")

ROOT_TAG = "siteData"


def element_to_dict(element: ET.Element) -> Dict[str, Any]:
    """Convert an element into ``{"@attr": ..., "#text": ..., "child": [...]}``"""
    data: Dict[str, Any] = {f"@{name}": value for name, value in element.attrib.items()}

    text = (element.text or "").strip()
    if text:
        data["#text"] = text

    for child in element:
        data.setdefault(child.tag, []).append(element_to_dict(child))

    return data


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _shape_children(cls, data: Any) -> Any:
        # Children always arrive as lists of dicts; collapse them to whatever
        # shape each field declares.
        if not isinstance(data, dict):
            return data

        shaped = dict(data)
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if key not in shaped:
                continue

            value = shaped[key]
            if get_origin(field.annotation) is list:
                continue
            if isinstance(value, list):
                if not value:
                    del shaped[key]
                    continue
                value = value[0]
            if field.annotation is str and isinstance(value, dict):
                value = value.get("#text", "")
            shaped[key] = value

        return shaped


class Named(WireModel):
    text: str = Field("", alias="#text")
    name: str = Field("", alias="@name")


class Coded(WireModel):
    text: str = Field("", alias="#text")
    code: str = Field("", alias="@code")


class Located(Coded):
    lat: str = Field("", alias="@lat")
    lon: str = Field("", alias="@lon")


class IconCode(WireModel):
    text: str = Field("", alias="#text")
    format: str = Field("", alias="@format")


class UnitValue(WireModel):
    text: str = Field("", alias="#text")
    units: str = Field("", alias="@units")


class Measure(WireModel):
    text: str = Field("", alias="#text")
    unit_type: str = Field("", alias="@unitType")
    units: str = Field("", alias="@units")


class ClassedMeasure(Measure):
    class_: str = Field("", alias="@class")


class DateTime(WireModel):
    name: str = Field("", alias="@name")
    zone: str = Field("", alias="@zone")
    utc_offset: str = Field("", alias="@UTCOffset")
    year: str = ""
    month: Named = Field(default_factory=Named)
    day: Named = Field(default_factory=Named)
    hour: str = ""
    minute: str = ""
    time_stamp: str = Field("", alias="timeStamp")
    text_summary: str = Field("", alias="textSummary")


class Location(WireModel):
    continent: str = ""
    country: Coded = Field(default_factory=Coded)
    province: Coded = Field(default_factory=Coded)
    name: Located = Field(default_factory=Located)
    region: str = ""


class WarningEvent(WireModel):
    type: str = Field("", alias="@type")
    priority: str = Field("", alias="@priority")
    description: str = Field("", alias="@description")


class Warnings(WireModel):
    url: str = Field("", alias="@url")
    event: List[WarningEvent] = Field(default_factory=list)


class Pressure(Measure):
    change: str = Field("", alias="@change")
    tendency: str = Field("", alias="@tendency")


class Wind(WireModel):
    speed: Measure = Field(default_factory=Measure)
    gust: Measure = Field(default_factory=Measure)
    direction: str = ""
    bearing: UnitValue = Field(default_factory=UnitValue)


class CurrentConditions(WireModel):
    station: Located = Field(default_factory=Located)
    date_time: List[DateTime] = Field(default_factory=list, alias="dateTime")
    condition: str = ""
    icon_code: IconCode = Field(default_factory=IconCode, alias="iconCode")
    temperature: Measure = Field(default_factory=Measure)
    dewpoint: Measure = Field(default_factory=Measure)
    wind_chill: Measure = Field(default_factory=Measure, alias="windChill")
    humidex: Measure = Field(default_factory=Measure)
    pressure: Pressure = Field(default_factory=Pressure)
    visibility: Measure = Field(default_factory=Measure)
    relative_humidity: UnitValue = Field(default_factory=UnitValue, alias="relativeHumidity")
    wind: Wind = Field(default_factory=Wind)


class RegionalNormals(WireModel):
    text_summary: str = Field("", alias="textSummary")
    temperature: List[ClassedMeasure] = Field(default_factory=list)


class Period(WireModel):
    text: str = Field("", alias="#text")
    text_forecast_name: str = Field("", alias="@textForecastName")


class CloudPrecip(WireModel):
    text_summary: str = Field("", alias="textSummary")


class AbbreviatedForecast(WireModel):
    icon_code: IconCode = Field(default_factory=IconCode, alias="iconCode")
    pop: UnitValue = Field(default_factory=UnitValue)
    text_summary: str = Field("", alias="textSummary")


class Temperatures(WireModel):
    text_summary: str = Field("", alias="textSummary")
    temperature: ClassedMeasure = Field(default_factory=ClassedMeasure)


class ForecastWind(Wind):
    index: str = Field("", alias="@index")
    rank: str = Field("", alias="@rank")


class Winds(WireModel):
    text_summary: str = Field("", alias="textSummary")
    wind: List[ForecastWind] = Field(default_factory=list)


class PrecipType(WireModel):
    text: str = Field("", alias="#text")
    start: str = Field("", alias="@start")
    end: str = Field("", alias="@end")


class Accumulation(WireModel):
    name: str = ""
    amount: Measure = Field(default_factory=Measure)


class Precipitation(WireModel):
    text_summary: str = Field("", alias="textSummary")
    precip_type: List[PrecipType] = Field(default_factory=list, alias="precipType")
    accumulation: Accumulation = Field(default_factory=Accumulation)


class Calculated(WireModel):
    text: str = Field("", alias="#text")
    unit_type: str = Field("", alias="@unitType")
    class_: str = Field("", alias="@class")
    index: str = Field("", alias="@index")


class WindChill(WireModel):
    text_summary: str = Field("", alias="textSummary")
    calculated: List[Calculated] = Field(default_factory=list)
    frostbite: str = ""


class Uv(WireModel):
    category: str = Field("", alias="@category")
    index: str = ""
    text_summary: str = Field("", alias="textSummary")


class Forecast(WireModel):
    period: Period = Field(default_factory=Period)
    text_summary: str = Field("", alias="textSummary")
    cloud_precip: CloudPrecip = Field(default_factory=CloudPrecip, alias="cloudPrecip")
    abbreviated_forecast: AbbreviatedForecast = Field(default_factory=AbbreviatedForecast, alias="abbreviatedForecast")
    temperatures: Temperatures = Field(default_factory=Temperatures)
    winds: Winds = Field(default_factory=Winds)
    humidex: str = ""
    precipitation: Precipitation = Field(default_factory=Precipitation)
    wind_chill: WindChill = Field(default_factory=WindChill, alias="windChill")
    uv: Uv = Field(default_factory=Uv)
    relative_humidity: UnitValue = Field(default_factory=UnitValue, alias="relativeHumidity")


class ForecastGroup(WireModel):
    date_time: List[DateTime] = Field(default_factory=list, alias="dateTime")
    regional_normals: RegionalNormals = Field(default_factory=RegionalNormals, alias="regionalNormals")
    forecast: List[Forecast] = Field(default_factory=list)


class Lop(WireModel):
    text: str = Field("", alias="#text")
    category: str = Field("", alias="@category")
    units: str = Field("", alias="@units")


class WindDirection(WireModel):
    text: str = Field("", alias="#text")
    wind_dir_full: str = Field("", alias="@windDirFull")


class HourlyWind(WireModel):
    speed: Measure = Field(default_factory=Measure)
    direction: WindDirection = Field(default_factory=WindDirection)
    gust: Measure = Field(default_factory=Measure)


class HourlyForecast(WireModel):
    date_time_utc: str = Field("", alias="@dateTimeUTC")
    condition: str = ""
    icon_code: IconCode = Field(default_factory=IconCode, alias="iconCode")
    temperature: Measure = Field(default_factory=Measure)
    lop: Lop = Field(default_factory=Lop)
    wind_chill: Measure = Field(default_factory=Measure, alias="windChill")
    humidex: Measure = Field(default_factory=Measure)
    wind: HourlyWind = Field(default_factory=HourlyWind)


class HourlyForecastGroup(WireModel):
    date_time: List[DateTime] = Field(default_factory=list, alias="dateTime")
    hourly_forecast: List[HourlyForecast] = Field(default_factory=list, alias="hourlyForecast")


class YesterdayConditions(WireModel):
    temperature: List[ClassedMeasure] = Field(default_factory=list)
    precip: Measure = Field(default_factory=Measure)


class RiseSet(WireModel):
    disclaimer: str = ""
    date_time: List[DateTime] = Field(default_factory=list, alias="dateTime")


class AlmanacValue(ClassedMeasure):
    period: str = Field("", alias="@period")
    year: str = Field("", alias="@year")


class Almanac(WireModel):
    temperature: List[AlmanacValue] = Field(default_factory=list)
    precipitation: List[AlmanacValue] = Field(default_factory=list)
    pop: UnitValue = Field(default_factory=UnitValue)


class SiteData(WireModel):
    """One station bulletin as published by the provider"""

    license: str = ""
    date_time: List[DateTime] = Field(default_factory=list, alias="dateTime")
    location: Location = Field(default_factory=Location)
    warnings: Warnings = Field(default_factory=Warnings)
    current_conditions: CurrentConditions = Field(default_factory=CurrentConditions, alias="currentConditions")
    forecast_group: ForecastGroup = Field(default_factory=ForecastGroup, alias="forecastGroup")
    hourly_forecast_group: HourlyForecastGroup = Field(default_factory=HourlyForecastGroup, alias="hourlyForecastGroup")
    yesterday_conditions: YesterdayConditions = Field(default_factory=YesterdayConditions, alias="yesterdayConditions")
    rise_set: RiseSet = Field(default_factory=RiseSet, alias="riseSet")
    almanac: Almanac = Field(default_factory=Almanac)


def decode_site_data(body: bytes, url: Optional[str] = None) -> SiteData:
    """Decode a bulletin body; any envelope problem raises BulletinDecodeError"""
    raw = body.decode("utf-8", errors="replace")

    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise BulletinDecodeError(f"unable to unmarshal response ({url}): {e}", raw, url) from e

    if root.tag != ROOT_TAG:
        raise BulletinDecodeError(
            f"unable to unmarshal response ({url}): expected element type <{ROOT_TAG}> but have <{root.tag}>",
            raw,
            url,
        )

    try:
        return SiteData.model_validate(element_to_dict(root))
    except ValidationError as e:
        raise BulletinDecodeError(f"unable to unmarshal response ({url}): {e}", raw, url) from e


class BulletinFetcher:
    """Fetches citypage bulletins for a station"""

    def __init__(self, settings: Optional[Config] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or config
        self._client = client

    def build_url(self, station_code: str, region: str, language: str) -> str:
        # Only the first character of the configured language is used, unvalidated
        return self.settings.bulletin_url_template.format(
            station_code=station_code,
            region=region,
            language=language[:1],
        )

    async def fetch(self, station_code: str, region: str, language: str) -> SiteData:
        url = self.build_url(station_code, region, language)
        logger.info(f"Fetching bulletin for station {station_code} from {url}")

        async with open_client(self.settings, self._client) as client:
            body = await download(client, url, BulletinFetchError, BulletinReadError)

        logger.debug(f"Bulletin body for {station_code}: {len(body)} bytes")

        try:
            document = decode_site_data(body, url)
        except BulletinDecodeError:
            logger.error(f"Failed to decode bulletin from {url}")
            raise

        logger.info(f"Decoded bulletin for {document.location.name.text or station_code}")
        return document
