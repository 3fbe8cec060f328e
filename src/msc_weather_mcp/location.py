import logging
import math
import re

from msc_weather_mcp.errors import InvalidLatitude, InvalidLocationFormat, InvalidLongitude
from msc_weather_mcp.models import Coordinates

logger = logging.getLogger("msc_weather.location")

LOCATION_PATTERN = re.compile(r"-?[0-9]*(\.[0-9]+)?,-?[0-9]*(\.[0-9]+)?")


def _parse_component(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"{text!r} is out of range")
    return value


def parse_location(location: str) -> Coordinates:
    """Parse a "lat,lon" string into coordinates.

    Only two plain signed decimals separated by a comma are accepted; no
    whitespace, labels or exponents. Values are not range checked.
    """
    if not LOCATION_PATTERN.fullmatch(location):
        raise InvalidLocationFormat(f"expected location to be only latitude,longitude, got {location!r}")

    lat_text, lon_text = location.split(",")

    try:
        latitude = _parse_component(lat_text)
    except ValueError as e:
        raise InvalidLatitude(f"latitude error: {e}") from e

    try:
        longitude = _parse_component(lon_text)
    except ValueError as e:
        raise InvalidLongitude(f"longitude error: {e}") from e

    logger.debug(f"Parsed location {location!r} as lat={latitude}, lon={longitude}")
    return Coordinates(latitude=latitude, longitude=longitude)
