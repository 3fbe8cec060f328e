import logging
from typing import Optional

import httpx

from msc_weather_mcp.bulletin import BulletinFetcher
from msc_weather_mcp.config import Config, config
from msc_weather_mcp.location import parse_location
from msc_weather_mcp.models import WeatherReport
from msc_weather_mcp.registry import WeatherBackend
from msc_weather_mcp.report import build_report
from msc_weather_mcp.station import StationDirectory

logger = logging.getLogger("msc_weather.weather")


class WeatherService(WeatherBackend):
    """Retrieves dd.weather.gc.ca citypage reports for a "lat,lon" location.

    The stages run strictly in order and the first failure propagates as a
    ``RetrievalError``; nothing partial is returned and nothing is retried.
    """

    name = "dd.weather.gc.ca"

    def __init__(self, settings: Optional[Config] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or config
        self.directory = StationDirectory(self.settings, client)
        self.bulletins = BulletinFetcher(self.settings, client)

    async def fetch(self, location: str, num_days: int) -> WeatherReport:
        """Get the weather report for a location"""
        logger.info(f"=== Weather lookup for {location} ({num_days} days) ===")

        logger.info("Step 1: Parsing coordinates")
        coords = parse_location(location)

        logger.info("Step 2: Finding nearest station")
        station = await self.directory.find_nearest_station(coords)

        logger.info("Step 3: Getting bulletin")
        document = await self.bulletins.fetch(station.code, station.region, self.settings.lang)

        logger.info("Step 4: Building report")
        report = build_report(document, coords, station, num_days)
        logger.debug(f"Report for {location}: {report}")
        return report
