import csv
import io
import logging
import math
from typing import Iterable, List, Optional

import httpx

from msc_weather_mcp.client import download, open_client
from msc_weather_mcp.config import Config, config
from msc_weather_mcp.errors import DirectoryFetchError, DirectoryReadError, NoStationFound
from msc_weather_mcp.models import Coordinates, StationRecord

# Get logger for this module
logger = logging.getLogger("msc_weather.station")

# Column layout of site_list_towns_en.csv
CODE_COLUMN = 0
NAME_COLUMN = 1
REGION_COLUMN = 2
LATITUDE_COLUMN = 3
LONGITUDE_COLUMN = 4

NEGATIVE_HEMISPHERES = ("S", "W")


def squared_distance(a: Coordinates, b: Coordinates) -> float:
    """Planar squared distance in degrees; ordering only, not a real distance"""
    return (a.latitude - b.latitude) ** 2 + (a.longitude - b.longitude) ** 2


def nearest_station(coords: Coordinates, stations: Iterable[StationRecord]) -> Optional[StationRecord]:
    """Return the closest station, keeping the earliest one on ties"""
    nearest = None
    min_distance = math.inf

    for station in stations:
        distance = squared_distance(coords, station.coordinates)
        if distance < min_distance:
            min_distance = distance
            nearest = station

    return nearest


class StationDirectory:
    """Downloads the MSC citypage station list and resolves the nearest station.

    Nothing is cached: every lookup re-downloads the directory, so instances
    can be shared between concurrent requests.
    """

    def __init__(self, settings: Optional[Config] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or config
        self._client = client

    @property
    def url(self) -> str:
        return self.settings.directory_url

    async def fetch_stations(self) -> List[StationRecord]:
        """Download and parse the station directory"""
        logger.info(f"Fetching station directory from {self.url}")

        async with open_client(self.settings, self._client) as client:
            body = await download(client, self.url, DirectoryFetchError, DirectoryReadError)

        stations = self.parse_directory(body.decode("utf-8-sig", errors="replace"))
        logger.info(f"Loaded {len(stations)} stations from directory")
        return stations

    def parse_directory(self, text: str) -> List[StationRecord]:
        """Parse the CSV body; the first record is always the header.

        Rows whose coordinates cannot be read are logged and dropped.
        """
        stations = []
        reader = csv.reader(io.StringIO(text))

        try:
            next(reader, None)
            for row in reader:
                station = self._parse_row(row, reader.line_num)
                if station is not None:
                    stations.append(station)
        except csv.Error as e:
            raise DirectoryReadError(f"unable to process the csv at {self.url}: {e}") from e

        return stations

    def _parse_row(self, row: List[str], line_num: int) -> Optional[StationRecord]:
        if len(row) <= LONGITUDE_COLUMN:
            logger.warning(f"Skipping line {line_num}: expected at least {LONGITUDE_COLUMN + 1} columns, got {len(row)}")
            return None

        try:
            coords = Coordinates(
                latitude=self._parse_degrees(row[LATITUDE_COLUMN]),
                longitude=self._parse_degrees(row[LONGITUDE_COLUMN]),
            )
        except ValueError as e:
            logger.warning(f"Skipping station {row[CODE_COLUMN]!r} on line {line_num}: {e}")
            return None

        return StationRecord(
            code=row[CODE_COLUMN],
            name=row[NAME_COLUMN],
            region=row[REGION_COLUMN],
            coordinates=coords,
        )

    def _parse_degrees(self, text: str) -> float:
        # Values carry a trailing hemisphere letter, e.g. "45.40N" or "75.71W"
        value = float(text[:-1])
        if self.settings.signed_hemispheres and text[-1:].upper() in NEGATIVE_HEMISPHERES:
            value = -value
        return value

    async def find_nearest_station(self, coords: Coordinates) -> StationRecord:
        """Find the station closest to the given coordinates"""
        stations = await self.fetch_stations()
        station = nearest_station(coords, stations)

        if station is None:
            logger.error(f"No usable station in directory {self.url}")
            raise NoStationFound(f"no station with valid coordinates in {self.url}")

        logger.info(f"Found nearest station: {station.name} ({station.code}, {station.region})")
        return station
