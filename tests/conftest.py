from typing import Callable, Dict, List, Union

import httpx
import pytest

from msc_weather_mcp.config import Config

DIRECTORY_URL = "https://dd.test/citypage_weather/docs/site_list_towns_en.csv"
BULLETIN_TEMPLATE = "https://dd.test/citypage_weather/xml/{station_code}/{region}_{language}.xml"

DIRECTORY_CSV = """Codes,English Names,Province Codes,Latitude,Longitude
s0000430,Ottawa (Kanata - Orléans),ON,45.33N,75.58W
s0000458,Toronto,ON,43.74N,79.37W
s0000635,Montréal,QC,45.51N,73.65W
"""

SITE_DATA_XML = """<?xml version='1.0' encoding='UTF-8'?>
<siteData xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xsi:noNamespaceSchemaLocation="https://dd.weather.gc.ca/citypage_weather/schema/site.xsd">
  <license>https://dd.weather.gc.ca/doc/LICENCE_GENERAL.txt</license>
  <dateTime name="xmlCreation" zone="UTC" UTCOffset="0">
    <year>2023</year>
    <month name="October">10</month>
    <day name="Wednesday">18</day>
    <hour>21</hour>
    <minute>30</minute>
    <timeStamp>20231018213000</timeStamp>
    <textSummary>Wednesday October 18, 2023 at 21:30 UTC</textSummary>
  </dateTime>
  <location>
    <continent>North America</continent>
    <country code="ca">Canada</country>
    <province code="on">Ontario</province>
    <name code="s0000430" lat="45.33N" lon="75.58W">Ottawa (Kanata - Orléans)</name>
    <region>Ottawa North - Kanata - Orléans</region>
  </location>
  <warnings url="https://weather.gc.ca/warnings/report_e.html?on118">
    <event type="statement" priority="low" description="SPECIAL WEATHER STATEMENT IN EFFECT"/>
  </warnings>
  <currentConditions>
    <station code="yow" lat="45.32N" lon="75.67W">Ottawa Macdonald-Cartier Int'l Airport</station>
    <dateTime name="observation" zone="UTC" UTCOffset="0">
      <timeStamp>20231018210000</timeStamp>
    </dateTime>
    <dateTime name="observation" zone="EDT" UTCOffset="-4">
      <year>2023</year>
      <month name="October">10</month>
      <day name="Wednesday">18</day>
      <hour>17</hour>
      <minute>00</minute>
      <timeStamp>20231018170000</timeStamp>
      <textSummary>Wednesday October 18, 2023 at 17:00 EDT</textSummary>
    </dateTime>
    <condition>Mostly Cloudy</condition>
    <iconCode format="gif">03</iconCode>
    <temperature unitType="metric" units="C">12.3</temperature>
    <dewpoint unitType="metric" units="C">5.1</dewpoint>
    <pressure unitType="metric" units="kPa" change="0.12" tendency="rising">101.8</pressure>
    <visibility unitType="metric" units="km">24</visibility>
    <relativeHumidity units="%">62</relativeHumidity>
    <wind>
      <speed unitType="metric" units="km/h">15</speed>
      <gust unitType="metric" units="km/h"/>
      <direction>NW</direction>
      <bearing units="degrees">315.0</bearing>
    </wind>
  </currentConditions>
  <forecastGroup>
    <dateTime name="forecastIssue" zone="UTC" UTCOffset="0">
      <timeStamp>20231018193000</timeStamp>
    </dateTime>
    <dateTime name="forecastIssue" zone="EDT" UTCOffset="-4">
      <timeStamp>20231018153000</timeStamp>
      <textSummary>Wednesday October 18, 2023 at 15:30 EDT</textSummary>
    </dateTime>
    <regionalNormals>
      <textSummary>Low plus 4. High 13.</textSummary>
      <temperature unitType="metric" units="C" class="high">13</temperature>
      <temperature unitType="metric" units="C" class="low">4</temperature>
    </regionalNormals>
    <forecast>
      <period textForecastName="Tonight">Wednesday night</period>
      <textSummary>Cloudy. 40 percent chance of showers overnight. Low 6.</textSummary>
      <abbreviatedForecast>
        <iconCode format="gif">12</iconCode>
        <pop units="%">40</pop>
        <textSummary>Chance of showers</textSummary>
      </abbreviatedForecast>
      <temperatures>
        <textSummary>Low 6.</textSummary>
        <temperature unitType="metric" units="C" class="low">6</temperature>
      </temperatures>
      <winds/>
      <precipitation>
        <textSummary/>
        <precipType start="84" end="88">rain</precipType>
        <accumulation>
          <name>rain</name>
          <amount unitType="metric" units="mm">2</amount>
        </accumulation>
      </precipitation>
      <windChill>
        <textSummary>Wind chill minus 2 overnight.</textSummary>
        <calculated unitType="metric" class="low" index="">-2</calculated>
        <frostbite/>
      </windChill>
      <relativeHumidity units="%">95</relativeHumidity>
    </forecast>
    <forecast>
      <period textForecastName="Thursday">Thursday</period>
      <textSummary>Sunny. High 15. UV index 3 or moderate.</textSummary>
      <abbreviatedForecast>
        <iconCode format="gif">00</iconCode>
        <pop units="%"/>
        <textSummary>Sunny</textSummary>
      </abbreviatedForecast>
      <temperatures>
        <textSummary>High 15.</textSummary>
        <temperature unitType="metric" units="C" class="high">15</temperature>
      </temperatures>
      <winds>
        <textSummary>Wind west 20 km/h.</textSummary>
        <wind index="1" rank="major">
          <speed unitType="metric" units="km/h">20</speed>
          <gust unitType="metric" units="km/h">00</gust>
          <direction>W</direction>
          <bearing units="degrees">27</bearing>
        </wind>
      </winds>
      <humidex>n/a</humidex>
      <uv category="moderate">
        <index>3</index>
        <textSummary>UV index 3 or moderate.</textSummary>
      </uv>
    </forecast>
    <forecast>
      <period textForecastName="Thursday night">Thursday night</period>
      <textSummary>Clear. Low 3.</textSummary>
      <temperatures>
        <temperature unitType="metric" units="C" class="low">3</temperature>
      </temperatures>
    </forecast>
    <forecast>
      <period textForecastName="Friday">Friday</period>
      <textSummary>Cloudy. High 11.</textSummary>
      <temperatures>
        <temperature unitType="metric" units="C" class="high">11</temperature>
      </temperatures>
    </forecast>
    <forecast>
      <period textForecastName="Friday night">Friday night</period>
      <textSummary>Rain. Low 7.</textSummary>
      <temperatures>
        <temperature unitType="metric" units="C" class="low">7</temperature>
      </temperatures>
    </forecast>
  </forecastGroup>
  <hourlyForecastGroup>
    <dateTime name="forecastIssue" zone="UTC" UTCOffset="0">
      <timeStamp>20231018193000</timeStamp>
    </dateTime>
    <dateTime name="forecastIssue" zone="EDT" UTCOffset="-4">
      <timeStamp>20231018153000</timeStamp>
    </dateTime>
    <hourlyForecast dateTimeUTC="202310182200">
      <condition>Mostly cloudy</condition>
      <iconCode format="png">03</iconCode>
      <temperature unitType="metric" units="C">11</temperature>
      <lop category="Nil" units="%">0</lop>
      <windChill unitType="metric"/>
      <humidex unitType="metric"/>
      <wind>
        <speed unitType="metric" units="km/h">10</speed>
        <direction windDirFull="Northwest">NW</direction>
        <gust unitType="metric" units="km/h"/>
      </wind>
    </hourlyForecast>
    <hourlyForecast dateTimeUTC="202310190300">
      <condition>Chance of showers</condition>
      <iconCode format="png">12</iconCode>
      <temperature unitType="metric" units="C">7</temperature>
      <lop category="Medium" units="%">40</lop>
      <windChill unitType="metric">4</windChill>
      <humidex unitType="metric"/>
      <wind>
        <speed unitType="metric" units="km/h">5</speed>
        <direction windDirFull="Variable">VR</direction>
        <gust unitType="metric" units="km/h"/>
      </wind>
    </hourlyForecast>
    <hourlyForecast dateTimeUTC="202310190400">
      <condition>Showers</condition>
      <iconCode format="png">12</iconCode>
      <temperature unitType="metric" units="C">6</temperature>
      <lop category="High" units="%">70</lop>
      <wind>
        <speed unitType="metric" units="km/h">5</speed>
        <direction windDirFull="West">W</direction>
        <gust unitType="metric" units="km/h">30</gust>
      </wind>
    </hourlyForecast>
    <hourlyForecast dateTimeUTC="202310200400">
      <condition>Clear</condition>
      <iconCode format="png">30</iconCode>
      <temperature unitType="metric" units="C">3</temperature>
      <lop category="Nil" units="%">0</lop>
    </hourlyForecast>
  </hourlyForecastGroup>
  <yesterdayConditions>
    <temperature unitType="metric" units="C" class="high">14.2</temperature>
    <temperature unitType="metric" units="C" class="low">2.9</temperature>
    <precip unitType="metric" units="mm">Trace</precip>
  </yesterdayConditions>
  <riseSet>
    <disclaimer>The following is provided for informational purposes only.</disclaimer>
    <dateTime name="sunrise" zone="UTC" UTCOffset="0">
      <timeStamp>20231018112300</timeStamp>
    </dateTime>
    <dateTime name="sunrise" zone="EDT" UTCOffset="-4">
      <timeStamp>20231018072300</timeStamp>
    </dateTime>
    <dateTime name="sunset" zone="UTC" UTCOffset="0">
      <timeStamp>20231018221000</timeStamp>
    </dateTime>
    <dateTime name="sunset" zone="EDT" UTCOffset="-4">
      <timeStamp>20231018181000</timeStamp>
    </dateTime>
  </riseSet>
  <almanac>
    <temperature class="extremeMax" period="1889-2022" unitType="metric" units="C" year="1947">27.8</temperature>
    <temperature class="extremeMin" period="1889-2022" unitType="metric" units="C" year="1972">-5.6</temperature>
    <temperature class="normalMax" unitType="metric" units="C">13.0</temperature>
    <precipitation class="extremeRainfall" period="1889-2022" unitType="metric" units="mm" year="1995">36.6</precipitation>
    <pop units="%">40</pop>
  </almanac>
</siteData>
"""

Route = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FailingStream(httpx.AsyncByteStream):
    """Response body that breaks off mid-read"""

    async def __aiter__(self):
        yield b"Codes,English Names"
        raise httpx.ReadError("connection reset by peer")


def make_client(routes: Dict[str, Route], seen: List[str]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        seen.append(url)
        route = routes.get(url)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def settings() -> Config:
    return Config(
        _env_file=None,
        lang="e",
        directory_url=DIRECTORY_URL,
        bulletin_url_template=BULLETIN_TEMPLATE,
    )


@pytest.fixture
def seen() -> List[str]:
    return []
