import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="MSC_", extra="ignore")

    # Only the first character is sent upstream; "e" and "f" are the published bulletins
    lang: str = "e"
    directory_url: str = "https://dd.meteo.gc.ca/citypage_weather/docs/site_list_towns_en.csv"
    bulletin_url_template: str = (
        "https://dd.weather.gc.ca/citypage_weather/xml/{station_code}/{region}_{language}.xml"
    )
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    user_agent: str = "MSC_Weather_MCP/0.1"
    signed_hemispheres: bool = False
    default_backend: str = "dd.weather.gc.ca"
    port: int = 8001
    log_file: str = "logs/msc_weather.log"

    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.read_timeout, connect=self.connect_timeout)


config = Config()
