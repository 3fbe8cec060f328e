"""Named weather backends the host application can choose from."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from msc_weather_mcp.config import Config, config
from msc_weather_mcp.models import WeatherReport


class BackendError(Exception):
    """Raised when a backend cannot be registered or looked up."""


class WeatherBackend(ABC):
    """A source of weather reports for a location string"""

    @abstractmethod
    async def fetch(self, location: str, num_days: int) -> WeatherReport:
        """Return a report covering at most ``num_days`` of forecast."""


class BackendRegistry:
    """Explicit name -> backend map, built once at startup and passed around"""

    def __init__(self) -> None:
        self._backends: Dict[str, WeatherBackend] = {}

    def register(self, name: str, backend: WeatherBackend) -> None:
        if name in self._backends:
            raise BackendError(f"Backend {name!r} is already registered")
        self._backends[name] = backend

    def get(self, name: str) -> WeatherBackend:
        try:
            return self._backends[name]
        except KeyError:
            raise BackendError(f"Unknown backend {name!r}; available: {', '.join(self.names()) or 'none'}") from None

    def names(self) -> List[str]:
        return sorted(self._backends)

    def __contains__(self, name: object) -> bool:
        return name in self._backends


def build_registry(settings: Optional[Config] = None) -> BackendRegistry:
    """Registry holding every backend shipped with this package"""
    from msc_weather_mcp.weather import WeatherService

    registry = BackendRegistry()
    registry.register(WeatherService.name, WeatherService(settings or config))
    return registry
