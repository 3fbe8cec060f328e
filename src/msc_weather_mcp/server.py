import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from msc_weather_mcp.config import config
from msc_weather_mcp.errors import BulletinDecodeError, RetrievalError
from msc_weather_mcp.registry import BackendError, BackendRegistry, build_registry

load_dotenv()

logger = logging.getLogger("msc_weather")


def configure_logging(log_file: str = config.log_file) -> None:
    """Log to both a file and the console"""
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_path),
            logging.StreamHandler(),
        ],
    )


mcp = FastMCP(
    "MSC Weather",
    instructions="Environment Canada citypage weather for a latitude,longitude location",
    dependencies=["httpx", "pydantic", "pydantic-settings", "python-dotenv"],
    port=config.port,
)

# Built once at startup; tools look backends up by name
registry: BackendRegistry = build_registry(config)


def error_payload(error: Exception) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": type(error).__name__,
        "stage": getattr(error, "stage", "backend"),
        "message": str(error),
    }
    if isinstance(error, BulletinDecodeError):
        payload["message"] = error.reason
        payload["url"] = error.url
        payload["body"] = error.body
    return payload


# Tools
@mcp.tool()
async def get_location_weather(location: str, num_days: int = 3, backend: Optional[str] = None) -> Dict[str, Any]:
    """
    Get current conditions and forecast for a location

    Args:
        location: Latitude and longitude as "lat,lon", e.g. "45.4215,-75.6972"
        num_days: Number of forecast days to include
        backend: Weather backend name, defaults to the configured one
    """
    backend_name = backend or config.default_backend
    logger.info(f"Starting weather request for {location} using {backend_name}")

    try:
        report = await registry.get(backend_name).fetch(location, num_days)
    except (RetrievalError, BackendError) as e:
        logger.error(f"Error getting weather for {location}: {e}")
        return error_payload(e)

    logger.info("Weather data retrieved successfully")
    return report.model_dump(mode="json")


@mcp.tool()
async def list_backends() -> List[str]:
    """List the available weather backends"""
    return registry.names()


def main() -> None:
    configure_logging()
    mcp.run()


if __name__ == "__main__":
    main()
