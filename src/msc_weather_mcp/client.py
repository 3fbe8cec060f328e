from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Type

import httpx

from msc_weather_mcp.config import Config
from msc_weather_mcp.errors import RetrievalError


@asynccontextmanager
async def open_client(settings: Config, client: Optional[httpx.AsyncClient] = None) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the caller's client untouched, or a short-lived one built from settings"""
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(
        timeout=settings.timeout(),
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    ) as owned:
        yield owned


async def download(
    client: httpx.AsyncClient,
    url: str,
    fetch_error: Type[RetrievalError],
    read_error: Type[RetrievalError],
) -> bytes:
    """GET ``url`` and return the full body.

    Connection failures and non-2xx responses raise ``fetch_error``; a body
    that cannot be read to the end raises ``read_error``. The response is
    closed on every path.
    """
    try:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            try:
                return await response.aread()
            except httpx.HTTPError as e:
                raise read_error(f"unable to read response body ({url}): {e}") from e
    except httpx.HTTPError as e:
        raise fetch_error(f"unable to get ({url}): {e}") from e
