from __future__ import annotations

from typing import Any

import httpx

from dabba_mcp.domain.entities import Coordinates
from dabba_mcp.domain.exceptions import ApiError
from dabba_mcp.infrastructure.cache import ReadingCache

BASE_URL = "https://api.open-meteo.com/v1/forecast"
TTL_READING = 600  # seconds

# Rain gauges the confidence model reads from
KURLA = Coordinates(lat=19.0728, lng=72.8826)
PAREL = Coordinates(lat=18.9950, lng=72.8370)

USER_AGENT = "dabba-mcp/1.0 (+https://open-meteo.com)"


class RainfallClient:
    """Fetches current precipitation (mm) from Open-Meteo.

    A single httpx.AsyncClient instance is shared for the process lifetime.
    """

    def __init__(self, cache: ReadingCache, http_client: httpx.AsyncClient) -> None:
        self._cache = cache
        self._http = http_client

    async def current_rainfall(self, gauge: str, at: Coordinates) -> float:
        """GET /v1/forecast?current=precipitation, cached per gauge for 600 s."""
        cached = self._cache.get(gauge)
        if cached is not None:
            return cached

        params: dict[str, Any] = {
            "latitude": at.lat,
            "longitude": at.lng,
            "current": "precipitation",
            "timezone": "Asia/Kolkata",
        }
        response = await self._http.get(
            BASE_URL, params=params, headers={"User-Agent": USER_AGENT}
        )
        self._raise_for_status(response)
        data: dict[str, Any] = response.json()
        try:
            reading = float(data["current"]["precipitation"])
        except (KeyError, TypeError, ValueError):
            raise ApiError(response.status_code, "Malformed precipitation payload")
        self._cache.set(gauge, reading, ttl=TTL_READING)
        return reading

    async def kurla_and_parel(self) -> tuple[float, float]:
        kurla = await self.current_rainfall("kurla", KURLA)
        parel = await self.current_rainfall("parel", PAREL)
        return kurla, parel

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code >= 400:
            raise ApiError(response.status_code)

    async def close(self) -> None:
        await self._http.aclose()
