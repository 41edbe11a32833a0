from __future__ import annotations

import logging
from datetime import datetime

import httpx

from dabba_mcp.application.router_service import MONSOON_MONTHS
from dabba_mcp.domain.entities import EnvironmentalFactors, RoutingPath
from dabba_mcp.domain.exceptions import ApiError
from dabba_mcp.domain.services import is_line_crossing
from dabba_mcp.infrastructure.rainfall_client import RainfallClient
from dabba_mcp.infrastructure.settings import MonsoonMode, RainfallSource, Settings
from dabba_mcp.infrastructure.time_utils import now_mumbai

logger = logging.getLogger(__name__)


class EnvironmentService:
    """Assembles the EnvironmentalFactors snapshot a route is scored against."""

    def __init__(self, settings: Settings, rainfall: RainfallClient | None = None) -> None:
        self._settings = settings
        self._rainfall = rainfall

    def is_monsoon(self, at: datetime) -> bool:
        mode = self._settings.monsoon_mode
        if mode == MonsoonMode.ON:
            return True
        if mode == MonsoonMode.OFF:
            return False
        return at.month in MONSOON_MONTHS

    async def snapshot(
        self,
        path: RoutingPath,
        at: datetime | None = None,
        monsoon_mode: bool | None = None,
        rainfall_kurla: float | None = None,
        rainfall_parel: float | None = None,
    ) -> EnvironmentalFactors:
        """Return the environment for path; explicit arguments override settings.

        Rainfall is only looked up when monsoon mode is on and the caller did
        not pass both readings.
        """
        current = at if at is not None else now_mumbai()
        monsoon = monsoon_mode if monsoon_mode is not None else self.is_monsoon(current)

        kurla = rainfall_kurla if rainfall_kurla is not None else self._settings.rainfall_kurla_mm
        parel = rainfall_parel if rainfall_parel is not None else self._settings.rainfall_parel_mm
        needs_lookup = rainfall_kurla is None or rainfall_parel is None
        rainfall = self._live_source()
        if monsoon and needs_lookup and rainfall is not None:
            live_kurla, live_parel = await self._live_readings(rainfall, kurla, parel)
            kurla = rainfall_kurla if rainfall_kurla is not None else live_kurla
            parel = rainfall_parel if rainfall_parel is not None else live_parel

        return EnvironmentalFactors(
            current_time=current,
            monsoon_mode=monsoon,
            rainfall_kurla=kurla,
            rainfall_parel=parel,
            is_western_to_central_crossing=is_line_crossing(
                path.origin.area, path.destination.area
            ),
        )

    def _live_source(self) -> RainfallClient | None:
        if self._settings.rainfall_source != RainfallSource.OPEN_METEO:
            return None
        return self._rainfall

    async def _live_readings(
        self, rainfall: RainfallClient, kurla: float, parel: float
    ) -> tuple[float, float]:
        try:
            return await rainfall.kurla_and_parel()
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Rainfall lookup failed, using configured readings: %s", exc)
            return kurla, parel
