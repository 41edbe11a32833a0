"""Shared pytest fixtures for the Dabbawala Marker MCP Server test suite."""
from __future__ import annotations

from datetime import datetime

import pytest

from dabba_mcp.application.router_service import RouterService
from dabba_mcp.domain.entities import (
    Coordinates,
    EnvironmentalFactors,
    RouteSegment,
    RoutingPath,
    StationInfo,
    TimeWindow,
)
from dabba_mcp.domain.value_objects import DestinationType, PriorityLevel
from dabba_mcp.infrastructure.knowledge_base import ProtocolKnowledgeBase, load_knowledge_base
from dabba_mcp.infrastructure.time_utils import MUMBAI_TZ


@pytest.fixture(scope="session")
def kb() -> ProtocolKnowledgeBase:
    """The bundled protocol, loaded once for the whole run."""
    return load_knowledge_base()


@pytest.fixture
def router(kb: ProtocolKnowledgeBase) -> RouterService:
    return RouterService(kb)


def make_station(
    code: str = "VLP",
    full_name: str = "Vile Parle",
    area: str = "Western Suburbs",
    zone: str = "Zone 2",
) -> StationInfo:
    return StationInfo(
        code=code,
        full_name=full_name,
        area=area,
        zone=zone,
        coordinates=Coordinates(lat=19.0990, lng=72.8442),
    )


def make_path(
    origin: StationInfo | None = None,
    destination: StationInfo | None = None,
    priority: PriorityLevel = PriorityLevel.HIGH,
) -> RoutingPath:
    """Unscored path with one segment between origin and destination."""
    origin = origin or make_station("DDR", "Dadar", "Central Hub", "Zone 1")
    destination = destination or make_station()
    return RoutingPath(
        origin=origin,
        destination=destination,
        destination_type=DestinationType.RESIDENTIAL_CHAWL,
        priority=priority,
        sorting_hub="Dadar",
        collection_window=TimeWindow(start="8:45 AM", end="10:15 AM"),
        sorting_time="10:30 AM",
        delivery_window=TimeWindow(start="11:15 AM", end="12:45 PM"),
        route=(
            RouteSegment(
                from_station=f"{origin.full_name} ({origin.code})",
                to_station=f"{destination.full_name} ({destination.code})",
                mode="Western Railway",
                duration=30,
                distance=15,
            ),
        ),
    )


def make_environment(
    current_time: datetime | None = None,
    monsoon_mode: bool = False,
    rainfall_kurla: float = 0.0,
    rainfall_parel: float = 0.0,
    crossing: bool = False,
) -> EnvironmentalFactors:
    """Off-peak, dry, no line crossing unless told otherwise."""
    return EnvironmentalFactors(
        current_time=current_time or datetime(2026, 2, 24, 14, 0, tzinfo=MUMBAI_TZ),
        monsoon_mode=monsoon_mode,
        rainfall_kurla=rainfall_kurla,
        rainfall_parel=rainfall_parel,
        is_western_to_central_crossing=crossing,
    )
