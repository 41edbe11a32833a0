from __future__ import annotations

from dabba_mcp.domain.entities import RouteSegment, StationInfo, TimeWindow, TimingConstraints
from dabba_mcp.domain.value_objects import PriorityLevel
from dabba_mcp.infrastructure.time_utils import format_clock, minutes_of_day, parse_clock

DEFAULT_SORTING_TIME = "10:30 AM"

COLLECTION_CUTOFF_MINUTES = 15  # Collection closes this long before sorting
COLLECTION_WINDOW_MINUTES = 90
DISPATCH_LEAD_MINUTES = 45  # Delivery opens this long after sorting

DELIVERY_WINDOW_URGENT = 60
DELIVERY_WINDOW_OUTER_ZONE = 120
DELIVERY_WINDOW_STANDARD = 90
OUTER_ZONE = "Zone 3"

# zone -> (duration minutes, distance km)
_ZONE_TRAVEL: dict[str, tuple[int, int]] = {
    "Zone 1": (15, 5),
    "Zone 2": (30, 15),
    "Zone 3": (45, 25),
}
_DEFAULT_TRAVEL = (30, 15)

# Checked in order against the destination area
_AREA_MODES = [
    ("Western", "Western Railway"),
    ("Central", "Central Railway"),
    ("Harbour", "Harbour Line"),
]
_DEFAULT_MODE = "Local Transport"


def delivery_window_minutes(priority: PriorityLevel, zone: str) -> int:
    """Urgent deliveries get the short window even in the outer zone."""
    if priority == PriorityLevel.URGENT:
        return DELIVERY_WINDOW_URGENT
    if zone == OUTER_ZONE:
        return DELIVERY_WINDOW_OUTER_ZONE
    return DELIVERY_WINDOW_STANDARD


def calculate_timing(
    priority: PriorityLevel,
    zone: str,
    sorting_time: str = DEFAULT_SORTING_TIME,
) -> TimingConstraints:
    """Derive the collection and delivery windows around the hub sorting time.

    The result depends only on the arguments; the current wall-clock time is
    never consulted, so identical markers always get identical windows.
    """
    anchor = minutes_of_day(parse_clock(sorting_time))

    collection_end = anchor - COLLECTION_CUTOFF_MINUTES
    collection_start = collection_end - COLLECTION_WINDOW_MINUTES
    delivery_start = anchor + DISPATCH_LEAD_MINUTES
    delivery_end = delivery_start + delivery_window_minutes(priority, zone)

    return TimingConstraints(
        collection_window=TimeWindow(
            start=format_clock(collection_start), end=format_clock(collection_end)
        ),
        sorting_time=sorting_time,
        delivery_window=TimeWindow(
            start=format_clock(delivery_start), end=format_clock(delivery_end)
        ),
    )


def transport_mode(area: str) -> str:
    for keyword, mode in _AREA_MODES:
        if keyword in area:
            return mode
    return _DEFAULT_MODE


def travel_estimate(zone: str) -> tuple[int, int]:
    """Return (duration minutes, distance km) for a destination zone."""
    return _ZONE_TRAVEL.get(zone, _DEFAULT_TRAVEL)


def station_label(station: StationInfo) -> str:
    return f"{station.full_name} ({station.code})"


def assemble_route(hub: StationInfo, destination: StationInfo) -> tuple[RouteSegment, ...]:
    """Build the hub-to-destination segment list (a single segment)."""
    duration, distance = travel_estimate(destination.zone)
    return (
        RouteSegment(
            from_station=station_label(hub),
            to_station=station_label(destination),
            mode=transport_mode(destination.area),
            duration=duration,
            distance=distance,
        ),
    )
