from __future__ import annotations

import dataclasses
import logging

from dabba_mcp.domain.entities import RouteComplication, RouteSegment, RoutingPath, TimeWindow
from dabba_mcp.domain.timing import station_label
from dabba_mcp.domain.value_objects import ComplicationType, PriorityLevel, Severity
from dabba_mcp.infrastructure.time_utils import format_clock, minutes_of_day, parse_clock

logger = logging.getLogger(__name__)

SECONDARY_SORT_TIME = "1:00 PM"
SECONDARY_DISPATCH_MINUTES = 45
DADAR_FAILURE_DELAY = 150  # minutes until the secondary sort
COLLECTION_SLIP_MINUTES = 30

_JHOL_PHRASES = ["jhol in the route", "route mein problem", "delivery stuck", "route complication", "path blocked"]
_DADAR_PHRASES = ["dadar handoff failed", "dadar miss ho gaya", "sorting time nikla", "missed sorting", "dadar failed"]

# zone -> (severity, delay minutes, alternatives)
_JHOL_BY_ZONE: dict[str, tuple[Severity, int, list[str]]] = {
    "Zone 1": (Severity.LOW, 10, ["Direct route via local train", "Walking route from nearest station"]),
    "Zone 2": (
        Severity.MEDIUM,
        20,
        ["Alternative railway line", "Bus route backup", "Cycle delivery from hub"],
    ),
    "Zone 3": (
        Severity.HIGH,
        30,
        ["Next available train service", "Road transport backup", "Delay to next delivery window"],
    ),
}
_JHOL_DEFAULT: tuple[Severity, int, list[str]] = (Severity.MEDIUM, 15, [])


def classify(text: str) -> ComplicationType | None:
    """Detect which complication, if any, the operator's text describes."""
    lowered = text.lower()
    if any(phrase in lowered for phrase in _DADAR_PHRASES):
        return ComplicationType.DADAR_FAILED
    if any(phrase in lowered for phrase in _JHOL_PHRASES):
        return ComplicationType.JHOL
    return None


def shift_clock(clock: str, minutes: int) -> str:
    return format_clock(minutes_of_day(parse_clock(clock)) + minutes)


def handle_jhol(path: RoutingPath) -> RouteComplication:
    """Assess an unexpected obstacle on the way to the destination."""
    severity, delay, alternatives = _JHOL_BY_ZONE.get(path.destination.zone, _JHOL_DEFAULT)
    options = list(alternatives)
    if path.priority == PriorityLevel.URGENT:
        options[:0] = ["Immediate cycle courier", "Express delivery via taxi"]

    destination = path.destination.full_name
    if severity == Severity.LOW:
        recommendation = (
            f"Minor route adjustment needed for {destination}. "
            "Continue with standard delivery protocol."
        )
    elif severity == Severity.MEDIUM:
        recommendation = (
            f"Route complication detected for {destination}. "
            f"Consider alternative transport mode. Priority: {path.priority.value}."
        )
    else:
        recommendation = (
            f"Significant route disruption for {destination}. "
            f"Immediate alternative routing required. Priority: {path.priority.value}."
        )

    logger.info("Jhol on route to %s: %s severity, +%d min", destination, severity.value, delay)
    return RouteComplication(
        type=ComplicationType.JHOL,
        severity=severity,
        alternatives=tuple(options),
        estimated_delay=delay,
        recommendation=recommendation,
    )


def handle_dadar_handoff_failed(path: RoutingPath) -> RouteComplication:
    """The packet missed the morning sort; plan around the 1:00 PM secondary sort."""
    options = [
        "Route to 1:00 PM secondary sorting at Dadar",
        "Direct delivery bypass (if urgent)",
        "Hold for next day delivery",
    ]
    if path.priority == PriorityLevel.URGENT:
        options[:0] = ["Immediate courier dispatch", "Emergency direct delivery"]
    if path.destination.zone == "Zone 1":
        options.append("Direct delivery from collection point")

    destination = path.destination.full_name
    if path.priority == PriorityLevel.URGENT:
        recommendation = (
            f"URGENT: Dadar sorting missed for {destination}. "
            "Initiate emergency direct delivery protocol immediately."
        )
    else:
        recommendation = (
            f"Dadar handoff failed for {destination}. Route to 1:00 PM secondary sort "
            f"or consider next-day delivery. Priority: {path.priority.value}."
        )

    logger.warning("Dadar handoff failed for route to %s", destination)
    return RouteComplication(
        type=ComplicationType.DADAR_FAILED,
        severity=Severity.HIGH,
        alternatives=tuple(options),
        estimated_delay=DADAR_FAILURE_DELAY,
        recommendation=recommendation,
    )


def handle(path: RoutingPath, complication: ComplicationType) -> RouteComplication:
    if complication == ComplicationType.DADAR_FAILED:
        return handle_dadar_handoff_failed(path)
    return handle_jhol(path)


def backup_route(path: RoutingPath, complication: RouteComplication) -> RoutingPath:
    """Return a new path adjusted for the complication; path itself is untouched."""
    if complication.type == ComplicationType.JHOL:
        delay = complication.estimated_delay
        share = delay / len(path.route) if path.route else 0
        segments = [
            dataclasses.replace(segment, duration=segment.duration + share)
            for segment in path.route
        ]
        arrival = station_label(path.destination)
        segments.append(
            RouteSegment(
                from_station=segments[-1].to_station if segments else arrival,
                to_station=arrival,
                mode="Alternative Transport",
                duration=delay,
                distance=0,
            )
        )
        return dataclasses.replace(
            path,
            delivery_window=TimeWindow(
                start=shift_clock(path.delivery_window.start, delay),
                end=shift_clock(path.delivery_window.end, delay),
            ),
            route=tuple(segments),
        )

    first = path.route[0] if path.route else None
    delivery_start = shift_clock(SECONDARY_SORT_TIME, SECONDARY_DISPATCH_MINUTES)
    window = minutes_of_day(parse_clock(path.delivery_window.end)) - minutes_of_day(
        parse_clock(path.delivery_window.start)
    )
    return dataclasses.replace(
        path,
        collection_window=TimeWindow(
            start=shift_clock(path.collection_window.start, COLLECTION_SLIP_MINUTES),
            end=shift_clock(path.collection_window.end, COLLECTION_SLIP_MINUTES),
        ),
        sorting_time=f"{SECONDARY_SORT_TIME} (SECONDARY SORT)",
        delivery_window=TimeWindow(
            start=delivery_start, end=shift_clock(delivery_start, window)
        ),
        route=(
            RouteSegment(
                from_station="Collection Point",
                to_station=f"Dadar Secondary Sort ({SECONDARY_SORT_TIME})",
                mode="Local Transport",
                duration=30,
                distance=5,
            ),
            RouteSegment(
                from_station=f"Dadar Secondary Sort ({SECONDARY_SORT_TIME})",
                to_station=station_label(path.destination),
                mode=first.mode if first is not None else "Local Transport",
                duration=45,
                distance=first.distance if first is not None else 15,
            ),
        ),
    )
