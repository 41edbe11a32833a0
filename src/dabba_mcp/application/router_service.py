from __future__ import annotations

import dataclasses
import logging
from datetime import datetime

from dabba_mcp.application.slang_processor import SlangProcessor
from dabba_mcp.domain.entities import (
    ColorInfo,
    EnvironmentalFactors,
    ParsedComponents,
    ParsedMarker,
    ProcessedInput,
    ReliabilityMetrics,
    RoutingPath,
    StationInfo,
    SymbolInfo,
    TimingConstraints,
    ValidationError,
)
from dabba_mcp.domain.exceptions import (
    FormatError,
    InvalidStateError,
    MarkerValidationError,
    SequenceRangeError,
    UnknownComponentError,
)
from dabba_mcp.domain.marker_format import FORMAT_HINTS, extract_components
from dabba_mcp.domain.reliability import generate_reliability_metrics
from dabba_mcp.domain.services import closest_matches, is_line_crossing
from dabba_mcp.domain.timing import assemble_route, calculate_timing
from dabba_mcp.domain.value_objects import DestinationType, MarkerComponent, PriorityLevel
from dabba_mcp.infrastructure.knowledge_base import MUMBAI_CENTER, ProtocolKnowledgeBase
from dabba_mcp.infrastructure.time_utils import now_mumbai

logger = logging.getLogger(__name__)

SORTING_HUB_NAME = "Dadar"
MIN_SEQUENCE = 1
MAX_SEQUENCE = 999
MONSOON_MONTHS = range(6, 10)  # June to September


def placeholder_color(name: str) -> ColorInfo:
    return ColorInfo(name=name, priority=PriorityLevel.STANDARD, area_type="Unknown", hex_code="#808080")


def placeholder_symbol(shape: str) -> SymbolInfo:
    return SymbolInfo(
        shape=shape,
        destination_type=DestinationType.INDUSTRIAL_ESTATE,
        description="Unknown symbol type",
    )


def placeholder_station(code: str) -> StationInfo:
    return StationInfo(
        code=code,
        full_name="Unknown Station",
        area="Unknown Area",
        zone="Zone 1",
        coordinates=MUMBAI_CENTER,
    )


def default_environment(route: RoutingPath, at: datetime | None = None) -> EnvironmentalFactors:
    """Environment used when the caller supplies none: dry, monsoon by calendar month."""
    current = at if at is not None else now_mumbai()
    return EnvironmentalFactors(
        current_time=current,
        monsoon_mode=current.month in MONSOON_MONTHS,
        rainfall_kurla=0.0,
        rainfall_parel=0.0,
        is_western_to_central_crossing=is_line_crossing(route.origin.area, route.destination.area),
    )


class RouterService:
    """Decodes marker text and turns valid markers into scored routes.

    The knowledge base is injected and only read. reload() swaps in a fully
    built replacement in one assignment, so a call in progress keeps the
    instance it started with.
    """

    def __init__(self, kb: ProtocolKnowledgeBase) -> None:
        self._kb = kb
        self._slang = SlangProcessor(kb)

    @property
    def knowledge_base(self) -> ProtocolKnowledgeBase:
        return self._kb

    def reload(self, kb: ProtocolKnowledgeBase) -> None:
        slang = SlangProcessor(kb)
        self._kb, self._slang = kb, slang
        logger.info("Knowledge base swapped: %s", kb.stats())

    def preprocess(self, text: str) -> ProcessedInput:
        return self._slang.process(text)

    def supported_phrases(self) -> list[str]:
        return self._slang.supported_phrases()

    # -- decode -----------------------------------------------------------

    def decode(self, marker_text: str, processed: ProcessedInput | None = None) -> ParsedMarker:
        """Parse and validate marker text.

        A ProcessedInput already built by preprocess() for the same text can be
        passed in to skip the slang pass.

        Never raises for bad input: every failing component is reported in
        ParsedMarker.errors. A marker that matches no format gets a single
        format error and placeholder components.
        """
        logger.debug("Decoding marker %r", marker_text)
        kb, slang = self._kb, self._slang
        if processed is None:
            processed = slang.process(marker_text)
        components = extract_components(processed.processed_input)

        if components is None:
            logger.info("Marker %r matched no known format", marker_text)
            error = FormatError(
                'Invalid marker format. Expected: "Color Symbol - Station - Sequence"',
                FORMAT_HINTS,
            )
            return ParsedMarker(
                color=placeholder_color("Unknown"),
                symbol=placeholder_symbol("Unknown"),
                station=placeholder_station("UNK"),
                sequence=0,
                errors=(to_validation_error(error),),
            )

        parsed = validate_components(components, kb)
        if parsed.is_valid:
            logger.info(
                "Marker parsed: %s %s at %s",
                parsed.color.name,
                parsed.symbol.shape,
                parsed.station.full_name,
            )
        else:
            logger.info("Marker %r failed validation with %d errors", marker_text, len(parsed.errors))
        return parsed

    # -- route ------------------------------------------------------------

    def calculate_timing(self, parsed: ParsedMarker) -> TimingConstraints:
        return _timing_for(parsed, self._kb)

    def build_path(self, parsed: ParsedMarker) -> RoutingPath:
        """Build the unscored route for a valid marker.

        Raises InvalidStateError for an invalid marker.
        """
        if not parsed.is_valid:
            raise InvalidStateError("Cannot generate routing path for invalid marker")

        kb = self._kb
        hub = kb.hub_station()
        timing = _timing_for(parsed, kb)
        return RoutingPath(
            origin=hub,
            destination=parsed.station,
            destination_type=parsed.symbol.destination_type,
            priority=parsed.color.priority,
            sorting_hub=SORTING_HUB_NAME,
            collection_window=timing.collection_window,
            sorting_time=timing.sorting_time,
            delivery_window=timing.delivery_window,
            route=assemble_route(hub, parsed.station),
        )

    def score_reliability(
        self, path: RoutingPath, environment: EnvironmentalFactors
    ) -> ReliabilityMetrics:
        return generate_reliability_metrics(path, environment)

    def score_route(self, path: RoutingPath, environment: EnvironmentalFactors) -> RoutingPath:
        """Return a copy of path carrying its complexity, confidence and metrics."""
        metrics = self.score_reliability(path, environment)
        scored = dataclasses.replace(
            path,
            complexity_score=metrics.complexity_score,
            system_confidence=metrics.system_confidence,
            reliability_metrics=metrics,
        )
        logger.info(
            "Route %s -> %s -> %s: complexity %s (%g), confidence %s, %s",
            scored.origin.full_name,
            scored.sorting_hub,
            scored.destination.full_name,
            metrics.complexity_score.rating.value,
            metrics.complexity_score.score,
            metrics.system_confidence.display_format,
            metrics.threshold_status.message,
        )
        return scored

    def route(
        self, parsed: ParsedMarker, environment: EnvironmentalFactors | None = None
    ) -> RoutingPath:
        """Generate the scored route for a valid marker.

        Without an explicit environment the route is scored against
        default_environment() for the current Mumbai time.
        Raises InvalidStateError for an invalid marker.
        """
        path = self.build_path(parsed)
        env = environment if environment is not None else default_environment(path)
        return self.score_route(path, env)


# ---------------------------------------------------------------------------
# Component validation
# ---------------------------------------------------------------------------

def _timing_for(parsed: ParsedMarker, kb: ProtocolKnowledgeBase) -> TimingConstraints:
    return calculate_timing(
        parsed.color.priority,
        parsed.station.zone,
        sorting_time=kb.sorting_hub_time(),
    )


def to_validation_error(exc: MarkerValidationError) -> ValidationError:
    return ValidationError(
        component=exc.component,
        message=exc.message,
        suggestions=tuple(exc.suggestions),
    )


def _resolve_color(name: str, kb: ProtocolKnowledgeBase) -> ColorInfo:
    color = kb.color_by_name(name)
    if color is None:
        raise UnknownComponentError(
            MarkerComponent.COLOR, f"Unknown color: {name}", kb.all_color_names()
        )
    return color


def _resolve_symbol(shape: str, kb: ProtocolKnowledgeBase) -> SymbolInfo:
    symbol = kb.symbol_by_shape(shape)
    if symbol is None:
        raise UnknownComponentError(
            MarkerComponent.SYMBOL, f"Unknown symbol: {shape}", kb.all_symbol_shapes()
        )
    return symbol


def _resolve_station(code: str, kb: ProtocolKnowledgeBase) -> StationInfo:
    station = kb.station_by_code(code)
    if station is None:
        raise UnknownComponentError(
            MarkerComponent.STATION,
            f"Unknown station code: {code}",
            closest_matches(code, kb.all_station_codes()),
        )
    return station


def _check_sequence(sequence: int) -> int:
    if not MIN_SEQUENCE <= sequence <= MAX_SEQUENCE:
        raise SequenceRangeError(
            f"Invalid sequence number: {sequence}. Must be between {MIN_SEQUENCE}-{MAX_SEQUENCE}",
            [f"Use a number between {MIN_SEQUENCE} and {MAX_SEQUENCE}"],
        )
    return sequence


def validate_components(components: ParsedComponents, kb: ProtocolKnowledgeBase) -> ParsedMarker:
    """Resolve all four components, collecting every failure.

    Each check runs regardless of the others, so a marker can carry up to
    four errors. Failed components are filled with placeholder records.
    """
    errors: list[ValidationError] = []

    try:
        color = _resolve_color(components.color, kb)
    except MarkerValidationError as exc:
        errors.append(to_validation_error(exc))
        color = placeholder_color(components.color)

    try:
        symbol = _resolve_symbol(components.symbol, kb)
    except MarkerValidationError as exc:
        errors.append(to_validation_error(exc))
        symbol = placeholder_symbol(components.symbol)

    try:
        station = _resolve_station(components.station_code, kb)
    except MarkerValidationError as exc:
        errors.append(to_validation_error(exc))
        station = placeholder_station(components.station_code)

    try:
        _check_sequence(components.sequence)
    except MarkerValidationError as exc:
        errors.append(to_validation_error(exc))

    return ParsedMarker(
        color=color,
        symbol=symbol,
        station=station,
        sequence=components.sequence,
        errors=tuple(errors),
    )
