from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from dabba_mcp.domain.value_objects import (
    ComplexityRating,
    ComplicationType,
    DegradationFactorType,
    DestinationType,
    HopType,
    MarkerComponent,
    PriorityLevel,
    ReliabilityThreshold,
    Severity,
)


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class StationInfo:
    """A station on the suburban network, resolved from the knowledge base."""

    code: str  # Three-letter code, e.g. "VLP"
    full_name: str  # e.g. "Vile Parle"
    area: str  # e.g. "Western Suburbs"; drives transport mode and line crossing
    zone: str  # "Zone 1" .. "Zone 3"
    coordinates: Coordinates


@dataclass(frozen=True)
class SymbolInfo:
    shape: str  # Canonical shape name, e.g. "Triangle"
    destination_type: DestinationType
    description: str


@dataclass(frozen=True)
class ColorInfo:
    name: str  # Canonical color name, e.g. "Red"
    priority: PriorityLevel
    area_type: str
    hex_code: str


@dataclass(frozen=True)
class ParsedComponents:
    """The four raw components pulled out of marker text, not yet validated."""

    color: str  # Casing as typed
    symbol: str  # Casing as typed
    station_code: str  # Always uppercase
    sequence: int = 1


@dataclass(frozen=True)
class ValidationError:
    """One failed marker component with ranked suggestions for the user."""

    component: MarkerComponent
    message: str
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedMarker:
    """Outcome of a decode call. Unknown components hold placeholder records."""

    color: ColorInfo
    symbol: SymbolInfo
    station: StationInfo
    sequence: int
    errors: tuple[ValidationError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0


@dataclass(frozen=True)
class TimeWindow:
    start: str  # 12-hour clock, e.g. "9:00 AM"
    end: str


@dataclass(frozen=True)
class TimingConstraints:
    collection_window: TimeWindow
    sorting_time: str
    delivery_window: TimeWindow


@dataclass(frozen=True)
class RouteSegment:
    from_station: str
    to_station: str
    mode: str  # e.g. "Western Railway"
    duration: float  # minutes
    distance: float  # kilometres


@dataclass(frozen=True)
class NetworkHop:
    type: HopType
    weight: float
    description: str
    station: StationInfo


@dataclass(frozen=True)
class ComplexityScore:
    score: float  # Sum of hop weights
    rating: ComplexityRating
    hops: tuple[NetworkHop, ...]
    calculation: str  # Human-readable trace of the summed hops


@dataclass(frozen=True)
class DegradationFactor:
    type: DegradationFactorType
    impact: float  # Percentage points subtracted from the baseline
    description: str
    is_active: bool = True


@dataclass(frozen=True)
class SystemConfidence:
    baseline_accuracy: float
    degradation_factors: tuple[DegradationFactor, ...]
    final_confidence: float
    display_format: str  # e.g. "99.9999[9]%"


@dataclass(frozen=True)
class ThresholdStatus:
    status: ReliabilityThreshold
    message: str
    color: str  # UI color code
    action_required: bool


@dataclass(frozen=True)
class AlternateRoute:
    description: str
    alternate_node: str
    expected_improvement: float  # Confidence points gained
    reasoning: str


@dataclass(frozen=True)
class EnvironmentalFactors:
    """Caller-supplied snapshot of conditions affecting route confidence."""

    current_time: datetime
    monsoon_mode: bool
    rainfall_kurla: float  # mm
    rainfall_parel: float  # mm
    is_western_to_central_crossing: bool


@dataclass(frozen=True)
class ReliabilityMetrics:
    system_confidence: SystemConfidence
    hop_count: int
    complexity_score: ComplexityScore
    threshold_status: ThresholdStatus
    alternate_routes: tuple[AlternateRoute, ...]


@dataclass(frozen=True)
class RoutingPath:
    """A delivery route through the sorting hub.

    Built without reliability data first; the scored copy carries the
    complexity score, confidence and composed metrics.
    """

    origin: StationInfo
    destination: StationInfo
    destination_type: DestinationType
    priority: PriorityLevel
    sorting_hub: str  # Always "Dadar"
    collection_window: TimeWindow
    sorting_time: str
    delivery_window: TimeWindow
    route: tuple[RouteSegment, ...]
    complexity_score: ComplexityScore | None = None
    system_confidence: SystemConfidence | None = None
    reliability_metrics: ReliabilityMetrics | None = None

    @property
    def collection_time(self) -> str:
        return self.collection_window.start

    @property
    def delivery_time(self) -> str:
        return self.delivery_window.start

    @property
    def network_hops(self) -> tuple[NetworkHop, ...]:
        if self.complexity_score is None:
            return ()
        return self.complexity_score.hops


@dataclass(frozen=True)
class SlangTerm:
    """A colloquial phrase and the canonical meaning it is rewritten to."""

    slang: str
    meaning: str
    context: str
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True)
class TimingRule:
    phase: str  # "Collection", "Sorting" or "Delivery"
    standard_time: str
    constraints: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProcessedInput:
    original_input: str
    processed_input: str
    slang_detected: tuple[SlangTerm, ...] = ()
    expansions: tuple[str, ...] = ()
    abbreviation_expansions: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RouteComplication:
    type: ComplicationType
    severity: Severity
    alternatives: tuple[str, ...]
    estimated_delay: int  # minutes
    recommendation: str
