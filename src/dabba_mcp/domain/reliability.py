from __future__ import annotations

import math
from datetime import datetime

from dabba_mcp.domain.entities import (
    AlternateRoute,
    ComplexityScore,
    Coordinates,
    DegradationFactor,
    EnvironmentalFactors,
    NetworkHop,
    ReliabilityMetrics,
    RoutingPath,
    StationInfo,
    SystemConfidence,
    ThresholdStatus,
)
from dabba_mcp.domain.services import is_line_crossing
from dabba_mcp.domain.value_objects import (
    ComplexityRating,
    DegradationFactorType,
    HopType,
    ReliabilityThreshold,
)

BASELINE_ACCURACY = 99.99999  # 1 error in 16 million

HOP_WEIGHTS: dict[HopType, float] = {
    HopType.BASE_HOP: 0.1,
    HopType.TRANSIT_HOP: 0.2,
    HopType.TRANSFER_HOP: 0.5,
    HopType.FINAL_HOP: 0.1,
}

HIGH_COMPLEXITY_SCORE = 0.9
MEDIUM_COMPLEXITY_SCORE = 0.5

DADAR_PENALTY = 0.0001
PEAK_HOUR_JITTER = 0.001
RAIN_IMPACT_PER_10MM = 2.0

PEAK_START_MINUTES = 10 * 60 + 15  # 10:15 AM
PEAK_END_MINUTES = 11 * 60 + 30  # 11:30 AM, inclusive

OPTIMAL_THRESHOLD = 99.9
CRITICAL_THRESHOLD = 95.0
REROUTE_THRESHOLD = 99.0

DADAR_HUB = StationInfo(
    code="DDR",
    full_name="Dadar",
    area="Central Hub",
    zone="Zone 1",
    coordinates=Coordinates(lat=19.0176, lng=72.8562),
)


# ---------------------------------------------------------------------------
# Complexity
# ---------------------------------------------------------------------------

def detect_network_hops(route: RoutingPath) -> tuple[NetworkHop, ...]:
    """Return the hops of a route in travel order.

    Base, Transit and Final hops are always present; the Transfer hop is
    added only for a Western/Central line crossing at the hub.
    """
    hops = [
        NetworkHop(
            type=HopType.BASE_HOP,
            weight=HOP_WEIGHTS[HopType.BASE_HOP],
            description="Collection to Local Station",
            station=route.origin,
        ),
        NetworkHop(
            type=HopType.TRANSIT_HOP,
            weight=HOP_WEIGHTS[HopType.TRANSIT_HOP],
            description="Local Train Carriage to Sorting Hub",
            station=DADAR_HUB,
        ),
    ]
    if is_line_crossing(route.origin.area, route.destination.area):
        hops.append(
            NetworkHop(
                type=HopType.TRANSFER_HOP,
                weight=HOP_WEIGHTS[HopType.TRANSFER_HOP],
                description="Dadar Interface Cross-line Transfer",
                station=DADAR_HUB,
            )
        )
    hops.append(
        NetworkHop(
            type=HopType.FINAL_HOP,
            weight=HOP_WEIGHTS[HopType.FINAL_HOP],
            description="Sorting Hub to Destination Node",
            station=route.destination,
        )
    )
    return tuple(hops)


def rate_complexity(score: float) -> ComplexityRating:
    if score >= HIGH_COMPLEXITY_SCORE:
        return ComplexityRating.HIGH
    if score >= MEDIUM_COMPLEXITY_SCORE:
        return ComplexityRating.MEDIUM
    return ComplexityRating.LOW


def calculate_complexity_score(route: RoutingPath) -> ComplexityScore:
    """Sum the weights of the route's hops and rate the total.

    math.fsum keeps 0.1 + 0.2 + 0.5 + 0.1 at exactly 0.9 so the HIGH
    boundary is reached.
    """
    hops = detect_network_hops(route)
    score = math.fsum(hop.weight for hop in hops)
    terms = " + ".join(f"{hop.type.value} ({hop.weight:g})" for hop in hops)
    return ComplexityScore(
        score=score,
        rating=rate_complexity(score),
        hops=hops,
        calculation=f"Sum of ({terms}) = {score:g}",
    )


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------

def is_peak_hour(current_time: datetime) -> bool:
    """True between 10:15 and 11:30 inclusive, by the clock of current_time."""
    minutes = current_time.hour * 60 + current_time.minute
    return PEAK_START_MINUTES <= minutes <= PEAK_END_MINUTES


def rain_impact(rainfall_kurla: float, rainfall_parel: float) -> float:
    """2 points per 10 mm at the wetter of the two gauges."""
    return RAIN_IMPACT_PER_10MM * max(rainfall_kurla, rainfall_parel) / 10


def format_confidence_display(confidence: float) -> str:
    """Render confidence with the fifth decimal bracketed: 99.99987 -> "99.9998[7]%"."""
    whole, decimals = f"{confidence:.5f}".split(".")
    return f"{whole}.{decimals[:4]}[{decimals[4]}]%"


def calculate_system_confidence(environment: EnvironmentalFactors) -> SystemConfidence:
    """Subtract every active degradation factor from the baseline accuracy."""
    factors: list[DegradationFactor] = []

    if environment.is_western_to_central_crossing:
        factors.append(
            DegradationFactor(
                type=DegradationFactorType.DADAR_PENALTY,
                impact=DADAR_PENALTY,
                description="Western to Central line crossing penalty",
            )
        )

    if is_peak_hour(environment.current_time):
        factors.append(
            DegradationFactor(
                type=DegradationFactorType.PEAK_HOUR_JITTER,
                impact=PEAK_HOUR_JITTER,
                description="Peak hour packet collision probability",
            )
        )

    if environment.monsoon_mode:
        impact = rain_impact(environment.rainfall_kurla, environment.rainfall_parel)
        if impact > 0:
            wettest = max(environment.rainfall_kurla, environment.rainfall_parel)
            factors.append(
                DegradationFactor(
                    type=DegradationFactorType.RAIN_VARIABLE,
                    impact=impact,
                    description=f"Monsoon impact: {wettest:g}mm rainfall",
                )
            )

    confidence = BASELINE_ACCURACY
    for factor in factors:
        confidence -= factor.impact
    final_confidence = max(confidence, 0.0)

    return SystemConfidence(
        baseline_accuracy=BASELINE_ACCURACY,
        degradation_factors=tuple(factors),
        final_confidence=final_confidence,
        display_format=format_confidence_display(final_confidence),
    )


# ---------------------------------------------------------------------------
# Thresholds and alternates
# ---------------------------------------------------------------------------

def determine_threshold_status(confidence: float) -> ThresholdStatus:
    """Classify confidence. 99.9 and 95.0 both fall in the monitoring band."""
    if confidence > OPTIMAL_THRESHOLD:
        status, color, action = ReliabilityThreshold.OPTIMAL, "#32CD32", False
    elif confidence >= CRITICAL_THRESHOLD:
        status, color, action = ReliabilityThreshold.MONITORING, "#FFD700", False
    else:
        status, color, action = ReliabilityThreshold.CRITICAL, "#FF0000", True
    return ThresholdStatus(
        status=status, message=status.value, color=color, action_required=action
    )


def suggest_alternate_routes(confidence: float) -> tuple[AlternateRoute, ...]:
    alternatives: list[AlternateRoute] = []
    if confidence < REROUTE_THRESHOLD:
        alternatives.append(
            AlternateRoute(
                description="Manual transfer route via Parel Node",
                alternate_node="Parel-Node instead of Dadar",
                expected_improvement=2.5,
                reasoning="Bypass high-traffic Dadar junction during peak hours",
            )
        )
    if confidence < CRITICAL_THRESHOLD:
        alternatives.append(
            AlternateRoute(
                description="Direct delivery bypass (skip sorting)",
                alternate_node="Direct route to destination",
                expected_improvement=5.0,
                reasoning="Emergency protocol - direct delivery without central sorting",
            )
        )
    return tuple(alternatives)


def generate_reliability_metrics(
    route: RoutingPath, environment: EnvironmentalFactors
) -> ReliabilityMetrics:
    complexity = calculate_complexity_score(route)
    confidence = calculate_system_confidence(environment)
    return ReliabilityMetrics(
        system_confidence=confidence,
        hop_count=len(complexity.hops),
        complexity_score=complexity,
        threshold_status=determine_threshold_status(confidence.final_confidence),
        alternate_routes=suggest_alternate_routes(confidence.final_confidence),
    )
