"""Tests for RouterService: decode, validation and route generation."""
from __future__ import annotations

from datetime import datetime
from unittest.mock import patch

import pytest
from freezegun import freeze_time

from dabba_mcp.application.router_service import (
    RouterService,
    default_environment,
    validate_components,
)
from dabba_mcp.application.slang_processor import SlangProcessor
from dabba_mcp.domain.entities import ParsedComponents
from dabba_mcp.domain.exceptions import InvalidStateError
from dabba_mcp.domain.value_objects import (
    ComplexityRating,
    DestinationType,
    MarkerComponent,
    PriorityLevel,
    ReliabilityThreshold,
)
from dabba_mcp.infrastructure.knowledge_base import ProtocolKnowledgeBase, build_knowledge_base
from dabba_mcp.infrastructure.time_utils import MUMBAI_TZ

from conftest import make_environment

# ---------------------------------------------------------------------------
# decode
# ---------------------------------------------------------------------------

def test_decode_red_triangle_vlp(router: RouterService) -> None:
    parsed = router.decode("Red Triangle - VLP - 4")
    assert parsed.is_valid is True
    assert parsed.errors == ()
    assert parsed.color.name == "Red"
    assert parsed.color.priority == PriorityLevel.URGENT
    assert parsed.symbol.shape == "Triangle"
    assert parsed.symbol.destination_type == DestinationType.RESIDENTIAL_CHAWL
    assert parsed.station.code == "VLP"
    assert parsed.sequence == 4


def test_decode_sequence_defaults_to_one(router: RouterService) -> None:
    parsed = router.decode("Blue Circle - AND")
    assert parsed.is_valid is True
    assert parsed.sequence == 1


@pytest.mark.parametrize(
    "marker",
    ["Red Triangle VLP 4", "red triangle vlp 4", "Green Star - BOR - 999", "Yellow Square KUR"],
)
def test_decode_well_formed_markers_are_valid(router: RouterService, marker: str) -> None:
    parsed = router.decode(marker)
    assert parsed.is_valid is True
    assert parsed.errors == ()


def test_decode_all_four_components_invalid(router: RouterService) -> None:
    parsed = router.decode("Purple Hexagon - XYZ - 0")
    assert parsed.is_valid is False
    assert [e.component for e in parsed.errors] == [
        MarkerComponent.COLOR,
        MarkerComponent.SYMBOL,
        MarkerComponent.STATION,
        MarkerComponent.SEQUENCE,
    ]


def test_decode_unknown_color_only(router: RouterService) -> None:
    parsed = router.decode("Purple Triangle - VLP - 4")
    assert len(parsed.errors) == 1
    error = parsed.errors[0]
    assert error.message == "Unknown color: Purple"
    assert "Red" in error.suggestions
    assert parsed.color.priority == PriorityLevel.STANDARD


def test_decode_station_suggestions_by_edit_distance(router: RouterService) -> None:
    parsed = router.decode("Red Triangle - VLQ - 4")
    error = parsed.errors[0]
    assert error.component == MarkerComponent.STATION
    assert error.suggestions[0] == "VLP"
    assert len(error.suggestions) == 3
    assert parsed.station.full_name == "Unknown Station"


def test_decode_sequence_out_of_range(router: RouterService) -> None:
    parsed = router.decode("Red Triangle - VLP - 1000")
    assert len(parsed.errors) == 1
    assert parsed.errors[0].component == MarkerComponent.SEQUENCE
    assert "Must be between 1-999" in parsed.errors[0].message


def test_decode_unparseable_input(router: RouterService) -> None:
    parsed = router.decode("Red Triangle VLP four")
    assert parsed.is_valid is False
    assert len(parsed.errors) == 1
    error = parsed.errors[0]
    assert error.component == MarkerComponent.FORMAT
    assert error.suggestions == (
        'Use format: "Color Symbol - Station - Sequence"',
        'Example: "Red Triangle - VLP - 4"',
    )
    assert parsed.station.code == "UNK"
    assert parsed.sequence == 0


def test_decode_full_station_name(router: RouterService) -> None:
    parsed = router.decode("Red Triangle - Andheri - 4")
    assert parsed.is_valid is True
    assert parsed.station.code == "AND"


def test_decode_station_alias(router: RouterService) -> None:
    parsed = router.decode("Red Triangle - VP - 4")
    assert parsed.is_valid is True
    assert parsed.station.code == "VLP"


def test_validate_components_collects_every_error(kb: ProtocolKnowledgeBase) -> None:
    parsed = validate_components(
        ParsedComponents(color="Pink", symbol="Oval", station_code="VLP", sequence=5), kb
    )
    assert len(parsed.errors) == 2
    assert parsed.station.code == "VLP"


# ---------------------------------------------------------------------------
# route
# ---------------------------------------------------------------------------

def test_build_path_for_red_triangle(router: RouterService) -> None:
    path = router.build_path(router.decode("Red Triangle - VLP - 4"))
    assert path.origin.code == "DDR"
    assert path.destination.code == "VLP"
    assert path.sorting_hub == "Dadar"
    assert "10:30 AM" in path.sorting_time
    assert path.priority == PriorityLevel.URGENT
    assert path.collection_window.start == "8:45 AM"
    assert path.delivery_window.end == "12:15 PM"
    assert path.route[0].to_station == "Vile Parle (VLP)"
    assert path.complexity_score is None


def test_route_invalid_marker_raises(router: RouterService) -> None:
    with pytest.raises(InvalidStateError):
        router.route(router.decode("Purple Hexagon - XYZ - 0"))


def test_route_scores_against_given_environment(router: RouterService) -> None:
    parsed = router.decode("Red Triangle - VLP - 4")
    scored = router.route(parsed, make_environment(crossing=True))
    assert scored.complexity_score is not None
    assert scored.complexity_score.score == 0.9
    assert scored.complexity_score.rating == ComplexityRating.HIGH
    assert scored.system_confidence is not None
    assert scored.system_confidence.display_format == "99.9998[9]%"
    assert scored.reliability_metrics is not None
    assert scored.reliability_metrics.threshold_status.status == ReliabilityThreshold.OPTIMAL
    assert len(scored.network_hops) == 4


def test_route_heavy_rain_triggers_jugaad(router: RouterService) -> None:
    parsed = router.decode("Green Star - KUR - 2")
    scored = router.route(
        parsed, make_environment(monsoon_mode=True, rainfall_kurla=30.0, rainfall_parel=10.0)
    )
    metrics = scored.reliability_metrics
    assert metrics is not None
    assert metrics.threshold_status.action_required is True
    assert len(metrics.alternate_routes) == 2


@freeze_time("2026-07-14T05:00:00Z")
def test_route_defaults_to_current_mumbai_time(router: RouterService) -> None:
    scored = router.route(router.decode("Orange Square - AND - 3"))
    confidence = scored.system_confidence
    assert confidence is not None
    # 10:30 AM IST in July: peak hour and monsoon, but no rainfall
    assert {f.type.value for f in confidence.degradation_factors} == {
        "Dadar Penalty",
        "Peak Hour Jitter",
    }


def test_default_environment_detects_crossing(router: RouterService) -> None:
    path = router.build_path(router.decode("Red Triangle - VLP - 4"))
    env = default_environment(path, at=datetime(2026, 1, 5, 9, 0, tzinfo=MUMBAI_TZ))
    assert env.is_western_to_central_crossing is True
    assert env.monsoon_mode is False


def test_identical_markers_give_identical_windows(router: RouterService) -> None:
    first = router.build_path(router.decode("Yellow Diamond - GOR - 8"))
    second = router.build_path(router.decode("Yellow Diamond - GOR - 8"))
    assert first == second


# ---------------------------------------------------------------------------
# reload
# ---------------------------------------------------------------------------

def test_reload_swaps_knowledge_base(router: RouterService) -> None:
    replacement = build_knowledge_base(
        {
            "stations": [
                {"code": "DDR", "full_name": "Dadar", "area": "Central Hub", "zone": "Zone 1"},
                {"code": "XYZ", "full_name": "Xylo", "area": "Test", "zone": "Zone 1"},
            ],
            "symbols": [{"shape": "Hexagon", "destination_type": "Industrial Estate"}],
            "colors": [{"color": "Purple", "priority": "Low"}],
        }
    )
    router.reload(replacement)
    assert router.knowledge_base is replacement
    assert router.decode("Purple Hexagon - XYZ - 5").is_valid is True
    assert router.decode("Red Triangle - VLP - 4").is_valid is False


# ---------------------------------------------------------------------------
# input edge cases
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    ("marker", "shape"), [("Red △ - VLP - 4", "Triangle"), ("Red * VLP 4", "Star")]
)
def test_decode_shape_glyphs(router: RouterService, marker: str, shape: str) -> None:
    parsed = router.decode(marker)
    assert parsed.is_valid is True
    assert parsed.symbol.shape == shape


def test_decode_overlong_marker_is_format_error(router: RouterService) -> None:
    parsed = router.decode("a" * 4000 + "!")
    assert [e.component for e in parsed.errors] == [MarkerComponent.FORMAT]


def test_decode_reuses_given_processed_input(router: RouterService) -> None:
    processed = router.preprocess("Red Triangle - Vile Parle - 4")
    with patch.object(SlangProcessor, "process", side_effect=AssertionError("slang ran twice")):
        parsed = router.decode("Red Triangle - Vile Parle - 4", processed)
    assert parsed.is_valid is True
    assert parsed.station.code == "VLP"


def test_build_path_reads_one_knowledge_base(kb: ProtocolKnowledgeBase) -> None:
    """A reload while a path is being built must not mix hub and timing sources."""
    late = build_knowledge_base(
        {
            "stations": [
                {"code": "DDR", "full_name": "Dadar", "area": "Central Hub", "zone": "Zone 1"}
            ],
            "symbols": [],
            "colors": [],
            "timing": [{"phase": "Sorting", "standard_time": "1:00 PM"}],
        }
    )
    router = RouterService(kb)
    parsed = router.decode("Red Triangle - VLP - 4")

    original_hub = kb.hub_station
    with patch.object(kb, "hub_station") as hub_station:
        def swap_then_return_hub():  # type: ignore[no-untyped-def]
            router.reload(late)
            return original_hub()

        hub_station.side_effect = swap_then_return_hub
        path = router.build_path(parsed)

    assert path.sorting_time == "10:30 AM"
    assert path.collection_window.start == "8:45 AM"
