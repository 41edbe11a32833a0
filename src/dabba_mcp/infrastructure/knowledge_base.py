from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from dabba_mcp.domain.entities import (
    ColorInfo,
    Coordinates,
    SlangTerm,
    StationInfo,
    SymbolInfo,
    TimingRule,
)
from dabba_mcp.domain.exceptions import KnowledgeBaseError
from dabba_mcp.domain.timing import DEFAULT_SORTING_TIME
from dabba_mcp.domain.value_objects import DestinationType, PriorityLevel

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_FILE = Path(__file__).parent / "data" / "protocol.json"

HUB_CODE = "DDR"
MIN_STATIONS = 15
MIN_SYMBOLS = 5

MUMBAI_CENTER = Coordinates(lat=19.0760, lng=72.8777)


class ProtocolKnowledgeBase:
    """Read-only lookup tables for colors, symbols, stations, timing and slang.

    Built once from protocol data and never modified; a reload builds a new
    instance instead. All maps are exposed as MappingProxyType views.
    """

    def __init__(
        self,
        stations: list[StationInfo],
        station_aliases: Mapping[str, str],
        symbols: list[SymbolInfo],
        symbol_aliases: Mapping[str, str],
        colors: list[ColorInfo],
        timing_rules: list[TimingRule],
        slang_terms: list[SlangTerm],
    ) -> None:
        by_code = {s.code.upper(): s for s in stations}
        for alias, code in station_aliases.items():
            by_code.setdefault(alias.upper(), by_code[code.upper()])
        self._stations: Mapping[str, StationInfo] = MappingProxyType(by_code)
        self._station_codes = tuple(s.code for s in stations)
        self._station_aliases: Mapping[str, str] = MappingProxyType(dict(station_aliases))

        by_shape = {s.shape.lower(): s for s in symbols}
        for alias, shape in symbol_aliases.items():
            by_shape.setdefault(alias.lower(), by_shape[shape.lower()])
        self._symbols: Mapping[str, SymbolInfo] = MappingProxyType(by_shape)
        self._symbol_shapes = tuple(s.shape for s in symbols)

        self._colors: Mapping[str, ColorInfo] = MappingProxyType(
            {c.name.lower(): c for c in colors}
        )
        self._color_names = tuple(c.name for c in colors)

        self._timing_rules = tuple(timing_rules)
        self._slang_terms = tuple(slang_terms)

    # -- lookups ----------------------------------------------------------

    def color_by_name(self, name: str) -> ColorInfo | None:
        """Case-insensitive color lookup."""
        return self._colors.get(name.lower())

    def symbol_by_shape(self, shape: str) -> SymbolInfo | None:
        """Case-insensitive symbol lookup; glyph aliases such as "tri" resolve too."""
        return self._symbols.get(shape.lower())

    def station_by_code(self, code: str) -> StationInfo | None:
        """Lookup by uppercased code or alias ("VP" resolves to Vile Parle)."""
        return self._stations.get(code.upper())

    def all_color_names(self) -> list[str]:
        return list(self._color_names)

    def all_symbol_shapes(self) -> list[str]:
        return list(self._symbol_shapes)

    def all_station_codes(self) -> list[str]:
        """Canonical station codes in protocol order; aliases are excluded."""
        return list(self._station_codes)

    def all_stations(self) -> list[StationInfo]:
        return [self._stations[code.upper()] for code in self._station_codes]

    def station_names(self) -> dict[str, str]:
        """Return every spoken name for a station (full name or alias) -> station code."""
        names = {self._stations[c.upper()].full_name: c for c in self._station_codes}
        names.update(self._station_aliases)
        return names

    def timing_rules(self) -> list[TimingRule]:
        return list(self._timing_rules)

    def slang_terms(self) -> list[SlangTerm]:
        return list(self._slang_terms)

    def sorting_hub_time(self) -> str:
        """Return the hub sorting time without any parenthesised note."""
        rule = next((r for r in self._timing_rules if r.phase == "Sorting"), None)
        full_time = rule.standard_time if rule is not None else DEFAULT_SORTING_TIME
        return re.sub(r"\s*\([^)]*\)", "", full_time).strip() or DEFAULT_SORTING_TIME

    def hub_station(self) -> StationInfo:
        hub = self.station_by_code(HUB_CODE)
        if hub is None:
            raise KnowledgeBaseError(f"Sorting hub station {HUB_CODE} not found in protocol")
        return hub

    # -- health -----------------------------------------------------------

    def validate_completeness(self) -> list[str]:
        """Return a list of problems; empty when the protocol is usable."""
        problems: list[str] = []
        if len(self._station_codes) < MIN_STATIONS:
            problems.append(
                f"Insufficient station codes: {len(self._station_codes)} "
                f"(minimum {MIN_STATIONS} required)"
            )
        if len(self._symbol_shapes) < MIN_SYMBOLS:
            problems.append(
                f"Insufficient symbol definitions: {len(self._symbol_shapes)} "
                f"(minimum {MIN_SYMBOLS} required)"
            )
        if self.station_by_code(HUB_CODE) is None:
            problems.append(f"Missing required Dadar ({HUB_CODE}) sorting hub station")
        if not any(r.phase == "Sorting" for r in self._timing_rules):
            problems.append("Missing sorting time configuration")
        return problems

    def stats(self) -> dict[str, int]:
        return {
            "stations": len(self._station_codes),
            "symbols": len(self._symbol_shapes),
            "colors": len(self._color_names),
            "slang_terms": len(self._slang_terms),
            "timing_rules": len(self._timing_rules),
        }

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view for the MCP resource."""
        return {
            "stations": [
                {
                    "code": s.code,
                    "full_name": s.full_name,
                    "area": s.area,
                    "zone": s.zone,
                    "coordinates": {"lat": s.coordinates.lat, "lng": s.coordinates.lng},
                }
                for s in self.all_stations()
            ],
            "symbols": [
                {
                    "shape": s.shape,
                    "destination_type": s.destination_type.value,
                    "description": s.description,
                }
                for s in (self._symbols[shape.lower()] for shape in self._symbol_shapes)
            ],
            "colors": [
                {
                    "name": c.name,
                    "priority": c.priority.value,
                    "area_type": c.area_type,
                    "hex_code": c.hex_code,
                }
                for c in (self._colors[name.lower()] for name in self._color_names)
            ],
            "sorting_time": self.sorting_hub_time(),
            "slang": [t.slang for t in self._slang_terms],
        }


def build_knowledge_base(data: Mapping[str, Any]) -> ProtocolKnowledgeBase:
    """Build a knowledge base from already-decoded protocol data.

    Raises KnowledgeBaseError when a required key is missing or a value is
    not one of the known destination types / priority levels.
    """
    try:
        stations: list[StationInfo] = []
        station_aliases: dict[str, str] = {}
        for raw in data["stations"]:
            coords = raw.get("coordinates")
            stations.append(
                StationInfo(
                    code=raw["code"].upper(),
                    full_name=raw["full_name"],
                    area=raw["area"],
                    zone=raw["zone"],
                    coordinates=(
                        Coordinates(lat=float(coords["lat"]), lng=float(coords["lng"]))
                        if coords
                        else MUMBAI_CENTER
                    ),
                )
            )
            for alias in raw.get("aliases", []):
                station_aliases[alias] = raw["code"].upper()

        symbols: list[SymbolInfo] = []
        symbol_aliases: dict[str, str] = {}
        for raw in data["symbols"]:
            symbols.append(
                SymbolInfo(
                    shape=raw["shape"],
                    destination_type=DestinationType(raw["destination_type"]),
                    description=raw.get("description", ""),
                )
            )
            for alias in raw.get("aliases", []):
                symbol_aliases[alias] = raw["shape"]

        colors = [
            ColorInfo(
                name=raw["color"],
                priority=PriorityLevel(raw["priority"]),
                area_type=raw.get("area_type", ""),
                hex_code=raw.get("hex_code", ""),
            )
            for raw in data["colors"]
        ]

        timing_rules = [
            TimingRule(
                phase=raw["phase"],
                standard_time=raw["standard_time"],
                constraints=tuple(raw.get("constraints", [])),
            )
            for raw in data.get("timing", [])
        ]

        slang_terms = [
            SlangTerm(
                slang=raw["slang"],
                meaning=raw["meaning"],
                context=raw.get("context", "General usage"),
                alternatives=tuple(raw.get("alternatives", [])),
            )
            for raw in data.get("slang", [])
        ]
    except (KeyError, TypeError, ValueError) as exc:
        raise KnowledgeBaseError(f"Malformed protocol data: {exc}") from exc

    return ProtocolKnowledgeBase(
        stations=stations,
        station_aliases=station_aliases,
        symbols=symbols,
        symbol_aliases=symbol_aliases,
        colors=colors,
        timing_rules=timing_rules,
        slang_terms=slang_terms,
    )


def load_knowledge_base(path: str | Path | None = None) -> ProtocolKnowledgeBase:
    """Read a protocol JSON file (the bundled one by default) into a knowledge base."""
    target = Path(path) if path is not None else DEFAULT_PROTOCOL_FILE
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except OSError as exc:
        raise KnowledgeBaseError(f"Failed to read protocol file at {target}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise KnowledgeBaseError(f"Protocol file at {target} is not valid JSON: {exc}") from exc

    kb = build_knowledge_base(data)
    stats = kb.stats()
    logger.info(
        "Protocol loaded from %s: %d stations, %d symbols, %d colors, %d slang terms",
        target,
        stats["stations"],
        stats["symbols"],
        stats["colors"],
        stats["slang_terms"],
    )
    for problem in kb.validate_completeness():
        logger.warning("Protocol incomplete: %s", problem)
    return kb
