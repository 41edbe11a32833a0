from __future__ import annotations

import re

from dabba_mcp.domain.entities import ParsedComponents

FORMAT_HINTS = [
    'Use format: "Color Symbol - Station - Sequence"',
    'Example: "Red Triangle - VLP - 4"',
]

MAX_MARKER_LENGTH = 64

# Shape glyphs written in place of the symbol name
_GLYPHS = {
    "\u25b3": "Triangle",
    "\u2605": "Star",
    "*": "Star",
    "\u25cb": "Circle",
    "\u25a1": "Square",
    "\u25c7": "Diamond",
}

# Tried in order; the first match wins.
_PATTERNS = [
    # "Red Triangle VLP 4"
    re.compile(r"^(\w+)\s+(\w+)\s+([A-Z]{3})\s+(\d+)$", re.IGNORECASE),
    # "Red Triangle VLP" (sequence defaults to 1)
    re.compile(r"^(\w+)\s+(\w+)\s+([A-Z]{3})$", re.IGNORECASE),
    # Lenient: two- to four-letter codes, stray punctuation between parts
    re.compile(r"^(\w+)[\s\-]*(\w+)[\s\-]*([A-Z]{2,4})[\s\-]*(\d+)?$", re.IGNORECASE),
]


def normalize_marker(text: str) -> str:
    """Collapse separators so "Red-Triangle - VLP_4" reads "Red Triangle VLP 4"."""
    normalized = text.strip()
    for glyph, shape in _GLYPHS.items():
        normalized = normalized.replace(glyph, f" {shape} ")
    normalized = re.sub(r"\s*-\s*", " ", normalized)
    normalized = re.sub(r"[-_]", " ", normalized)
    normalized = re.sub(r"\s+", " ", normalized)
    return normalized.strip()


def extract_components(text: str) -> ParsedComponents | None:
    """Split marker text into color, symbol, station code and sequence.

    Returns None when no pattern matches or the text is longer than
    MAX_MARKER_LENGTH characters. The station code is uppercased;
    color and symbol keep the casing they were typed with.
    """
    if len(text) > MAX_MARKER_LENGTH:
        return None
    normalized = normalize_marker(text)
    for pattern in _PATTERNS:
        match = pattern.match(normalized)
        if match is None:
            continue
        groups = match.groups()
        color, symbol, station_code = groups[0], groups[1], groups[2]
        sequence_str = groups[3] if len(groups) > 3 else None
        return ParsedComponents(
            color=color.strip(),
            symbol=symbol.strip(),
            station_code=station_code.strip().upper(),
            sequence=int(sequence_str) if sequence_str else 1,
        )
    return None
