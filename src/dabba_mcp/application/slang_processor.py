from __future__ import annotations

import logging
import re

from dabba_mcp.domain.entities import ProcessedInput, SlangTerm
from dabba_mcp.infrastructure.knowledge_base import ProtocolKnowledgeBase

logger = logging.getLogger(__name__)

# Keyed by the lowercased canonical phrase of a slang entry.
_EXPANSIONS = {
    "jhol in the route": "Route complication detected - alternative paths will be calculated",
    "dadar handoff failed": "Primary sorting missed - routing to secondary sort at 1:00 PM",
    "packet chalega": "Delivery confirmed - route proceeding as planned",
    "local pakad": "Use suburban railway for fastest routing",
}

_MIN_NAME_LENGTH = 2


class SlangProcessor:
    """Rewrites colloquial phrases and spoken station names into canonical text.

    Two passes run in order:
    1. Slang: every table entry whose phrase (or one of its alternatives)
       occurs anywhere in the text, case-insensitively, is replaced by its
       meaning. Entries are reported in table order, once each.
    2. Station names: whole-word full names and aliases are replaced by the
       station code ("Vile Parle" -> "VLP"), longest name first.
    """

    def __init__(self, kb: ProtocolKnowledgeBase) -> None:
        self._terms = kb.slang_terms()
        names = {
            name: code
            for name, code in kb.station_names().items()
            if len(name) >= _MIN_NAME_LENGTH
        }
        self._station_names = sorted(names.items(), key=lambda item: -len(item[0]))

    def process(self, text: str) -> ProcessedInput:
        processed, detected, expansions = self._replace_slang(text)
        processed, abbreviations = self._replace_station_names(processed)
        if detected:
            logger.info("Slang detected: %s", ", ".join(t.slang for t in detected))
        return ProcessedInput(
            original_input=text,
            processed_input=processed,
            slang_detected=tuple(detected),
            expansions=tuple(expansions),
            abbreviation_expansions=abbreviations,
        )

    def supported_phrases(self) -> list[str]:
        phrases: list[str] = []
        for term in self._terms:
            phrases.append(term.slang)
            phrases.extend(term.alternatives)
        return phrases

    def _replace_slang(self, text: str) -> tuple[str, list[SlangTerm], list[str]]:
        processed = text
        detected: list[SlangTerm] = []
        expansions: list[str] = []
        for term in self._terms:
            matched = False
            for phrase in (term.slang, *term.alternatives):
                if phrase.lower() not in processed.lower():
                    continue
                matched = True
                processed = re.sub(re.escape(phrase), term.meaning, processed, flags=re.IGNORECASE)
            if matched:
                detected.append(term)
                expansions.append(expansion_for(term))
        return processed, detected, expansions

    def _replace_station_names(self, text: str) -> tuple[str, dict[str, str]]:
        processed = text
        replaced: dict[str, str] = {}
        for name, code in self._station_names:
            if name.upper() == code:
                continue
            pattern = re.compile(rf"\b{re.escape(name)}\b", re.IGNORECASE)
            for match in pattern.findall(processed):
                replaced[match] = code
            processed = pattern.sub(code, processed)
        return processed, replaced


def expansion_for(term: SlangTerm) -> str:
    """Return the operator-facing explanation for a detected slang entry."""
    return _EXPANSIONS.get(term.slang.lower(), f"Mumbai terminology: {term.meaning}")
