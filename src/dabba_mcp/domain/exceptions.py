from __future__ import annotations

from dabba_mcp.domain.value_objects import MarkerComponent


class DabbaMcpError(Exception):
    """Base exception for all marker router errors."""


class MarkerValidationError(DabbaMcpError):
    """A single marker component failed validation.

    Raised by the per-component checks and caught by the validator, which
    collects every failure into ParsedMarker.errors instead of stopping at the first.
    """

    component: MarkerComponent = MarkerComponent.FORMAT

    def __init__(self, message: str, suggestions: list[str] | None = None) -> None:
        self.message = message
        self.suggestions = list(suggestions or [])
        super().__init__(message)


class FormatError(MarkerValidationError):
    """Raised when no extraction pattern matches the marker text."""

    component = MarkerComponent.FORMAT


class UnknownComponentError(MarkerValidationError):
    """Raised when a color, symbol or station is not in the knowledge base."""

    def __init__(
        self, component: MarkerComponent, message: str, suggestions: list[str] | None = None
    ) -> None:
        self.component = component
        super().__init__(message, suggestions)


class SequenceRangeError(MarkerValidationError):
    """Raised when the sequence number is outside 1-999."""

    component = MarkerComponent.SEQUENCE


class InvalidStateError(DabbaMcpError):
    """Raised when a route is requested for a marker that failed validation."""


class KnowledgeBaseError(DabbaMcpError):
    """Raised when the protocol reference data cannot be loaded or is incomplete."""


class ApiError(DabbaMcpError):
    """Raised when the upstream weather API returns an unexpected HTTP error status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"Upstream API error ({status_code})")
