from __future__ import annotations

import dataclasses
import json
import logging
from datetime import datetime
from typing import Any

import httpx
from mcp import types
from mcp.server.fastmcp import FastMCP

from dabba_mcp.application import complication_service
from dabba_mcp.application.environment_service import EnvironmentService
from dabba_mcp.application.router_service import RouterService
from dabba_mcp.domain.entities import ParsedMarker, RoutingPath, TimingConstraints
from dabba_mcp.domain.exceptions import ApiError, InvalidStateError, KnowledgeBaseError
from dabba_mcp.infrastructure.time_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

_RESULT_URI = "mcp://dabba-mcp/result"


def _as_resource(json_str: str) -> list[types.EmbeddedResource]:
    """Wrap a JSON string as an embedded resource so the LLM does not narrate it."""
    return [
        types.EmbeddedResource(
            type="resource",
            resource=types.TextResourceContents(
                uri=_RESULT_URI,  # type: ignore[arg-type]
                mimeType="application/json",
                text=json_str,
            ),
        )
    ]


def _error_json(message: str, **extra: Any) -> str:
    return json.dumps({"error": message, **extra}, default=str, ensure_ascii=False)


def _to_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, default=str, ensure_ascii=False)


def _handle_exception(exc: Exception) -> list[types.EmbeddedResource]:
    if isinstance(exc, (InvalidStateError, KnowledgeBaseError)):
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, ApiError):
        if exc.status_code >= 500:
            return _as_resource(
                _error_json(f"Weather API error ({exc.status_code}). Please try again later.")
            )
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, httpx.TimeoutException):
        return _as_resource(_error_json("Request timed out. Please try again."))
    if isinstance(exc, ValueError):
        return _as_resource(_error_json(str(exc)))
    logger.exception("Unexpected error in MCP tool: %s", exc)
    return _as_resource(_error_json("An unexpected error occurred."))


def _parse_datetime_str(datetime_str: str | None) -> datetime | None:
    if datetime_str is None:
        return None
    try:
        return parse_iso_datetime(datetime_str)
    except ValueError:
        raise ValueError("Invalid datetime format, expected YYYY-MM-DDTHH:MM:SS")


def marker_to_dict(parsed: ParsedMarker) -> dict[str, Any]:
    data = dataclasses.asdict(parsed)
    data["isValid"] = parsed.is_valid
    return data


def path_to_dict(path: RoutingPath) -> dict[str, Any]:
    data = dataclasses.asdict(path)
    data["collectionTime"] = path.collection_time
    data["deliveryTime"] = path.delivery_time
    return data


def register_tools(
    mcp: FastMCP, router_svc: RouterService, env_svc: EnvironmentService
) -> None:
    """Bind all @mcp.tool decorators. Called once during server setup."""

    @mcp.tool()
    async def decode_marker(marker: str) -> list[types.EmbeddedResource]:
        """Decode a dabba marker such as "Red Triangle - VLP - 4".

        Slang and full station names are normalised first. Every invalid
        component is reported with suggestions.

        Args:
            marker: Marker text in "Color Symbol - Station - Sequence" form
                    (sequence optional).
        """
        try:
            if not marker.strip():
                return _as_resource(_error_json("Marker cannot be empty"))
            processed = router_svc.preprocess(marker)
            parsed = router_svc.decode(marker, processed)
            result = {
                "marker": marker_to_dict(parsed),
                "isValid": parsed.is_valid,
                "slang": dataclasses.asdict(processed),
            }
            return _as_resource(_to_json(result))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def route_marker(
        marker: str,
        current_time: str | None = None,
        monsoon_mode: bool | None = None,
        rainfall_kurla: float | None = None,
        rainfall_parel: float | None = None,
    ) -> list[types.EmbeddedResource]:
        """Generate the scored delivery route for a marker.

        Args:
            marker: Marker text, e.g. "Blue Circle - AND - 12".
            current_time: Scoring time as ISO 8601 in Asia/Kolkata, e.g.
                          "2026-07-14T10:45:00". Defaults to now when omitted.
            monsoon_mode: Force monsoon conditions on or off. Uses the server
                          setting when omitted.
            rainfall_kurla: Rainfall at the Kurla gauge in mm.
            rainfall_parel: Rainfall at the Parel gauge in mm.
        """
        try:
            if not marker.strip():
                return _as_resource(_error_json("Marker cannot be empty"))
            at = _parse_datetime_str(current_time)

            parsed = router_svc.decode(marker)
            if not parsed.is_valid:
                return _as_resource(
                    _error_json(
                        "Cannot generate routing path for invalid marker",
                        errors=[dataclasses.asdict(e) for e in parsed.errors],
                    )
                )

            path = router_svc.build_path(parsed)
            environment = await env_svc.snapshot(
                path,
                at=at,
                monsoon_mode=monsoon_mode,
                rainfall_kurla=rainfall_kurla,
                rainfall_parel=rainfall_parel,
            )
            scored = router_svc.score_route(path, environment)
            result = {
                "route": path_to_dict(scored),
                "timing": dataclasses.asdict(
                    TimingConstraints(
                        collection_window=path.collection_window,
                        sorting_time=path.sorting_time,
                        delivery_window=path.delivery_window,
                    )
                ),
                "environment": dataclasses.asdict(environment),
            }
            return _as_resource(_to_json(result))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def process_slang(text: str) -> list[types.EmbeddedResource]:
        """Expand dabbawala slang and full station names in operator text.

        Args:
            text: Free operator text, e.g. "Jhol in the route near Andheri".
        """
        try:
            if not text.strip():
                return _as_resource(_error_json("Text cannot be empty"))
            processed = router_svc.preprocess(text)
            return _as_resource(_to_json(dataclasses.asdict(processed)))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def report_complication(
        marker: str, situation: str
    ) -> list[types.EmbeddedResource]:
        """Assess a reported complication and plan a backup route.

        Args:
            marker: Marker of the affected packet, e.g. "Red Triangle - VLP - 4".
            situation: Operator report, e.g. "Jhol in the route" or
                       "Dadar handoff failed".
        """
        try:
            if not marker.strip():
                return _as_resource(_error_json("Marker cannot be empty"))
            if not situation.strip():
                return _as_resource(_error_json("Situation cannot be empty"))

            kind = complication_service.classify(situation)
            if kind is None:
                return _as_resource(
                    _error_json(
                        "No known complication in situation text",
                        supportedPhrases=router_svc.supported_phrases(),
                    )
                )

            parsed = router_svc.decode(marker)
            path = router_svc.build_path(parsed)
            complication = complication_service.handle(path, kind)
            backup = complication_service.backup_route(path, complication)
            result = {
                "complication": dataclasses.asdict(complication),
                "originalRoute": path_to_dict(path),
                "backupRoute": path_to_dict(backup),
            }
            return _as_resource(_to_json(result))
        except Exception as exc:
            return _handle_exception(exc)
