from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from dabba_mcp.application.router_service import RouterService


def register_resources(mcp: FastMCP, router_svc: RouterService) -> None:
    """Register the read-only protocol resources. Called once during server setup."""

    @mcp.resource("protocol://dabba-mcp/knowledge-base", mime_type="application/json")
    def knowledge_base() -> str:
        """Stations, symbols, colors, sorting time and slang the router knows."""
        kb = router_svc.knowledge_base
        payload = kb.to_dict()
        payload["stats"] = kb.stats()
        return json.dumps(payload, ensure_ascii=False)

    @mcp.resource("protocol://dabba-mcp/slang", mime_type="application/json")
    def slang_phrases() -> str:
        """Slang phrases recognised in operator input."""
        return json.dumps(router_svc.supported_phrases(), ensure_ascii=False)
