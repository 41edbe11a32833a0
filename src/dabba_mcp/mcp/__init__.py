from __future__ import annotations

import httpx
from mcp.server.fastmcp import FastMCP

from dabba_mcp.application.environment_service import EnvironmentService
from dabba_mcp.application.router_service import RouterService
from dabba_mcp.infrastructure.cache import ReadingCache
from dabba_mcp.infrastructure.knowledge_base import load_knowledge_base
from dabba_mcp.infrastructure.rainfall_client import TTL_READING, RainfallClient
from dabba_mcp.infrastructure.settings import Settings
from dabba_mcp.mcp.resources import register_resources
from dabba_mcp.mcp.tools import register_tools


def create_mcp_app(settings: Settings | None = None) -> FastMCP:
    """Create and configure the FastMCP application with all services wired."""
    settings = settings if settings is not None else Settings.from_env()
    kb = load_knowledge_base(settings.protocol_file)
    router_svc = RouterService(kb)

    cache = ReadingCache(default_ttl=TTL_READING)
    http_client = httpx.AsyncClient(timeout=settings.weather_timeout, follow_redirects=True)
    rainfall = RainfallClient(cache=cache, http_client=http_client)
    env_svc = EnvironmentService(settings, rainfall=rainfall)

    mcp = FastMCP("Dabbawala Marker MCP", stateless_http=True)
    register_tools(mcp, router_svc, env_svc)
    register_resources(mcp, router_svc)
    return mcp
