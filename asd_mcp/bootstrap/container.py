from __future__ import annotations

from dataclasses import dataclass

from asd_mcp.app.dispatcher import McpDispatcher
from asd_mcp.app.profiles.alps_service import AlpsService
from asd_mcp.app.profiles.base import ProfileAdapter
from asd_mcp.app.settings import Settings
from asd_mcp.app.tools.defaults import build_default_tool_registry
from asd_mcp.app.tools.registry import ToolRegistry


@dataclass(slots=True)
class RuntimeComponents:
    settings: Settings
    adapter: ProfileAdapter
    tool_registry: ToolRegistry
    dispatcher: McpDispatcher


def build_runtime_components(settings: Settings, *, adapter: ProfileAdapter | None = None) -> RuntimeComponents:
    profile_adapter = adapter if adapter is not None else AlpsService()
    tool_registry = build_default_tool_registry(
        adapter=profile_adapter,
        workspace_root=settings.workspace_root,
    )
    dispatcher = McpDispatcher(
        registry=tool_registry,
        server_name=settings.server_name,
        server_version=settings.server_version,
    )
    return RuntimeComponents(
        settings=settings,
        adapter=profile_adapter,
        tool_registry=tool_registry,
        dispatcher=dispatcher,
    )
