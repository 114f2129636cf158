"""기본 ALPS 도구를 등록한 ToolRegistry를 생성하는 팩토리예요."""

from __future__ import annotations

from asd_mcp.app.profiles.base import ProfileAdapter
from asd_mcp.app.tools.alps2dot import Alps2DotTool
from asd_mcp.app.tools.alps_guide import AlpsGuideTool
from asd_mcp.app.tools.registry import ToolRegistry
from asd_mcp.app.tools.validate_alps import ValidateAlpsTool


def build_default_tool_registry(*, adapter: ProfileAdapter, workspace_root: str = ".") -> ToolRegistry:
    """기본 도구가 모두 등록된 `ToolRegistry`를 생성해요.

    Args:
        adapter: 검증/변환/가이드를 실제로 수행하는 프로파일 어댑터예요.
        workspace_root: `file_path` 인자가 상대 경로일 때 기준이 되는 디렉터리예요.

    Returns:
        `validate_alps`, `alps2dot`, `alps_guide` 순서로 등록된 `ToolRegistry` 인스턴스예요.
    """
    registry = ToolRegistry()
    registry.register(ValidateAlpsTool(adapter=adapter, workspace_root=workspace_root))
    registry.register(Alps2DotTool(adapter=adapter, workspace_root=workspace_root))
    registry.register(AlpsGuideTool(adapter=adapter))
    return registry
