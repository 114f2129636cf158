"""도구를 등록하고 조회하는 레지스트리예요."""

from __future__ import annotations

from typing import Any

from asd_mcp.app.mcp_protocol import McpTool
from asd_mcp.app.tools.base import BaseTool, ToolResult
from libs.common.logging import get_logger

logger = get_logger("asd_mcp.tools.registry")


class ToolRegistry:
    """도구를 이름으로 관리하는 중앙 레지스트리예요.

    사용법::

        registry = ToolRegistry()
        registry.register(AlpsGuideTool(adapter=service))

        # tools/list에 실을 디스크립터 목록
        descriptors = registry.to_descriptors()

        # 이름으로 도구 실행
        result = await registry.call("alps_guide", {})
    """

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """도구를 레지스트리에 등록해요. 같은 이름이면 덮어씌워요."""
        self._tools[tool.name] = tool

    def get(self, name: str) -> BaseTool | None:
        """이름으로 도구를 조회해요."""
        return self._tools.get(name)

    def list_names(self) -> list[str]:
        """등록된 모든 도구 이름을 등록 순서대로 반환해요."""
        return list(self._tools.keys())

    def to_descriptors(self) -> tuple[McpTool, ...]:
        """등록된 도구의 `McpTool` 디스크립터를 등록 순서대로 만들어요."""
        return tuple(tool.to_spec() for tool in self._tools.values())

    async def call(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """이름으로 도구를 찾아 실행해요.

        등록되지 않은 도구거나 도구가 예외를 던지면 실패 `ToolResult`를 반환해요.
        예외 메시지는 가공하지 않고 그대로 결과 텍스트가 돼요.
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("unknown_tool", tool=name)
            return ToolResult(ok=False, error=f"Unknown tool: {name}")
        try:
            result = await tool.execute(arguments)
        except Exception as exc:
            logger.exception("tool_call_failed", tool=name, error=str(exc))
            return ToolResult(ok=False, error=str(exc) or exc.__class__.__name__)

        if not result.ok:
            logger.info("tool_call_rejected", tool=name, error=result.error)
        return result

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools
