from __future__ import annotations

from typing import Any

from asd_mcp.app.profiles.base import ProfileAdapter
from asd_mcp.app.tools.base import BaseTool, ToolResult


class AlpsGuideTool(BaseTool):
    """인자 없이 ALPS 작성 가이드를 돌려주는 도구예요."""

    def __init__(self, *, adapter: ProfileAdapter) -> None:
        self._adapter = adapter

    @property
    def name(self) -> str:
        return "alps_guide"

    @property
    def description(self) -> str:
        return "Get ALPS best practices and reference guide"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {},
            "required": [],
        }

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        del arguments
        return ToolResult(ok=True, output=self._adapter.guide())
