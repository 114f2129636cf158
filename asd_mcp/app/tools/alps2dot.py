"""ALPS 프로파일을 Graphviz DOT 문서로 바꾸는 도구예요."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from asd_mcp.app.profiles.base import ProfileAdapter
from asd_mcp.app.tools.base import BaseTool, ToolResult
from asd_mcp.app.tools.profile_source import PROFILE_SOURCE_PROPERTIES, resolve_profile_content


class Alps2DotTool(BaseTool):
    def __init__(self, *, adapter: ProfileAdapter, workspace_root: str = ".") -> None:
        self._adapter = adapter
        self._workspace_root = Path(workspace_root).resolve()

    @property
    def name(self) -> str:
        return "alps2dot"

    @property
    def description(self) -> str:
        return "Convert ALPS profile to DOT format for Graphviz"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                **PROFILE_SOURCE_PROPERTIES,
                "use_title": {
                    "type": "boolean",
                    "description": "Use human-readable titles instead of IDs",
                    "default": False,
                },
            },
            "anyOf": [{"required": ["alps_content"]}, {"required": ["file_path"]}],
        }

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        content, error = resolve_profile_content(arguments, workspace_root=self._workspace_root)
        if content is None:
            return ToolResult(ok=False, error=error or "")

        use_title = bool(arguments.get("use_title", False))
        outcome = self._adapter.render(content, use_title)
        if not outcome.success:
            return ToolResult(ok=False, error=outcome.error or "Unknown error")

        document = outcome.document or ""
        return ToolResult(ok=True, output=document, metadata={"use_title": use_title, "bytes": len(document)})
