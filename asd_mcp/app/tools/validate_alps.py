"""ALPS 프로파일을 검증하는 도구예요."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from asd_mcp.app.profiles.base import ProfileAdapter
from asd_mcp.app.tools.base import BaseTool, ToolResult
from asd_mcp.app.tools.profile_source import PROFILE_SOURCE_PROPERTIES, resolve_profile_content


class ValidateAlpsTool(BaseTool):
    """프로파일이 올바른지 확인하고 디스크립터/링크 수를 알려줘요."""

    def __init__(self, *, adapter: ProfileAdapter, workspace_root: str = ".") -> None:
        self._adapter = adapter
        self._workspace_root = Path(workspace_root).resolve()

    @property
    def name(self) -> str:
        return "validate_alps"

    @property
    def description(self) -> str:
        return "Validate ALPS profile and check for errors"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": dict(PROFILE_SOURCE_PROPERTIES),
            "anyOf": [{"required": ["alps_content"]}, {"required": ["file_path"]}],
        }

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        content, error = resolve_profile_content(arguments, workspace_root=self._workspace_root)
        if content is None:
            return ToolResult(ok=False, error=error or "")

        outcome = self._adapter.validate(content)
        if not outcome.valid:
            return ToolResult(ok=False, error=outcome.message)

        return ToolResult(
            ok=True,
            output=f"Valid ALPS profile\nDescriptors: {outcome.descriptors}\nLinks: {outcome.links}",
            metadata={"descriptors": outcome.descriptors, "links": outcome.links},
        )
