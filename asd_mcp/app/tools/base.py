"""MCP 도구의 추상 기반 클래스예요.

새 도구를 추가하려면 `BaseTool`을 상속하고 `name`, `description`,
`input_schema`, `execute`를 구현하면 돼요.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any

from asd_mcp.app.mcp_protocol import McpTool


@dataclass(slots=True)
class ToolResult:
    """도구 실행 결과를 담는 컨테이너예요."""

    ok: bool
    """실행 성공 여부예요."""

    output: str = ""
    """성공 시 텍스트 결과예요."""

    error: str = ""
    """실패 시 오류 메시지예요."""

    metadata: dict[str, Any] = field(default_factory=dict)
    """로그에만 남기는 추가 정보 (디스크립터 수 등)예요."""

    def to_mcp_result(self) -> dict[str, Any]:
        """`tools/call` 응답의 `result`로 쓰는 `{content, isError}` 형태로 바꿔요."""
        text = self.output if self.ok else self.error
        return {
            "content": [{"type": "text", "text": text}],
            "isError": not self.ok,
        }


class BaseTool(abc.ABC):
    """모든 도구가 구현해야 하는 추상 클래스예요.

    확장 방법:
        1. `BaseTool`을 상속하는 클래스를 만들어요.
        2. `name`, `description`, `input_schema` 프로퍼티를 구현해요.
        3. `execute` 메서드에 실제 로직을 작성해요.
        4. `ToolRegistry.register()`로 등록하면 끝이에요.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """도구의 고유 이름이에요. 호스트가 `tools/call`에서 사용해요."""

    @property
    @abc.abstractmethod
    def description(self) -> str:
        """도구가 무엇을 하는지 설명하는 문장이에요."""

    @property
    @abc.abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema 형식의 입력 파라미터 정의예요."""

    @abc.abstractmethod
    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        """도구를 실행하고 결과를 반환해요.

        Args:
            arguments: `input_schema`에 정의된 형태의 파라미터 딕셔너리예요.

        Returns:
            실행 결과를 담은 `ToolResult` 인스턴스예요.
        """

    def to_spec(self) -> McpTool:
        """`tools/list`에 실을 불변 디스크립터를 만들어요."""
        return McpTool(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
        )
