"""메서드 이름으로 요청을 핸들러에 연결하고 응답 봉투를 만들어요.

`handlers`는 메서드 이름 → 핸들러 딕셔너리라서 읽기 루프를 거치지 않고도
라우팅 표를 그대로 검사할 수 있어요. 디스패처는 I/O를 하지 않고
응답 딕셔너리(또는 응답이 없으면 None)만 돌려줘요.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import Any

from asd_mcp.app.mcp_protocol import (
    INTERNAL_ERROR,
    MCP_PROTOCOL_VERSION,
    METHOD_INITIALIZE,
    METHOD_INITIALIZED,
    METHOD_NOT_FOUND,
    METHOD_PING,
    METHOD_PROMPTS_LIST,
    METHOD_RESOURCES_LIST,
    METHOD_TOOLS_CALL,
    METHOD_TOOLS_LIST,
    InitializedNotification,
    InitializeRequest,
    McpRequest,
    McpTool,
    ToolsCallRequest,
    UnrecognizedRequest,
    error_response,
    success_response,
)
from asd_mcp.app.tools.registry import ToolRegistry
from libs.common.logging import get_logger

logger = get_logger("asd_mcp.dispatcher")

Handler = Callable[[Any], Awaitable[Any]]


class McpDispatcher:
    def __init__(
        self,
        *,
        registry: ToolRegistry,
        server_name: str,
        server_version: str,
    ) -> None:
        self._registry = registry
        self._server_name = server_name
        self._server_version = server_version
        # tools/list 결과는 시작 시점에 한 번만 만들고 바꾸지 않아요.
        self._tools: tuple[McpTool, ...] = registry.to_descriptors()
        self._handlers: dict[str, Handler] = {
            METHOD_INITIALIZE: self._initialize,
            METHOD_INITIALIZED: self._initialized,
            METHOD_PING: self._ping,
            METHOD_TOOLS_LIST: self._tools_list,
            METHOD_TOOLS_CALL: self._tools_call,
            METHOD_RESOURCES_LIST: self._resources_list,
            METHOD_PROMPTS_LIST: self._prompts_list,
        }

    @property
    def handlers(self) -> Mapping[str, Handler]:
        return MappingProxyType(self._handlers)

    @property
    def tools(self) -> tuple[McpTool, ...]:
        return self._tools

    async def dispatch(self, request: McpRequest) -> dict[str, Any] | None:
        """요청 하나를 처리해요. id가 없는 알림이면 항상 None을 돌려줘요."""
        request_id = request.request_id
        handler = self._handlers.get(request.method)

        if handler is None or isinstance(request, UnrecognizedRequest):
            if request_id is None:
                logger.debug("unknown_notification_dropped", method=request.method)
                return None
            logger.info("method_not_found", method=request.method, request_id=request_id)
            return error_response(request_id, METHOD_NOT_FOUND, "Method not found")

        if request_id is None and not isinstance(request, InitializedNotification):
            logger.debug("request_without_id_ignored", method=request.method)
            return None

        try:
            result = await handler(request)
        except Exception as exc:
            logger.exception("dispatch_failed", method=request.method, request_id=request_id, error=str(exc))
            if request_id is None:
                return None
            return error_response(request_id, INTERNAL_ERROR, "Internal error")

        if request_id is None:
            return None
        return success_response(request_id, result)

    async def _initialize(self, request: InitializeRequest) -> dict[str, Any]:
        logger.info(
            "client_initialize",
            client_name=request.client_name,
            client_version=request.client_version,
            requested_protocol_version=request.client_protocol_version,
        )
        return {
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "serverInfo": {
                "name": self._server_name,
                "version": self._server_version,
            },
            "capabilities": {
                "tools": {},
            },
        }

    async def _initialized(self, request: InitializedNotification) -> dict[str, Any]:
        # 보통은 id 없는 알림이라 응답이 나가지 않아요.
        # id를 붙여 보낸 클라이언트에게만 빈 결과가 돌아가요.
        logger.info("client_initialized", request_id=request.request_id)
        return {}

    async def _ping(self, request: McpRequest) -> dict[str, Any]:
        del request
        return {}

    async def _tools_list(self, request: McpRequest) -> dict[str, Any]:
        del request
        return {"tools": [tool.to_descriptor() for tool in self._tools]}

    async def _tools_call(self, request: ToolsCallRequest) -> dict[str, Any]:
        logger.info("tool_call", tool=request.name, request_id=request.request_id)
        result = await self._registry.call(request.name, request.arguments)
        return result.to_mcp_result()

    async def _resources_list(self, request: McpRequest) -> dict[str, Any]:
        del request
        return {"resources": []}

    async def _prompts_list(self, request: McpRequest) -> dict[str, Any]:
        del request
        return {"prompts": []}
