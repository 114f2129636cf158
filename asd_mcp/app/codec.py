"""한 줄의 JSON-RPC 메시지를 해석하고, 응답을 한 줄로 직렬화해요.

`decode_line`의 결과는 둘 중 하나예요:

* `McpRequest` variant: 구조가 올바른 요청/알림이에요.
* `MalformedMessage`: JSON이 아니거나 `jsonrpc`/`method`가 빠진 메시지예요.
  keepalive ping에 대한 호스트의 회신처럼 method 없는 응답 객체도 여기에 속해요.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from asd_mcp.app.mcp_protocol import (
    METHOD_INITIALIZE,
    METHOD_INITIALIZED,
    METHOD_PING,
    METHOD_PROMPTS_LIST,
    METHOD_RESOURCES_LIST,
    METHOD_TOOLS_CALL,
    METHOD_TOOLS_LIST,
    InitializedNotification,
    InitializeRequest,
    MalformedMessage,
    McpRequest,
    PingRequest,
    PromptsListRequest,
    RequestId,
    ResourcesListRequest,
    ToolsCallRequest,
    ToolsListRequest,
    UnrecognizedRequest,
)

DecodedMessage = McpRequest | MalformedMessage


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _build_initialize(request_id: RequestId | None, params: dict[str, Any]) -> McpRequest:
    version_value = params.get("protocolVersion")
    client_info = params.get("clientInfo")
    if not isinstance(client_info, dict):
        client_info = {}
    name_value = client_info.get("name")
    client_version_value = client_info.get("version")
    return InitializeRequest(
        request_id=request_id,
        client_protocol_version=version_value if isinstance(version_value, str) else None,
        client_name=name_value if isinstance(name_value, str) else None,
        client_version=client_version_value if isinstance(client_version_value, str) else None,
    )


def _build_tools_call(request_id: RequestId | None, params: dict[str, Any]) -> McpRequest:
    name_value = params.get("name")
    arguments_value = params.get("arguments")
    return ToolsCallRequest(
        request_id=request_id,
        name=name_value if isinstance(name_value, str) else "",
        arguments=arguments_value if isinstance(arguments_value, dict) else {},
    )


REQUEST_BUILDERS: dict[str, Callable[[RequestId | None, dict[str, Any]], McpRequest]] = {
    METHOD_INITIALIZE: _build_initialize,
    METHOD_INITIALIZED: lambda request_id, _params: InitializedNotification(request_id=request_id),
    METHOD_PING: lambda request_id, _params: PingRequest(request_id=request_id),
    METHOD_TOOLS_LIST: lambda request_id, _params: ToolsListRequest(request_id=request_id),
    METHOD_TOOLS_CALL: _build_tools_call,
    METHOD_RESOURCES_LIST: lambda request_id, _params: ResourcesListRequest(request_id=request_id),
    METHOD_PROMPTS_LIST: lambda request_id, _params: PromptsListRequest(request_id=request_id),
}


def decode_line(line: str) -> DecodedMessage:
    """공백이 제거된 비어있지 않은 한 줄을 해석해요. 어떤 입력이 와도 예외를 던지지 않아요."""
    try:
        payload = json.loads(line, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        # 깊게 중첩된 배열은 RecursionError로 와요.
        return MalformedMessage(request_id=None, reason="parse_error")

    if not isinstance(payload, dict):
        return MalformedMessage(request_id=None, reason="not_an_object")

    request_id = payload.get("id")
    method = payload.get("method")

    if payload.get("jsonrpc") is None:
        return MalformedMessage(request_id=request_id, reason="missing_jsonrpc")
    if not isinstance(method, str):
        return MalformedMessage(request_id=request_id, reason="missing_method")

    params_value = payload.get("params")
    params = params_value if isinstance(params_value, dict) else {}

    builder = REQUEST_BUILDERS.get(method)
    if builder is None:
        return UnrecognizedRequest(request_id=request_id, method=method, params=params)
    return builder(request_id, params)


def encode_message(message: dict[str, Any]) -> bytes:
    """메시지를 개행으로 끝나는 한 줄의 UTF-8 바이트로 직렬화해요."""
    return json.dumps(message, separators=(",", ":"), ensure_ascii=False).encode("utf-8") + b"\n"
