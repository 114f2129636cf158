from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2024-11-05"

INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603

METHOD_INITIALIZE = "initialize"
METHOD_INITIALIZED = "notifications/initialized"
METHOD_PING = "ping"
METHOD_TOOLS_LIST = "tools/list"
METHOD_TOOLS_CALL = "tools/call"
METHOD_RESOURCES_LIST = "resources/list"
METHOD_PROMPTS_LIST = "prompts/list"

KEEPALIVE_ID_PREFIX = "server-ping-"

RequestId = Union[str, int, float]


@dataclass(slots=True, frozen=True)
class McpTool:
    name: str
    description: str
    input_schema: dict[str, Any]

    def to_descriptor(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


# ── 수신 요청 variant ────────────────────────────────────────────────────────
# 메서드마다 하나씩 두고, 나머지 메서드는 전부 UnrecognizedRequest로 떨어져요.


@dataclass(slots=True)
class InitializeRequest:
    request_id: RequestId | None
    client_protocol_version: str | None = None
    client_name: str | None = None
    client_version: str | None = None
    method: str = METHOD_INITIALIZE


@dataclass(slots=True)
class InitializedNotification:
    request_id: RequestId | None
    method: str = METHOD_INITIALIZED


@dataclass(slots=True)
class PingRequest:
    request_id: RequestId | None
    method: str = METHOD_PING


@dataclass(slots=True)
class ToolsListRequest:
    request_id: RequestId | None
    method: str = METHOD_TOOLS_LIST


@dataclass(slots=True)
class ToolsCallRequest:
    request_id: RequestId | None
    name: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)
    method: str = METHOD_TOOLS_CALL


@dataclass(slots=True)
class ResourcesListRequest:
    request_id: RequestId | None
    method: str = METHOD_RESOURCES_LIST


@dataclass(slots=True)
class PromptsListRequest:
    request_id: RequestId | None
    method: str = METHOD_PROMPTS_LIST


@dataclass(slots=True)
class UnrecognizedRequest:
    request_id: RequestId | None
    method: str
    params: dict[str, Any] = field(default_factory=dict)


McpRequest = Union[
    InitializeRequest,
    InitializedNotification,
    PingRequest,
    ToolsListRequest,
    ToolsCallRequest,
    ResourcesListRequest,
    PromptsListRequest,
    UnrecognizedRequest,
]


@dataclass(slots=True)
class MalformedMessage:
    """구조가 깨진 입력이에요. `request_id`가 있으면 -32600으로 답해야 해요."""

    request_id: RequestId | None
    reason: str


def success_response(request_id: RequestId | None, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: RequestId | None, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def invalid_request_response(request_id: RequestId) -> dict[str, Any]:
    # 기존 클라이언트가 기대하는 키 순서(jsonrpc, error, id)를 그대로 유지해요.
    return {
        "jsonrpc": JSONRPC_VERSION,
        "error": {"code": INVALID_REQUEST, "message": "Invalid Request"},
        "id": request_id,
    }


def keepalive_ping(counter: int) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": METHOD_PING,
        "id": f"{KEEPALIVE_ID_PREFIX}{counter}",
    }
