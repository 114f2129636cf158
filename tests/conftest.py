from __future__ import annotations

import asyncio
import io
import json
import os
from typing import Any

import pytest
from asd_mcp.app.dispatcher import McpDispatcher
from asd_mcp.app.profiles.alps_service import AlpsService
from asd_mcp.app.profiles.base import ProfileAdapter, RenderOutcome, ValidationOutcome
from asd_mcp.app.stdio_server import ServerContext, StdioServer
from asd_mcp.app.tools.defaults import build_default_tool_registry

BLOG_PROFILE_JSON = json.dumps(
    {
        "$schema": "https://alps-io.github.io/schemas/alps.json",
        "alps": {
            "title": "Blog",
            "doc": {"value": "A simple blog"},
            "descriptor": [
                {"id": "articleTitle", "title": "Article Title"},
                {
                    "id": "Index",
                    "title": "Home",
                    "descriptor": [{"href": "#goBlog"}],
                },
                {
                    "id": "Blog",
                    "title": "Article List",
                    "descriptor": [
                        {"href": "#articleTitle"},
                        {"href": "#goArticle"},
                        {"href": "#doPost"},
                    ],
                },
                {"id": "Article", "title": "Article Detail", "descriptor": [{"href": "#articleTitle"}]},
                {"id": "goBlog", "type": "safe", "rt": "#Blog", "title": "Open blog"},
                {"id": "goArticle", "type": "safe", "rt": "#Article", "title": "Read article"},
                {"id": "doPost", "type": "unsafe", "rt": "#Article", "title": "Publish article"},
            ],
        },
    }
)

BLOG_PROFILE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<alps version="1.0">
  <title>Blog</title>
  <doc>A simple blog</doc>
  <descriptor id="articleTitle" title="Article Title"/>
  <descriptor id="Blog" title="Article List">
    <descriptor href="#articleTitle"/>
    <descriptor href="#goArticle"/>
  </descriptor>
  <descriptor id="Article" title="Article Detail">
    <descriptor href="#articleTitle"/>
  </descriptor>
  <descriptor id="goArticle" type="safe" rt="#Article" title="Read article"/>
</alps>
"""


class RecordingAdapter(ProfileAdapter):
    """호출 기록만 남기는 테스트용 어댑터예요."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def validate(self, content: str) -> ValidationOutcome:
        self.calls.append(("validate", content))
        return ValidationOutcome(valid=True, message="ok", descriptors=1, links=0)

    def render(self, content: str, use_title: bool = False) -> RenderOutcome:
        self.calls.append(("render", (content, use_title)))
        return RenderOutcome(success=True, document="digraph {}\n")

    def guide(self) -> str:
        self.calls.append(("guide", None))
        return "guide"


@pytest.fixture
def alps_service() -> AlpsService:
    return AlpsService()


@pytest.fixture
def dispatcher(alps_service: AlpsService) -> McpDispatcher:
    """실제 ALPS 어댑터에 연결된 디스패처예요."""
    registry = build_default_tool_registry(adapter=alps_service)
    return McpDispatcher(registry=registry, server_name="asd-cli", server_version="1.0.0")


@pytest.fixture
def recording_adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def recording_dispatcher(recording_adapter: RecordingAdapter) -> McpDispatcher:
    registry = build_default_tool_registry(adapter=recording_adapter)
    return McpDispatcher(registry=registry, server_name="asd-cli", server_version="1.0.0")


async def run_stdio_session(
    dispatcher: McpDispatcher,
    lines: list[str],
    *,
    keepalive_interval_seconds: float = 30.0,
) -> list[dict[str, Any]]:
    """서버가 읽는 동안 다른 스레드에서 줄을 모두 쓰고 닫아요. EOF로 끝날 때까지의 출력을 돌려줘요.

    쓰기를 서버와 나란히 돌려서 파이프 버퍼보다 큰 입력도 막히지 않아요.
    """
    read_fd, write_fd = os.pipe()
    output = io.BytesIO()
    server = StdioServer(
        context=ServerContext(input_fd=read_fd, output=output),
        dispatcher=dispatcher,
        keepalive_interval_seconds=keepalive_interval_seconds,
    )
    payload = "".join(f"{line}\n" for line in lines).encode("utf-8")
    writer = asyncio.create_task(asyncio.to_thread(feed_pipe, write_fd, payload))
    try:
        await asyncio.wait_for(server.serve(), timeout=5.0)
        await asyncio.wait_for(writer, timeout=5.0)
    finally:
        os.close(read_fd)
    return parse_output(output.getvalue())


def feed_pipe(write_fd: int, payload: bytes) -> None:
    """blocking 쓰기로 전부 보낸 뒤 쓰기 끝을 닫아요."""
    with os.fdopen(write_fd, "wb") as stream:
        stream.write(payload)


def parse_output(raw: bytes) -> list[dict[str, Any]]:
    return [json.loads(line) for line in raw.decode("utf-8").splitlines()]
