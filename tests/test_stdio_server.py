from __future__ import annotations

import asyncio
import io
import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
from asd_mcp.app.dispatcher import McpDispatcher
from asd_mcp.app.mcp_protocol import MCP_PROTOCOL_VERSION
from asd_mcp.app.profiles.guide import ALPS_GUIDE
from asd_mcp.app.stdio_server import ServerContext, StdioServer
from libs.common.errors import TransportError

from tests.conftest import BLOG_PROFILE_JSON, parse_output, run_stdio_session


@pytest.mark.asyncio
async def test_initialize_round_trip(dispatcher: McpDispatcher) -> None:
    output = await run_stdio_session(dispatcher, ['{"jsonrpc":"2.0","id":1,"method":"initialize"}'])
    assert len(output) == 1
    assert output[0]["id"] == 1
    assert output[0]["result"]["protocolVersion"] == MCP_PROTOCOL_VERSION


@pytest.mark.asyncio
async def test_guide_tool_call(dispatcher: McpDispatcher) -> None:
    line = '{"jsonrpc":"2.0","id":2,"method":"tools/call","params":{"name":"alps_guide","arguments":{}}}'
    output = await run_stdio_session(dispatcher, [line])
    assert len(output) == 1
    assert output[0]["id"] == 2
    assert output[0]["result"]["isError"] is False
    assert output[0]["result"]["content"][0]["text"] == ALPS_GUIDE


@pytest.mark.asyncio
async def test_garbage_line_is_silent(dispatcher: McpDispatcher) -> None:
    assert await run_stdio_session(dispatcher, ["not json at all"]) == []


@pytest.mark.asyncio
async def test_message_without_method_gets_invalid_request(dispatcher: McpDispatcher) -> None:
    read_fd, write_fd = os.pipe()
    output = io.BytesIO()
    server = StdioServer(context=ServerContext(input_fd=read_fd, output=output), dispatcher=dispatcher)
    try:
        os.write(write_fd, b'{"id":5}\n')
        os.close(write_fd)
        await asyncio.wait_for(server.serve(), timeout=5.0)
    finally:
        os.close(read_fd)

    assert output.getvalue() == b'{"jsonrpc":"2.0","error":{"code":-32600,"message":"Invalid Request"},"id":5}\n'


@pytest.mark.asyncio
async def test_initialized_notification_is_silent(dispatcher: McpDispatcher) -> None:
    assert await run_stdio_session(dispatcher, ['{"jsonrpc":"2.0","method":"notifications/initialized"}']) == []


@pytest.mark.asyncio
async def test_responses_follow_input_order(dispatcher: McpDispatcher) -> None:
    lines = [
        '{"jsonrpc":"2.0","id":1,"method":"initialize","params":{"protocolVersion":"2024-11-05"}}',
        '{"jsonrpc":"2.0","method":"notifications/initialized"}',
        "",
        "   ",
        '{"jsonrpc":"2.0","id":2,"method":"tools/list"}',
        json.dumps(
            {
                "jsonrpc": "2.0",
                "id": 3,
                "method": "tools/call",
                "params": {"name": "validate_alps", "arguments": {"alps_content": BLOG_PROFILE_JSON}},
            }
        ),
        '{"jsonrpc":"2.0","id":4,"method":"resources/templates/list"}',
        '{"jsonrpc":"2.0","id":5,"method":"ping"}',
    ]
    output = await run_stdio_session(dispatcher, lines)

    assert [message["id"] for message in output] == [1, 2, 3, 4, 5]
    assert output[2]["result"]["content"][0]["text"] == "Valid ALPS profile\nDescriptors: 7\nLinks: 3"
    assert output[3]["error"] == {"code": -32601, "message": "Method not found"}
    assert output[4]["result"] == {}


@pytest.mark.asyncio
async def test_final_line_without_newline_is_processed(dispatcher: McpDispatcher) -> None:
    read_fd, write_fd = os.pipe()
    output = io.BytesIO()
    server = StdioServer(
        context=ServerContext(input_fd=read_fd, output=output),
        dispatcher=dispatcher,
        read_chunk_bytes=7,
    )
    try:
        os.write(write_fd, b'{"jsonrpc":"2.0","id":1,"method":"ping"}\n{"jsonrpc":"2.0","id":2,"method":"ping"}')
        os.close(write_fd)
        await asyncio.wait_for(server.serve(), timeout=5.0)
    finally:
        os.close(read_fd)

    assert [message["id"] for message in parse_output(output.getvalue())] == [1, 2]


@pytest.mark.asyncio
async def test_idle_input_sends_consecutive_keepalive_pings(dispatcher: McpDispatcher) -> None:
    read_fd, write_fd = os.pipe()
    output = io.BytesIO()
    server = StdioServer(
        context=ServerContext(input_fd=read_fd, output=output),
        dispatcher=dispatcher,
        keepalive_interval_seconds=0.05,
    )
    task = asyncio.create_task(server.serve())
    try:
        await asyncio.sleep(0.3)
        os.write(write_fd, b'{"jsonrpc":"2.0","id":"last","method":"ping"}\n')
        os.close(write_fd)
        await asyncio.wait_for(task, timeout=5.0)
    finally:
        os.close(read_fd)

    messages = parse_output(output.getvalue())
    pings = [message for message in messages if message.get("method") == "ping"]
    assert len(pings) >= 2
    assert [ping["id"] for ping in pings] == [f"server-ping-{index}" for index in range(1, len(pings) + 1)]
    assert all(set(ping) == {"jsonrpc", "method", "id"} for ping in pings)
    assert messages[-1] == {"jsonrpc": "2.0", "id": "last", "result": {}}


@pytest.mark.asyncio
async def test_reply_to_keepalive_goes_through_normal_path(dispatcher: McpDispatcher) -> None:
    output = io.BytesIO()
    context = ServerContext(input_fd=0, output=output)
    server = StdioServer(context=context, dispatcher=dispatcher)
    ping = context.next_keepalive()

    await server.handle_line(json.dumps({"jsonrpc": "2.0", "id": ping["id"], "result": {}}).encode("utf-8"))
    assert parse_output(output.getvalue()) == [
        {"jsonrpc": "2.0", "error": {"code": -32600, "message": "Invalid Request"}, "id": "server-ping-1"}
    ]


@pytest.mark.asyncio
async def test_deeply_nested_line_does_not_stop_the_loop(dispatcher: McpDispatcher) -> None:
    lines = ["[" * 20_000 + "]" * 20_000, '{"jsonrpc":"2.0","id":1,"method":"ping"}']
    output = await run_stdio_session(dispatcher, lines)
    assert output == [{"jsonrpc": "2.0", "id": 1, "result": {}}]


@pytest.mark.asyncio
async def test_non_standard_constant_id_is_dropped(dispatcher: McpDispatcher) -> None:
    lines = ['{"jsonrpc":"2.0","id":NaN,"method":"ping"}', '{"jsonrpc":"2.0","id":2,"method":"ping"}']
    output = await run_stdio_session(dispatcher, lines)
    assert output == [{"jsonrpc": "2.0", "id": 2, "result": {}}]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "line",
    [
        '{"jsonrpc":"2.0","id":null,"method":"tools/list"}',
        '{"jsonrpc":"2.0","id":null,"method":"bogus"}',
        '{"id":null}',
    ],
)
async def test_null_id_gets_no_output(dispatcher: McpDispatcher, line: str) -> None:
    assert await run_stdio_session(dispatcher, [line]) == []


@pytest.mark.asyncio
async def test_input_larger_than_pipe_buffer(dispatcher: McpDispatcher) -> None:
    lines = [f'{{"jsonrpc":"2.0","id":{index},"method":"ping","params":{{"pad":"{"x" * 64}"}}}}' for index in range(2_000)]
    output = await run_stdio_session(dispatcher, lines)
    assert [message["id"] for message in output] == list(range(2_000))


@pytest.mark.asyncio
async def test_regular_file_input_is_served(dispatcher: McpDispatcher, tmp_path: Path) -> None:
    requests = tmp_path / "requests.jsonl"
    requests.write_text(
        '{"jsonrpc":"2.0","id":1,"method":"initialize"}\n{"jsonrpc":"2.0","id":2,"method":"tools/list"}\n',
        encoding="utf-8",
    )
    output = io.BytesIO()
    fd = os.open(requests, os.O_RDONLY)
    try:
        server = StdioServer(context=ServerContext(input_fd=fd, output=output), dispatcher=dispatcher)
        await asyncio.wait_for(server.serve(), timeout=5.0)
    finally:
        os.close(fd)

    assert [message["id"] for message in parse_output(output.getvalue())] == [1, 2]


def test_cli_serves_stdin_redirected_from_file(tmp_path: Path) -> None:
    requests = tmp_path / "requests.jsonl"
    requests.write_text('{"jsonrpc":"2.0","id":7,"method":"ping"}\n', encoding="utf-8")
    project_root = Path(__file__).resolve().parents[1]
    env = {**os.environ, "PYTHONPATH": str(project_root)}

    with requests.open("rb") as stdin:
        completed = subprocess.run(
            [sys.executable, "-c", "from asd_mcp.cli import main; main()"],
            stdin=stdin,
            capture_output=True,
            cwd=tmp_path,
            env=env,
            timeout=30,
            check=False,
        )

    assert completed.returncode == 0, completed.stderr.decode("utf-8", errors="replace")
    assert parse_output(completed.stdout) == [{"jsonrpc": "2.0", "id": 7, "result": {}}]


class _BrokenOutput(io.BytesIO):
    def write(self, data: bytes) -> int:  # type: ignore[override]
        raise BrokenPipeError("host went away")


@pytest.mark.asyncio
async def test_write_failure_raises_transport_error(dispatcher: McpDispatcher) -> None:
    read_fd, write_fd = os.pipe()
    server = StdioServer(context=ServerContext(input_fd=read_fd, output=_BrokenOutput()), dispatcher=dispatcher)
    try:
        os.write(write_fd, b'{"jsonrpc":"2.0","id":1,"method":"ping"}\n')
        os.close(write_fd)
        with pytest.raises(TransportError) as exc_info:
            await asyncio.wait_for(server.serve(), timeout=5.0)
    finally:
        os.close(read_fd)

    assert exc_info.value.error_code == "TRANSPORT_FAILED"


@pytest.mark.asyncio
async def test_unusable_input_raises_transport_error(dispatcher: McpDispatcher) -> None:
    server = StdioServer(context=ServerContext(input_fd=-1, output=io.BytesIO()), dispatcher=dispatcher)
    with pytest.raises(TransportError):
        await server.serve()
