"""표준 입출력 위에서 동작하는 단일 스레드 MCP 서버 루프예요.

한 번의 반복은 이렇게 흘러가요:

1. 입력 fd가 읽을 수 있게 될 때까지 keepalive 간격만큼 기다려요.
2. 시간이 다 되면 keepalive ping을 하나 보내고 다시 기다려요.
3. 읽을 수 있으면 non-blocking으로 읽어요. 빈 바이트면 EOF라 루프를 끝내요.
4. 완성된 줄을 도착 순서대로 하나씩 해석하고 디스패치한 뒤, 응답이 있으면
   한 줄로 쓰고 flush해요. 다음 줄은 이전 응답이 나간 뒤에야 처리하고,
   버퍼에 완성된 줄이 남아 있는 동안은 입력을 더 읽지 않아요.

입력이 일반 파일(`asd-mcp < requests.jsonl`)이면 epoll이 fd를 감시하지 못해요.
일반 파일은 언제나 읽을 수 있으니 이때는 대기 없이 바로 읽어요.

입력 대기/읽기/쓰기 실패만 `TransportError`로 루프를 끝내요. 해석 실패나
알 수 없는 메서드는 값 수준 응답(또는 무응답)으로 끝나고 루프는 계속 돌아요.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from dataclasses import dataclass
from typing import Any, BinaryIO

from asd_mcp.app.codec import decode_line, encode_message
from asd_mcp.app.dispatcher import McpDispatcher
from asd_mcp.app.mcp_protocol import MalformedMessage, invalid_request_response, keepalive_ping
from libs.common.errors import TransportError
from libs.common.logging import get_logger

logger = get_logger("asd_mcp.stdio_server")


@dataclass(slots=True)
class ServerContext:
    """루프가 프로세스 수명 동안 소유하는 상태예요."""

    input_fd: int
    output: BinaryIO
    keepalive_counter: int = 0

    def next_keepalive(self) -> dict[str, Any]:
        self.keepalive_counter += 1
        return keepalive_ping(self.keepalive_counter)


class StdioServer:
    def __init__(
        self,
        *,
        context: ServerContext,
        dispatcher: McpDispatcher,
        keepalive_interval_seconds: float = 30.0,
        read_chunk_bytes: int = 65_536,
    ) -> None:
        self._context = context
        self._dispatcher = dispatcher
        self._keepalive_interval_seconds = keepalive_interval_seconds
        self._read_chunk_bytes = read_chunk_bytes
        # 아직 처리하지 않은 입력 바이트예요. 줄 단위로 앞에서부터 잘라내요.
        self._buffer = bytearray()

    async def serve(self) -> None:
        """EOF까지 요청을 처리해요. 입력 스트림 대기/읽기/쓰기 실패면 `TransportError`를 던져요."""
        loop = asyncio.get_running_loop()
        fd = self._context.input_fd
        readable = asyncio.Event()

        try:
            os.set_blocking(fd, False)
        except (OSError, ValueError) as exc:
            raise TransportError(f"cannot watch input stream: {exc}") from exc

        pollable = self._watch(loop, fd, readable.set)
        logger.info(
            "server_started",
            keepalive_interval_seconds=self._keepalive_interval_seconds,
            pollable=pollable,
            tools=[tool.name for tool in self._dispatcher.tools],
        )
        try:
            while True:
                if pollable:
                    try:
                        await asyncio.wait_for(readable.wait(), timeout=self._keepalive_interval_seconds)
                    except TimeoutError:
                        self._send_keepalive()
                        continue
                    readable.clear()

                chunk = self._read_available(fd)
                if chunk is None:
                    continue
                if not chunk:
                    await self._drain_tail()
                    logger.info("transport_closed", reason="eof", keepalive_pings=self._context.keepalive_counter)
                    return

                self._buffer.extend(chunk)
                await self._drain_lines()
        finally:
            if pollable:
                loop.remove_reader(fd)
            with contextlib.suppress(OSError, ValueError):
                os.set_blocking(fd, True)

    @staticmethod
    def _watch(loop: asyncio.AbstractEventLoop, fd: int, callback: Any) -> bool:
        """fd에 읽기 감시를 걸어요. 감시할 수 없는 일반 파일이면 False를 돌려줘요."""
        try:
            loop.add_reader(fd, callback)
        except PermissionError:
            logger.info("input_not_pollable", fd=fd)
            return False
        except (OSError, ValueError, NotImplementedError) as exc:
            raise TransportError(f"cannot watch input stream: {exc}") from exc
        return True

    def _read_available(self, fd: int) -> bytes | None:
        """읽을 수 있는 만큼 읽어요. 준비 신호가 헛것이었다면 None을 돌려줘요."""
        try:
            return os.read(fd, self._read_chunk_bytes)
        except (BlockingIOError, InterruptedError):
            return None
        except OSError as exc:
            logger.error("transport_read_failed", error=str(exc))
            raise TransportError(f"failed to read input stream: {exc}") from exc

    async def _drain_lines(self) -> None:
        while True:
            newline_index = self._buffer.find(b"\n")
            if newline_index < 0:
                return
            raw_line = bytes(self._buffer[:newline_index])
            del self._buffer[: newline_index + 1]
            await self.handle_line(raw_line)

    async def _drain_tail(self) -> None:
        # 마지막 줄이 개행 없이 끝났어도 그 줄까지는 처리해요.
        if self._buffer:
            raw_line = bytes(self._buffer)
            self._buffer.clear()
            await self.handle_line(raw_line)

    async def handle_line(self, raw_line: bytes) -> None:
        line = raw_line.decode("utf-8", errors="replace").strip()
        if not line:
            return

        message = decode_line(line)
        if isinstance(message, MalformedMessage):
            self._handle_malformed(message)
            return

        response = await self._dispatcher.dispatch(message)
        if response is not None:
            self._write(response)

    def _handle_malformed(self, message: MalformedMessage) -> None:
        if message.request_id is None:
            logger.warning("malformed_message_dropped", reason=message.reason)
            return
        logger.warning("malformed_message", reason=message.reason, request_id=message.request_id)
        self._write(invalid_request_response(message.request_id))

    def _send_keepalive(self) -> None:
        message = self._context.next_keepalive()
        self._write(message)
        logger.debug("keepalive_ping_sent", request_id=message["id"])

    def _write(self, message: dict[str, Any]) -> None:
        try:
            self._context.output.write(encode_message(message))
            self._context.output.flush()
        except (BrokenPipeError, OSError, ValueError) as exc:
            logger.error("transport_write_failed", error=str(exc))
            raise TransportError(f"failed to write output stream: {exc}") from exc
