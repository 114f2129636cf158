from __future__ import annotations

import asyncio
import sys

from asd_mcp.app.mcp_protocol import MCP_PROTOCOL_VERSION
from asd_mcp.app.settings import Settings
from asd_mcp.app.stdio_server import ServerContext, StdioServer
from asd_mcp.bootstrap.container import build_runtime_components
from libs.common.errors import TransportError
from libs.common.logging import configure_logging, get_logger


def _run() -> int:
    settings = Settings()
    configure_logging(settings.log_level)
    logger = get_logger("asd_mcp.cli")

    runtime = build_runtime_components(settings)
    server = StdioServer(
        context=ServerContext(input_fd=sys.stdin.fileno(), output=sys.stdout.buffer),
        dispatcher=runtime.dispatcher,
        keepalive_interval_seconds=settings.keepalive_interval_seconds,
        read_chunk_bytes=settings.read_chunk_bytes,
    )
    logger.info(
        "server_starting",
        server_name=settings.server_name,
        server_version=settings.server_version,
        protocol_version=MCP_PROTOCOL_VERSION,
    )

    try:
        asyncio.run(server.serve())
    except TransportError as exc:
        logger.error("server_stopped", error_code=exc.error_code, message=exc.message)
        return 1
    return 0


def main() -> None:
    try:
        exit_code = _run()
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)
