"""MCP tool dispatcher and stdio process host."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import signal
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Any, Optional

import mcp.types as types
from mcp.server import Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import ServerCapabilities, ToolsCapability
from pydantic import ValidationError

from .config import ServerConfig
from .errors import UnknownToolError
from .factory import build_orchestrator
from .orchestrator.pipeline import OperationResult
from .orchestrator.runner import DocsOrchestrator

LOGGER = logging.getLogger(__name__)


def package_version() -> str:
    try:
        return get_version("proton-docs-mcp")
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        return "0.0.0"


def _text_result(body: dict[str, Any], *, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=json.dumps(body, ensure_ascii=False))],
        isError=is_error,
    )


class DocsMCPServer:
    """Publishes the operation catalog as MCP tools and dispatches calls to it."""

    def __init__(self, config: ServerConfig, orchestrator: DocsOrchestrator) -> None:
        self._config = config
        self._orchestrator = orchestrator
        self._server = Server(config.server_name)
        self._setup_handlers()

    @property
    def orchestrator(self) -> DocsOrchestrator:
        return self._orchestrator

    def _setup_handlers(self) -> None:
        @self._server.list_tools()
        async def _list_tools() -> list[types.Tool]:
            return self.tools()

        @self._server.call_tool(validate_input=False)
        async def _call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
            return await self.dispatch(name, arguments)

    def tools(self) -> list[types.Tool]:
        return [
            types.Tool(
                name=operation.name,
                description=operation.description,
                inputSchema=operation.arguments.model_json_schema(by_alias=True),
            )
            for operation in self._orchestrator.operations.values()
        ]

    async def dispatch(
        self, name: str, arguments: Optional[dict[str, Any]]
    ) -> types.CallToolResult:
        """Validate, run and serialise one tool call."""

        try:
            parsed = self._orchestrator.parse_arguments(name, arguments)
        except UnknownToolError as exc:
            return _text_result(
                {"error": {"operation": name, "code": exc.code, "message": exc.message}},
                is_error=True,
            )
        except ValidationError as exc:
            LOGGER.info("Rejected arguments for %s: %s", name, exc)
            return _text_result(
                {
                    "error": {
                        "operation": name,
                        "code": "invalid_params",
                        "message": f"Invalid arguments for {name}",
                        "details": exc.errors(include_url=False, include_context=False),
                    }
                },
                is_error=True,
            )
        result = await self._orchestrator.run(name, parsed)
        return self.to_call_result(result)

    @staticmethod
    def to_call_result(result: OperationResult) -> types.CallToolResult:
        return _text_result(result.to_payload(), is_error=not result.ok)

    async def run(self) -> None:
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=self._config.server_name,
                    server_version=package_version(),
                    capabilities=ServerCapabilities(tools=ToolsCapability(listChanged=False)),
                ),
            )


async def serve(config: ServerConfig, orchestrator: Optional[DocsOrchestrator] = None) -> None:
    """Serve the tool catalog over stdio until the client disconnects or a signal arrives."""

    orchestrator = orchestrator or build_orchestrator(config)
    server = DocsMCPServer(config, orchestrator)
    task = asyncio.create_task(server.run())
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, task.cancel)
    LOGGER.info("Serving %d tools over stdio", len(orchestrator.operations))
    try:
        await task
    except asyncio.CancelledError:
        LOGGER.info("Shutdown requested")
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(sig)
        await orchestrator.shutdown()
