"""
GSD MCP Server — Main Orchestrator

Ties together:
  Transport -> Protocol -> Router -> {Dispatcher, ResourceCatalog, prompts}

Flow:
  1. Transport reads one JSON line from stdin
  2. Protocol validates JSON-RPC 2.0
  3. Router dispatches to the matching handler
  4. Transport writes the response to stdout

Requests are handled one at a time in transport order.
"""

import asyncio
import signal
from typing import Any, Optional

from gsd_mcp.config import Config, RuntimeConfig
from gsd_mcp.resources import ResourceCatalog
from gsd_mcp.server.dispatcher import Dispatcher
from gsd_mcp.server.logger import get_logger
from gsd_mcp.server.protocol import (
    INTERNAL_ERROR,
    ProtocolError,
    make_error,
    make_response,
    validate_message,
)
from gsd_mcp.server.router import Router
from gsd_mcp.server.transport import StdioTransport
from gsd_mcp.tools import ToolContext, build_capabilities

log = get_logger("server")


class GsdMCPServer:
    """
    Main server orchestrator.

    Usage:
        server = GsdMCPServer(load_runtime_config().resolve())
        await server.run()
    """

    def __init__(self, config: RuntimeConfig, transport: Optional[StdioTransport] = None):
        self._config = config
        self._transport = transport or StdioTransport()
        self._dispatcher = Dispatcher(build_capabilities(ToolContext.from_config(config)))
        self._catalog = ResourceCatalog(config)
        self._router = Router(self._dispatcher, self._catalog)
        self._running = False
        self._idle = False
        self._stopped = False

    @property
    def router(self) -> Router:
        return self._router

    # -- main loop --

    async def run(self):
        """Serve until EOF on stdin or a termination signal."""
        log.info(f"Starting {Config.SERVER_NAME} v{Config.SERVER_VERSION}")
        log.info(f"Installation root: {self._config.installation_root}")
        log.info(f"gsd-tools: {self._config.tool_entry_point}")

        await self._transport.start()

        loop = asyncio.get_running_loop()
        main_task = asyncio.current_task()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig, main_task)
            except (NotImplementedError, RuntimeError):
                pass

        self._running = True
        log.info(f"Server ready: tools={len(self._dispatcher)}")

        try:
            while self._running:
                self._idle = True
                try:
                    msg = await self._transport.read_message()
                except ProtocolError as exc:
                    self._idle = False
                    await self._transport.write_message(
                        make_error(None, exc.code, exc.message, exc.data)
                    )
                    continue
                self._idle = False

                if msg is None:
                    log.info("EOF on stdin, shutting down")
                    break

                await self.handle_message(msg)

        except asyncio.CancelledError:
            log.info("Server cancelled")
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.remove_signal_handler(sig)
                except (NotImplementedError, RuntimeError):
                    pass
            await self.shutdown()

    def _on_signal(self, sig: signal.Signals, main_task: Optional[asyncio.Task]):
        log.info(f"Received {sig.name}, shutting down gracefully...")
        self._running = False
        # A request in flight finishes first; the loop exits right after it.
        if self._idle and main_task is not None and not main_task.done():
            main_task.cancel()

    async def handle_message(self, msg: Any) -> Optional[dict]:
        """Process one decoded message. Returns the response written, if any."""
        request_id = msg.get("id") if isinstance(msg, dict) else None
        response = None

        try:
            msg_type = validate_message(msg)
            if msg_type in ("response", "error"):
                return None

            result = await self._router.route(msg)
            if msg_type == "notification" or result is None:
                return None
            response = make_response(request_id, result)

        except ProtocolError as exc:
            log.warning(f"Protocol error: {exc.message} (code={exc.code})")
            if _expects_reply(msg):
                response = make_error(request_id, exc.code, exc.message, exc.data)

        except Exception as exc:
            log.error(f"Unhandled error: {exc}", exc_info=True)
            if _expects_reply(msg):
                response = make_error(request_id, INTERNAL_ERROR, str(exc))

        if response is not None:
            await self._transport.write_message(response)
        return response

    async def shutdown(self):
        """Close the transport once."""
        if self._stopped:
            return
        self._stopped = True
        self._running = False
        await self._transport.close()
        log.info("Server stopped")


def _expects_reply(msg: Any) -> bool:
    return not isinstance(msg, dict) or "id" in msg or "method" not in msg
