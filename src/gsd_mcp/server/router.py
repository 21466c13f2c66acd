"""
Method Router — Dispatch MCP methods to handlers

Routes:
  initialize                -> server capabilities handshake
  notifications/initialized -> notification (no response)
  ping                      -> pong
  tools/list, tools/call    -> Dispatcher
  resources/list, resources/read, resources/templates/list -> ResourceCatalog
  prompts/list, prompts/get -> prompt catalog

Domain errors become ProtocolError here; nothing else in the server knows
about JSON-RPC error codes.
"""

from typing import Any, Dict, Optional

from gsd_mcp import prompts
from gsd_mcp.config import Config
from gsd_mcp.errors import InvalidPromptArguments, ResourceNotFound, UnknownCapability, UnknownPrompt
from gsd_mcp.resources import MIME_TYPE, ResourceCatalog
from gsd_mcp.server.dispatcher import Dispatcher
from gsd_mcp.server.logger import get_logger
from gsd_mcp.server.protocol import (
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    RESOURCE_NOT_FOUND,
    ProtocolError,
    initialize_result,
    prompts_list_result,
    resource_read_result,
    resources_list_result,
    tools_list_result,
)

log = get_logger("router")


class Router:
    """MCP method dispatcher."""

    def __init__(self, dispatcher: Dispatcher, catalog: ResourceCatalog):
        self._dispatcher = dispatcher
        self._catalog = catalog
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def route(self, msg: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Route a validated message to the appropriate handler.
        Returns the result payload, or None for notifications.
        """
        method = msg.get("method", "")
        params = msg.get("params") or {}
        if not isinstance(params, dict):
            raise ProtocolError(INVALID_PARAMS, "params must be an object")

        if method == "initialize":
            return self._handle_initialize(params)

        if method in ("initialized", "notifications/initialized"):
            self._initialized = True
            return None

        if method.startswith("notifications/"):
            return None

        if method == "ping":
            return {}

        if method == "tools/list":
            return tools_list_result(self._dispatcher.list_capabilities())

        if method == "tools/call":
            return await self._handle_tools_call(params)

        if method == "resources/list":
            return resources_list_result(self._catalog.list_resources())

        if method == "resources/templates/list":
            return {"resourceTemplates": []}

        if method == "resources/read":
            return await self._handle_resources_read(params)

        if method == "prompts/list":
            return prompts_list_result(prompts.list_prompts())

        if method == "prompts/get":
            return self._handle_prompts_get(params)

        raise ProtocolError(METHOD_NOT_FOUND, f"Unknown method: {method}")

    def _handle_initialize(self, params: Dict) -> Dict[str, Any]:
        client = params.get("clientInfo")
        client_name = client.get("name", "?") if isinstance(client, dict) else "?"
        log.info(
            f"Client initialize: {client_name} "
            f"protocol={params.get('protocolVersion', '?')}"
        )
        return initialize_result(
            server_name=Config.SERVER_NAME,
            server_version=Config.SERVER_VERSION,
            protocol_version=Config.PROTOCOL_VERSION,
        )

    async def _handle_tools_call(self, params: Dict) -> Dict[str, Any]:
        name = params.get("name", "")
        if not name:
            raise ProtocolError(INVALID_PARAMS, "Missing tool name")

        try:
            return await self._dispatcher.invoke(name, params.get("arguments"))
        except UnknownCapability as exc:
            raise ProtocolError(INVALID_PARAMS, exc.message) from None

    async def _handle_resources_read(self, params: Dict) -> Dict[str, Any]:
        uri = params.get("uri", "")
        if not uri:
            raise ProtocolError(INVALID_PARAMS, "Missing resource URI")

        try:
            text = await self._catalog.read_resource(uri)
        except ResourceNotFound as exc:
            log.warning(f"Resource {uri}: {exc.message}")
            raise ProtocolError(RESOURCE_NOT_FOUND, exc.message, {"uri": uri}) from None
        return resource_read_result(uri, MIME_TYPE, text)

    def _handle_prompts_get(self, params: Dict) -> Dict[str, Any]:
        name = params.get("name", "")
        if not name:
            raise ProtocolError(INVALID_PARAMS, "Missing prompt name")

        try:
            return prompts.get_prompt(name, params.get("arguments"))
        except (UnknownPrompt, InvalidPromptArguments) as exc:
            raise ProtocolError(INVALID_PARAMS, exc.message) from None
