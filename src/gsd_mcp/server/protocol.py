"""
JSON-RPC 2.0 / MCP message construction

Handles:
- Inbound message classification and validation
- Success/error/notification construction
- MCP result shapes for tools, resources and prompts
"""

from typing import Any, Dict, List, Optional, Union

JSONRPC_VERSION = "2.0"

RequestId = Optional[Union[int, str]]


class ProtocolError(Exception):
    """An error that becomes a JSON-RPC error response."""

    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# MCP-specific
RESOURCE_NOT_FOUND = -32002


def validate_message(msg: Any) -> str:
    """
    Classify an inbound JSON-RPC 2.0 message.
    Returns 'request', 'notification', 'response' or 'error'; raises ProtocolError otherwise.
    """
    if not isinstance(msg, dict):
        raise ProtocolError(INVALID_REQUEST, "Message must be a JSON object")

    if msg.get("jsonrpc") != JSONRPC_VERSION:
        raise ProtocolError(INVALID_REQUEST, f"Expected jsonrpc={JSONRPC_VERSION}")

    if "method" in msg:
        if not isinstance(msg["method"], str):
            raise ProtocolError(INVALID_REQUEST, "method must be a string")
        return "request" if "id" in msg else "notification"
    if "id" in msg and "result" in msg:
        return "response"
    if "id" in msg and "error" in msg:
        return "error"
    raise ProtocolError(INVALID_REQUEST, "Cannot determine message type")


def make_response(request_id: RequestId, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def make_error(
    request_id: RequestId,
    code: int,
    message: str,
    data: Any = None,
) -> Dict[str, Any]:
    error = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


# --- MCP result builders ---

def initialize_result(
    server_name: str,
    server_version: str,
    protocol_version: str,
    capabilities: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "protocolVersion": protocol_version,
        "capabilities": capabilities or {
            "tools": {"listChanged": False},
            "resources": {"subscribe": False, "listChanged": False},
            "prompts": {"listChanged": False},
        },
        "serverInfo": {"name": server_name, "version": server_version},
    }


def text_content(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


def tool_result_content(
    content: List[Dict[str, Any]],
    is_error: bool = False,
) -> Dict[str, Any]:
    """The tools/call envelope. ``isError`` is only present on failure."""
    result: Dict[str, Any] = {"content": content}
    if is_error:
        result["isError"] = True
    return result


def tools_list_result(tools: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"tools": tools}


def resources_list_result(resources: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"resources": resources}


def resource_read_result(uri: str, mime_type: str, text: str) -> Dict[str, Any]:
    return {"contents": [{"uri": uri, "mimeType": mime_type, "text": text}]}


def prompts_list_result(prompts: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"prompts": prompts}
