"""
Dispatcher — look up, validate, invoke, normalize

invoke() is the crash-isolation boundary for tool calls: validation failures
and handler exceptions come back as isError envelopes. Only an unknown tool
name raises, because that means the client is out of sync with tools/list.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from gsd_mcp.errors import ArgumentValidationError, UnknownCapability
from gsd_mcp.server.logger import get_logger
from gsd_mcp.server.protocol import text_content, tool_result_content
from gsd_mcp.server.schema import Fields, build_model, object_schema, validate_arguments

log = get_logger("dispatcher")

Handler = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


@dataclass(frozen=True)
class Capability:
    name: str
    description: str
    fields: Fields
    handler: Handler

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": object_schema(self.fields),
        }


class Dispatcher:
    """Immutable capability registry plus the tools/call pipeline."""

    def __init__(self, capabilities: Sequence[Capability]):
        self._capabilities: Dict[str, Capability] = {}
        self._models = {}
        for capability in capabilities:
            if capability.name in self._capabilities:
                raise ValueError(f"Duplicate tool name: {capability.name}")
            self._capabilities[capability.name] = capability
            self._models[capability.name] = build_model(f"{capability.name}_args", capability.fields)
        log.info(f"Registered {len(self._capabilities)} tools")

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, name: str) -> bool:
        return name in self._capabilities

    def list_capabilities(self) -> List[Dict[str, Any]]:
        return [capability.describe() for capability in self._capabilities.values()]

    async def invoke(self, name: str, raw_args: Any) -> Dict[str, Any]:
        capability = self._capabilities.get(name)
        if capability is None:
            raise UnknownCapability(name)

        try:
            args = validate_arguments(self._models[name], raw_args)
        except ArgumentValidationError as exc:
            log.info(f"Tool {name} rejected {len(exc.issues)} argument(s)")
            lines = "\n".join(f"- {path}: {reason}" for path, reason in exc.issues)
            return tool_result_content(
                [text_content(f"Validation error in tool {name}:\n{lines}")],
                is_error=True,
            )

        try:
            return await capability.handler(args)
        except Exception as exc:
            log.error(f"Tool {name} failed: {exc}", exc_info=True)
            return tool_result_content(
                [text_content(f"Error executing tool {name}: {_single_line(exc)}")],
                is_error=True,
            )


def _single_line(exc: Exception) -> str:
    message = str(exc) or type(exc).__name__
    return " ".join(message.split())
