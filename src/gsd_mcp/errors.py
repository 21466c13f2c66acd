"""
Error hierarchy for the GSD MCP server.

Every failure the server knows about carries a ``kind`` and a message.
Display text is produced only where an error becomes a tool envelope or a
JSON-RPC error response.
"""

from typing import List, Tuple


class GsdMCPError(Exception):
    """Base class for all server errors."""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class StartupConfigurationError(GsdMCPError):
    """Fatal: the server cannot be configured (e.g. no home directory)."""

    kind = "startup_configuration"


class UnknownCapability(GsdMCPError):
    kind = "unknown_capability"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class UnknownPrompt(GsdMCPError):
    kind = "unknown_prompt"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown prompt: {name}")


class InvalidPromptArguments(GsdMCPError):
    kind = "invalid_prompt_arguments"


class ArgumentValidationError(GsdMCPError):
    """Tool arguments failed schema validation.

    ``issues`` holds every failing field as ``(path, reason)`` so the client
    can fix all of them in one round trip.
    """

    kind = "validation"

    def __init__(self, issues: List[Tuple[str, str]]):
        self.issues = issues
        super().__init__("; ".join(f"{path}: {reason}" for path, reason in issues))


class ResourceNotFound(GsdMCPError):
    kind = "resource_not_found"


class AccessDenied(ResourceNotFound):
    """Resolved path escapes its base directory. Reported like a missing resource."""

    kind = "access_denied"


class ExternalToolFailure(GsdMCPError):
    """gsd-tools spawn failure, timeout, output overflow or non-zero exit."""

    kind = "external_tool"
