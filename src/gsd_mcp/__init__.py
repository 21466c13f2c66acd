"""GSD MCP Server — Get Shit Done workflows over the Model Context Protocol."""

__version__ = "1.18.0"
