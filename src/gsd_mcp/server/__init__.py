"""GSD MCP server internals — JSON-RPC protocol, transport, routing, dispatch.

The orchestrator lives in ``gsd_mcp.server.server``; it is not re-exported
here so that leaf modules (logger, schema) can be imported on their own.
"""
