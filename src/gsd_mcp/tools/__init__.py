"""
GSD MCP Tools

Modules:
  workflow_tools  — workflow-document tools (plan, execute, verify, milestones, todos, ...)
  project_tools   — project state tools (progress, read_state, run_cli, health)

Each module exposes ``capabilities(ctx)``; handlers close over the shared
ToolContext instead of reaching for globals.
"""

from dataclasses import dataclass
from typing import List

from gsd_mcp.config import RuntimeConfig
from gsd_mcp.runner import ToolRunner
from gsd_mcp.server.dispatcher import Capability
from gsd_mcp.workflows import WorkflowLibrary


@dataclass(frozen=True)
class ToolContext:
    config: RuntimeConfig
    workflows: WorkflowLibrary
    runner: ToolRunner

    @classmethod
    def from_config(cls, config: RuntimeConfig) -> "ToolContext":
        return cls(
            config=config,
            workflows=WorkflowLibrary(config),
            runner=ToolRunner(config),
        )


def build_capabilities(ctx: ToolContext) -> List[Capability]:
    """Every tool the server offers, in tools/list order."""
    from gsd_mcp.tools import project_tools, workflow_tools

    return workflow_tools.capabilities(ctx) + project_tools.capabilities(ctx)
