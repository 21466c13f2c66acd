"""
gsd-mcp CLI — Command-line interface for the GSD MCP server

Commands:
    gsd-mcp init        Create ~/.gsd-mcp/config.env
    gsd-mcp server      Start the MCP server (stdio mode)
    gsd-mcp status      Show resolved paths and catalog sizes
    gsd-mcp mcp-config  Print MCP client JSON config
"""

import asyncio
import json
import shutil
import sys

import click

from gsd_mcp import __version__, prompts
from gsd_mcp.config import Config, RuntimeConfig, load_runtime_config
from gsd_mcp.errors import StartupConfigurationError


def _load_config() -> RuntimeConfig:
    try:
        return load_runtime_config().resolve()
    except StartupConfigurationError as exc:
        click.echo(f"Fatal: {exc.message}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="gsd-mcp")
def main():
    """GSD MCP Server — Get Shit Done workflows for any MCP client."""
    pass


@main.command()
def init():
    """Create ~/.gsd-mcp/ and a commented config.env."""
    Config.ensure_dirs()

    config_env = Config.CONFIG_FILE
    if not config_env.exists():
        config_env.write_text(
            "# GSD MCP Configuration\n"
            "# Environment variables take precedence over these values.\n"
            "\n"
            "# GSD_CONFIG_DIR=~/.claude\n"
            "# GSD_NODE=node\n"
            "# GSD_TOOL_TIMEOUT=60\n"
            "# GSD_TOOL_MAX_OUTPUT=10485760\n"
        )

    click.echo(f"gsd-mcp initialized at {Config.HOME_DIR}")
    click.echo(f"  Config: {config_env}")
    click.echo()
    click.echo("Next: add gsd-mcp to your MCP client settings.")
    click.echo("Run `gsd-mcp mcp-config` to get the JSON snippet.")


@main.command()
def server():
    """Start the GSD MCP server (stdio mode)."""
    from gsd_mcp.server.server import GsdMCPServer

    config = _load_config()

    async def _run():
        await GsdMCPServer(config).run()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        pass


@main.command()
def status():
    """Show the resolved installation and what it serves."""
    from gsd_mcp.resources import ResourceCatalog
    from gsd_mcp.tools import ToolContext, build_capabilities

    config = _load_config()
    tool_path = config.tool_entry_point
    resources = ResourceCatalog(config).list_resources()
    tools = build_capabilities(ToolContext.from_config(config))

    click.echo("GSD MCP Status")
    click.echo("=" * 40)
    click.echo(f"Installation: {config.installation_root}")
    click.echo(f"gsd-tools:    {tool_path} ({'found' if tool_path.is_file() else 'missing'})")
    click.echo(f"Node:         {config.node_executable}")
    click.echo()
    click.echo(f"Tools:     {len(tools)}")
    click.echo(f"Resources: {len(resources)}")
    click.echo(f"Prompts:   {len(prompts.list_prompts())}")


@main.command("mcp-config")
def mcp_config():
    """Print MCP config JSON for Claude Desktop, Cursor, Windsurf, Zed, ..."""
    executable = shutil.which("gsd-mcp")
    if executable:
        entry = {"command": executable, "args": ["server"]}
    else:
        entry = {"command": sys.executable, "args": ["-m", "gsd_mcp", "server"]}

    config = {"mcpServers": {"gsd": entry}}

    click.echo("Add this to your MCP client settings:\n")
    click.echo(json.dumps(config, indent=2))


if __name__ == "__main__":
    main()
