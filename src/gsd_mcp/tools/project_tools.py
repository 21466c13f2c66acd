"""
Project Tools — look at (and, through gsd-tools, change) a project's .planning state

Tools:
  gsd_progress    — progress report via `gsd-tools progress`, with fallback guidance
  gsd_read_state  — STATE.md, whole or one section
  gsd_run_cli     — pass-through to any gsd-tools command
  gsd_health      — installation and project sanity checks
"""

import asyncio
import functools
import re
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List

from gsd_mcp.errors import ExternalToolFailure
from gsd_mcp.paths import resolve_project_path
from gsd_mcp.server.dispatcher import Capability
from gsd_mcp.server.logger import get_logger
from gsd_mcp.server.protocol import text_content, tool_result_content
from gsd_mcp.server.schema import ArrayField, EnumField, StringField

if TYPE_CHECKING:
    from gsd_mcp.tools import ToolContext

log = get_logger("tools.project")

CWD = StringField(optional=True, description="Project directory (absolute path)")

PLANNING_DIR = ".planning"
STATE_FILE = "STATE.md"
KEY_FILES = ("PROJECT.md", "REQUIREMENTS.md", "ROADMAP.md", "STATE.md")
STATE_EXCERPT_CHARS = 2000


def _state_path(args: Dict) -> Path:
    return resolve_project_path(args.get("cwd")) / PLANNING_DIR / STATE_FILE


async def _read_text(path: Path) -> str:
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def _progress(ctx: "ToolContext", args: Dict) -> Dict:
    fmt = args["format"]
    state_path = _state_path(args)

    if not state_path.is_file():
        workflow = await ctx.workflows.load("progress")
        return tool_result_content([text_content(
            f"## Project Progress ({fmt})\n\n"
            f"No STATE.md found at {state_path}.\n\n"
            f"### Workflow Instructions\n\n{workflow}\n\n---\n\n"
            "To see progress, ensure you have initialized a project with `gsd_new_project` first."
        )])

    state = await _read_text(state_path)
    try:
        result = await ctx.runner.run("progress", [fmt], args.get("cwd"))
        body = result.stdout or result.stderr or state[:STATE_EXCERPT_CHARS]
    except ExternalToolFailure as exc:
        log.warning(f"progress report unavailable: {exc}")
        body = f"⚠ gsd-tools progress unavailable: {exc.message}\n\n{state[:STATE_EXCERPT_CHARS]}"

    return tool_result_content([text_content(f"## Project Progress ({fmt})\n\n{body}")])


async def _read_state(ctx: "ToolContext", args: Dict) -> Dict:
    state_path = _state_path(args)
    if not state_path.is_file():
        return tool_result_content([text_content(
            f"## Error Reading State\n\nNo STATE.md found at {state_path}.\n\n"
            "Have you initialized a project with `gsd_new_project`?"
        )], is_error=True)

    content = await _read_text(state_path)

    section = args.get("section")
    if section:
        match = re.search(
            rf"## {re.escape(section)}([\s\S]*?)(?=## |\Z)",
            content,
            re.IGNORECASE,
        )
        if match:
            return tool_result_content([text_content(
                f"## State Section: {section}\n\n{match.group(1).strip()}"
            )])

    return tool_result_content([text_content(
        f"## Project State\n\nLocation: {state_path}\n\n{content}"
    )])


async def _run_cli(ctx: "ToolContext", args: Dict) -> Dict:
    command = args["command"]
    words = command.split()
    if not words:
        return tool_result_content([text_content("No gsd-tools command given.")], is_error=True)

    extra: List[str] = args.get("args") or []
    result = await ctx.runner.run(words[0], words[1:] + extra, args.get("cwd"))

    return tool_result_content([text_content(
        f"## gsd-tools {command}\n\n"
        f"**stdout:**\n```\n{result.stdout or '(no output)'}\n```\n\n"
        f"**stderr:**\n```\n{result.stderr or '(no output)'}\n```"
    )])


async def _health(ctx: "ToolContext", args: Dict) -> Dict:
    checks: List[str] = []
    errors: List[str] = []

    tool_path = ctx.runner.entry_point
    if tool_path.is_file():
        checks.append(f"✓ gsd-tools.js path resolved: {tool_path}")
    else:
        errors.append(f"✗ gsd-tools.js not found at {tool_path}")

    project = resolve_project_path(args.get("cwd"))
    checks.append(f"✓ Project path: {project}")

    planning = project / PLANNING_DIR
    if planning.is_dir():
        checks.append("✓ .planning/ directory exists")
        for name in KEY_FILES:
            if (planning / name).exists():
                checks.append(f"✓ {name} exists")
            else:
                errors.append(f"✗ {name} missing")

        phases = planning / "phases"
        if phases.is_dir():
            checks.append(f"✓ {len(list(phases.iterdir()))} phase directories found")
        else:
            errors.append("✗ No phases directory (project not planned yet?)")
    else:
        errors.append("✗ .planning/ directory not found - project not initialized")

    if (project / ".git").exists():
        checks.append("✓ Git repository initialized")
    else:
        errors.append("✗ No git repository")

    output = "## GSD Health Check\n\n"
    output += f"### Passed ({len(checks)})\n"
    output += "\n".join(f"- {c}" for c in checks) + "\n\n"
    output += f"### Issues ({len(errors)})\n"
    output += ("\n".join(f"- {e}" for e in errors) or "None!") + "\n\n---\n\n"
    if errors:
        output += "**Recommendation:** Run `gsd_new_project` to initialize or check the project path."
    else:
        output += "**Recommendation:** Project looks healthy! Ready to work."

    return tool_result_content([text_content(output)])


def capabilities(ctx: "ToolContext") -> List[Capability]:
    return [
        Capability("gsd_progress", "Show current project progress and status", {
            "format": EnumField(values=("json", "table", "bar"), default="table", description="Output format"),
            "cwd": CWD,
        }, functools.partial(_progress, ctx)),
        Capability("gsd_read_state", "Read project STATE.md file", {
            "section": StringField(
                optional=True,
                description="Specific section to read (e.g., 'current', 'progress', 'metrics')",
            ),
            "cwd": CWD,
        }, functools.partial(_read_state, ctx)),
        Capability("gsd_run_cli", "Run any gsd-tools.js command directly", {
            "command": StringField(
                description="Command to run (e.g., 'state load', 'progress json', 'todo complete my-todo')",
            ),
            "args": ArrayField(items=StringField(), optional=True, description="Additional arguments"),
            "cwd": CWD,
        }, functools.partial(_run_cli, ctx)),
        Capability("gsd_health", "Check GSD installation and project health", {
            "cwd": StringField(
                optional=True,
                description="Project directory to check (absolute path). "
                            "If not provided, uses current working directory",
            ),
        }, functools.partial(_health, ctx)),
    ]
