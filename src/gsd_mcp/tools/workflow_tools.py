"""
Workflow Tools — hand a GSD workflow document to the assistant

Each tool loads one workflow from the installation and wraps it with a
heading, the caller's arguments and an execution-context block. The tools
never act on the project themselves; the assistant follows the workflow.
"""

import functools
import os
from typing import TYPE_CHECKING, Any, Dict, List, Sequence, Tuple

from gsd_mcp.server.dispatcher import Capability
from gsd_mcp.server.protocol import text_content, tool_result_content
from gsd_mcp.server.schema import BooleanField, EnumField, NumberField, StringField, format_number

if TYPE_CHECKING:
    from gsd_mcp.tools import ToolContext

CWD = StringField(optional=True, description="Project directory (absolute path)")


def _phase(description: str) -> NumberField:
    return NumberField(description=description)


def _project(args: Dict[str, Any]) -> str:
    return args.get("cwd") or os.getcwd()


async def _render(
    ctx: "ToolContext",
    workflow: str,
    heading: str,
    args: Dict[str, Any],
    intro: Sequence[str] = (),
    context: Sequence[Tuple[str, Any]] = (),
) -> Dict[str, Any]:
    instructions = await ctx.workflows.load(workflow)

    output = f"## {heading}\n\n"
    if intro:
        output += "\n".join(intro) + "\n\n"
    output += f"### Workflow Instructions\n\n{instructions}\n\n---\n\n"
    output += "### Execution Context\n"
    for label, value in context:
        output += f"- {label}: {value}\n"
    output += f"- Project: {_project(args)}"

    return tool_result_content([text_content(output)])


# --- project setup ---

async def _new_project(ctx: "ToolContext", args: Dict) -> Dict:
    workflow = await ctx.workflows.load("new-project")

    output = f"## Initializing new project: {args['name']}\n\n"
    output += f"{args['description']}\n\n"
    output += f"### Workflow Instructions\n\n{workflow}\n\n---\n\n"
    output += "### Auto Mode\n"
    if args.get("auto"):
        output += "✓ Auto mode enabled - skip deep questioning\n\n"
    else:
        output += "Auto mode disabled - will ask clarifying questions\n\n"
    output += "### Project Location\n"
    if args.get("cwd"):
        output += f"Directory: {args['cwd']}"
    else:
        output += f"Current directory: {os.getcwd()}"

    return tool_result_content([text_content(output)])


async def _map_codebase(ctx: "ToolContext", args: Dict) -> Dict:
    deep = bool(args.get("deep"))
    return await _render(
        ctx, "map-codebase",
        "Mapping Codebase (Deep Mode)" if deep else "Mapping Codebase",
        args,
        context=[("Mode", "Deep analysis" if deep else "Standard analysis")],
    )


async def _discovery_phase(ctx: "ToolContext", args: Dict) -> Dict:
    return await _render(ctx, "discovery-phase", "Project Discovery Phase", args)


# --- phases ---

async def _discuss_phase(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    return await _render(ctx, "discuss-phase", f"Discussing Phase {phase}", args,
                         context=[("Phase", phase)])


async def _research_phase(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    return await _render(ctx, "research-phase", f"Researching Phase {phase}", args,
                         context=[("Phase", phase)])


async def _list_phase_assumptions(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    return await _render(ctx, "list-phase-assumptions", f"Listing Assumptions for Phase {phase}", args,
                         context=[("Phase", phase)])


async def _plan_phase(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    intro = []
    if args.get("skipResearch"):
        intro.append("⚠ Skip research enabled")
    if args.get("skipVerify"):
        intro.append("⚠ Skip verification enabled")
    return await _render(ctx, "plan-phase", f"Planning Phase {phase}", args,
                         intro=intro, context=[("Phase", phase)])


async def _execute_phase(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    return await _render(ctx, "execute-phase", f"Executing Phase {phase}", args,
                         context=[("Phase", phase)])


async def _execute_plan(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    plan = format_number(args["plan"])
    return await _render(ctx, "execute-plan", f"Executing Plan {plan} in Phase {phase}", args,
                         context=[("Phase", phase), ("Plan", plan)])


async def _verify_work(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    return await _render(ctx, "verify-work", f"Verifying Phase {phase}", args,
                         context=[("Phase", phase)])


async def _verify_phase(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    return await _render(ctx, "verify-phase", f"Verifying Phase {phase}", args,
                         context=[("Phase", phase)])


# --- roadmap editing ---

async def _add_phase(ctx: "ToolContext", args: Dict) -> Dict:
    description = args["description"]
    return await _render(ctx, "add-phase", "Adding New Phase", args,
                         intro=[f"**Description:** {description}"],
                         context=[("Description", description)])


async def _insert_phase(ctx: "ToolContext", args: Dict) -> Dict:
    after = format_number(args["after"])
    description = args["description"]
    return await _render(ctx, "insert-phase", f"Inserting Phase After {after}", args,
                         intro=[f"**Description:** {description}"],
                         context=[("Insert After", f"Phase {after}"), ("Description", description)])


async def _remove_phase(ctx: "ToolContext", args: Dict) -> Dict:
    phase = format_number(args["phase"])
    force = bool(args.get("force"))
    intro = ["⚠️ **FORCE MODE ENABLED** - Will skip confirmations"] if force else []
    return await _render(ctx, "remove-phase", f"Removing Phase {phase}", args,
                         intro=intro,
                         context=[("Phase to Remove", phase), ("Force", "true" if force else "false")])


# --- milestones ---

async def _new_milestone(ctx: "ToolContext", args: Dict) -> Dict:
    name = args.get("name")
    return await _render(ctx, "new-milestone",
                         f"Starting New Milestone: {name}" if name else "Starting New Milestone",
                         args, context=[("Name", name)] if name else [])


async def _complete_milestone(ctx: "ToolContext", args: Dict) -> Dict:
    version = args.get("version")
    return await _render(ctx, "complete-milestone",
                         f"Completing Milestone v{version}" if version else "Completing Milestone",
                         args, context=[("Version", version)] if version else [])


async def _audit_milestone(ctx: "ToolContext", args: Dict) -> Dict:
    return await _render(ctx, "audit-milestone", "Auditing Milestone", args)


async def _plan_milestone_gaps(ctx: "ToolContext", args: Dict) -> Dict:
    return await _render(ctx, "plan-milestone-gaps", "Planning Milestone Gaps", args)


# --- ad-hoc work ---

async def _quick(ctx: "ToolContext", args: Dict) -> Dict:
    description = args["description"]
    return await _render(ctx, "quick", f"Quick Task: {description}", args,
                         context=[("Description", description)])


async def _add_todo(ctx: "ToolContext", args: Dict) -> Dict:
    description = args["description"]
    area = args.get("area")
    intro = [f"**Description:** {description}"]
    context = [("Description", description)]
    if area:
        intro.append(f"**Area:** {area}")
        context.append(("Area", area))
    return await _render(ctx, "add-todo", "Adding Todo", args, intro=intro, context=context)


async def _check_todos(ctx: "ToolContext", args: Dict) -> Dict:
    area = args.get("area")
    return await _render(ctx, "check-todos",
                         f"Checking Todos (Area: {area})" if area else "Checking Todos",
                         args, context=[("Area Filter", area)] if area else [])


async def _diagnose_issues(ctx: "ToolContext", args: Dict) -> Dict:
    return await _render(ctx, "diagnose-issues", "Diagnosing Project Issues", args)


# --- sessions ---

async def _resume_work(ctx: "ToolContext", args: Dict) -> Dict:
    return await _render(ctx, "resume-project", "Resuming Work", args)


async def _pause_work(ctx: "ToolContext", args: Dict) -> Dict:
    notes = args.get("notes")
    return await _render(ctx, "pause-work", "Pausing Work", args,
                         intro=[f"**Notes:** {notes}"] if notes else [],
                         context=[("Notes", notes)] if notes else [])


async def _transition(ctx: "ToolContext", args: Dict) -> Dict:
    intro: List[str] = []
    context: List[Tuple[str, Any]] = []
    if args.get("from"):
        intro.append(f"**From:** {args['from']}")
        context.append(("From", args["from"]))
    if args.get("to"):
        intro.append(f"**To:** {args['to']}")
        context.append(("To", args["to"]))
    return await _render(ctx, "transition", "Transitioning Work", args, intro=intro, context=context)


# --- configuration ---

async def _set_profile(ctx: "ToolContext", args: Dict) -> Dict:
    profile = args["profile"]
    return await _render(ctx, "set-profile", "Setting Model Profile", args,
                         intro=[f"**Profile:** {profile}"],
                         context=[("Profile", profile)])


async def _settings(ctx: "ToolContext", args: Dict) -> Dict:
    intro: List[str] = []
    context: List[Tuple[str, Any]] = []
    if args.get("list"):
        intro.append("**Listing all settings**")
    if args.get("key"):
        intro.append(f"**Key:** {args['key']}")
        context.append(("Key", args["key"]))
    if args.get("value"):
        intro.append(f"**Value:** {args['value']}")
        context.append(("Value", args["value"]))
    if args.get("list"):
        context.append(("Action", "List all settings"))
    return await _render(ctx, "settings", "GSD Settings", args, intro=intro, context=context)


def capabilities(ctx: "ToolContext") -> List[Capability]:
    def tool(name, description, fields, handler) -> Capability:
        return Capability(name, description, {**fields, "cwd": CWD}, functools.partial(handler, ctx))

    return [
        tool("gsd_new_project", "Initialize a new project with GSD workflow", {
            "name": StringField(description="Project name"),
            "description": StringField(description="Project description"),
            "auto": BooleanField(optional=True, description="Auto mode - skip interactive questioning"),
        }, _new_project),
        tool("gsd_plan_phase", "Research and create plans for a phase", {
            "phase": _phase("Phase number to plan"),
            "skipResearch": BooleanField(optional=True, description="Skip research step"),
            "skipVerify": BooleanField(optional=True, description="Skip plan verification"),
        }, _plan_phase),
        tool("gsd_execute_phase", "Execute all plans in a phase", {
            "phase": _phase("Phase number to execute"),
        }, _execute_phase),
        tool("gsd_verify_work", "Verify phase completion with user acceptance testing", {
            "phase": _phase("Phase number to verify"),
        }, _verify_work),
        tool("gsd_discuss_phase", "Discuss phase implementation details before planning", {
            "phase": _phase("Phase number to discuss"),
        }, _discuss_phase),
        tool("gsd_quick", "Execute a quick ad-hoc task", {
            "description": StringField(description="Quick task description"),
        }, _quick),
        tool("gsd_map_codebase", "Analyze existing codebase", {
            "deep": BooleanField(optional=True, description="Deep analysis mode"),
        }, _map_codebase),
        tool("gsd_new_milestone", "Start a new milestone", {
            "name": StringField(optional=True, description="Milestone name"),
        }, _new_milestone),
        tool("gsd_complete_milestone", "Complete current milestone", {
            "version": StringField(optional=True, description="Version tag"),
        }, _complete_milestone),
        tool("gsd_add_phase", "Add a new phase to the project roadmap", {
            "description": StringField(description="Phase description"),
        }, _add_phase),
        tool("gsd_insert_phase", "Insert a new decimal phase after an existing phase", {
            "after": NumberField(description="Phase number to insert after"),
            "description": StringField(description="New phase description"),
        }, _insert_phase),
        tool("gsd_remove_phase", "Remove a phase from the roadmap and renumber subsequent phases", {
            "phase": _phase("Phase number to remove"),
            "force": BooleanField(optional=True, description="Force removal without confirmation"),
        }, _remove_phase),
        tool("gsd_research_phase", "Research a phase before planning to gather context and requirements", {
            "phase": _phase("Phase number to research"),
        }, _research_phase),
        tool("gsd_add_todo", "Add a new todo to the project", {
            "description": StringField(description="Todo description"),
            "area": StringField(optional=True, description="Todo area/category"),
        }, _add_todo),
        tool("gsd_check_todos", "Check status of todos across the project", {
            "area": StringField(optional=True, description="Filter by area/category"),
        }, _check_todos),
        tool("gsd_resume_work", "Resume work on a paused project", {}, _resume_work),
        tool("gsd_pause_work", "Pause current work session and save context", {
            "notes": StringField(optional=True, description="Notes about where work was paused"),
        }, _pause_work),
        tool("gsd_audit_milestone", "Audit milestone completeness and readiness", {}, _audit_milestone),
        tool("gsd_verify_phase", "Verify a phase before considering it complete", {
            "phase": _phase("Phase number to verify"),
        }, _verify_phase),
        tool("gsd_execute_plan", "Execute a specific plan within a phase", {
            "phase": NumberField(description="Phase number"),
            "plan": NumberField(description="Plan number to execute"),
        }, _execute_plan),
        tool("gsd_diagnose_issues", "Diagnose project issues and inconsistencies", {}, _diagnose_issues),
        tool("gsd_set_profile", "Set the model profile (quality/balanced/budget)", {
            "profile": EnumField(values=("quality", "balanced", "budget"), description="Model profile to use"),
        }, _set_profile),
        tool("gsd_settings", "Configure GSD settings", {
            "key": StringField(optional=True, description="Setting key to get/set"),
            "value": StringField(optional=True, description="Setting value (if setting a key)"),
            "list": BooleanField(optional=True, description="List all settings"),
        }, _settings),
        tool("gsd_list_phase_assumptions", "List assumptions for a specific phase", {
            "phase": _phase("Phase number to list assumptions for"),
        }, _list_phase_assumptions),
        tool("gsd_plan_milestone_gaps", "Identify gaps in the current milestone plan", {}, _plan_milestone_gaps),
        tool("gsd_discovery_phase", "Initial project discovery and analysis", {}, _discovery_phase),
        tool("gsd_transition", "Transition between work sessions or contexts", {
            "from": StringField(optional=True, description="What you're transitioning from"),
            "to": StringField(optional=True, description="What you're transitioning to"),
        }, _transition),
    ]
