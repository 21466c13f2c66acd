"""
Prompt Catalog — templated user messages for the main GSD entry points

Arguments arrive as strings. Flags count as set only when they read "true".
Optional arguments that were not supplied leave no trace in the text.
"""

import copy
from typing import Any, Callable, Dict, List, Mapping, Optional

from gsd_mcp.errors import InvalidPromptArguments, UnknownPrompt

PROMPTS: List[Dict[str, Any]] = [
    {
        "name": "gsd_new_project",
        "description": "Configure a new GSD project",
        "arguments": [
            {"name": "name", "description": "Project name", "required": True},
            {"name": "description", "description": "What do you want to build?", "required": True},
            {"name": "auto", "description": "Auto mode (skip interactive questioning)", "required": False},
        ],
    },
    {
        "name": "gsd_discuss_phase",
        "description": "Discuss phase implementation details",
        "arguments": [
            {"name": "phase", "description": "Phase number", "required": True},
            {"name": "focus", "description": "Focus area (ui, api, content, organization)", "required": False},
        ],
    },
    {
        "name": "gsd_plan_phase",
        "description": "Plan a phase with options",
        "arguments": [
            {"name": "phase", "description": "Phase number", "required": True},
            {"name": "skip_research", "description": "Skip research step", "required": False},
            {"name": "skip_verify", "description": "Skip plan verification", "required": False},
        ],
    },
    {
        "name": "gsd_quick",
        "description": "Quick ad-hoc task",
        "arguments": [
            {"name": "task", "description": "What do you want to do?", "required": True},
        ],
    },
]


def _flag(args: Mapping[str, str], key: str) -> bool:
    return args.get(key, "").lower() == "true"


def _render_new_project(args: Mapping[str, str]) -> str:
    text = "Initialize a new GSD project.\n\n"
    text += f"Project name: {args['name']}\n"
    text += f"Description: {args['description']}\n"
    if _flag(args, "auto"):
        text += "\nAuto mode enabled - will run without interactive questioning.\n"
    text += (
        "\nThis will create:\n"
        "- .planning/PROJECT.md\n"
        "- .planning/REQUIREMENTS.md\n"
        "- .planning/ROADMAP.md\n"
        "- .planning/STATE.md"
    )
    return text


def _render_discuss_phase(args: Mapping[str, str]) -> str:
    text = f"Discuss phase {args['phase']} implementation details.\n\n"
    if args.get("focus"):
        text += f"Focus area: {args['focus']}\n\n"
    text += "This will help capture your implementation preferences before planning."
    return text


def _render_plan_phase(args: Mapping[str, str]) -> str:
    text = f"Plan phase {args['phase']}.\n\n"
    if _flag(args, "skip_research"):
        text += "- Skip research: Yes\n"
    if _flag(args, "skip_verify"):
        text += "- Skip verification: Yes\n"
    text += "\nThis will research, create plans, and verify them."
    return text


def _render_quick(args: Mapping[str, str]) -> str:
    return f"Quick task: {args['task']}\n\nThis will create an atomic plan and execute it immediately."


_RENDERERS: Dict[str, Callable[[Mapping[str, str]], str]] = {
    "gsd_new_project": _render_new_project,
    "gsd_discuss_phase": _render_discuss_phase,
    "gsd_plan_phase": _render_plan_phase,
    "gsd_quick": _render_quick,
}


def list_prompts() -> List[Dict[str, Any]]:
    return copy.deepcopy(PROMPTS)


def get_prompt(name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Render a prompt into a single user message."""
    prompt = next((p for p in PROMPTS if p["name"] == name), None)
    if prompt is None:
        raise UnknownPrompt(name)

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise InvalidPromptArguments(f"Arguments for prompt {name} must be an object")

    args = {k: str(v) for k, v in arguments.items() if v is not None}
    missing = [
        a["name"] for a in prompt["arguments"]
        if a.get("required") and not args.get(a["name"], "").strip()
    ]
    if missing:
        raise InvalidPromptArguments(
            f"Missing required argument(s) for prompt {name}: {', '.join(missing)}"
        )

    return {
        "description": prompt["description"],
        "messages": [
            {
                "role": "user",
                "content": {"type": "text", "text": _RENDERERS[name](args)},
            },
        ],
    }
