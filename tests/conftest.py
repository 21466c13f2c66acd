"""Shared fixtures for gsd-mcp tests."""

import sys

import pytest

from gsd_mcp.config import RuntimeConfig

WORKFLOWS = [
    "new-project", "plan-phase", "execute-phase", "verify-work", "discuss-phase",
    "progress", "quick", "map-codebase", "new-milestone", "complete-milestone",
    "add-phase", "insert-phase", "remove-phase", "research-phase", "add-todo",
    "check-todos", "resume-project", "pause-work", "audit-milestone", "verify-phase",
    "execute-plan", "diagnose-issues", "set-profile", "settings",
    "list-phase-assumptions", "plan-milestone-gaps", "discovery-phase", "transition",
]

# Stands in for gsd-tools.js; run with the test interpreter instead of node.
FAKE_TOOL = '''\
import os
import sys
import time

cmd = sys.argv[1] if len(sys.argv) > 1 else ""
rest = sys.argv[2:]

if cmd == "progress":
    print("progress " + " ".join(rest) + " in " + os.getcwd())
elif cmd == "echo":
    print(" ".join(rest))
    sys.stderr.write("note\\n")
elif cmd == "silent":
    pass
elif cmd == "fail":
    sys.stderr.write("boom\\n")
    sys.exit(3)
elif cmd == "sleep":
    time.sleep(30)
elif cmd == "nap":
    time.sleep(float(rest[0]) if rest else 1.0)
    print("rested")
elif cmd == "flood":
    sys.stdout.write("x" * 200000)
    sys.stdout.flush()
else:
    sys.stderr.write("unknown command " + cmd + "\\n")
    sys.exit(1)
'''


@pytest.fixture
def gsd_home(tmp_path):
    """A fake $HOME with GSD installed under ~/.claude."""
    home = tmp_path / "home"
    root = home / ".claude"
    gsd = root / "get-shit-done"

    for name in WORKFLOWS:
        path = gsd / "workflows" / f"{name}.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"# Workflow {name}\n\nSteps for {name}.\n", encoding="utf-8")

    (gsd / "templates" / "research").mkdir(parents=True)
    (gsd / "templates" / "state.md").write_text("# State template\n", encoding="utf-8")
    (gsd / "templates" / "research" / "summary.md").write_text("# Summary template\n", encoding="utf-8")
    (gsd / "templates" / "notes.txt").write_text("not markdown\n", encoding="utf-8")

    (gsd / "references").mkdir()
    (gsd / "references" / "questioning.md").write_text("# Questioning\n", encoding="utf-8")

    (gsd / "bin").mkdir()
    (gsd / "bin" / "gsd-tools.js").write_text(FAKE_TOOL, encoding="utf-8")

    agents = root / "agents"
    agents.mkdir()
    (agents / "gsd-planner.md").write_text("# Planner agent\n", encoding="utf-8")
    (agents / "gsd-executor.md").write_text("# Executor agent\n", encoding="utf-8")
    (agents / "other-agent.md").write_text("# Not ours\n", encoding="utf-8")

    # Sibling of the base directories, for traversal tests
    (gsd / "secret.md").write_text("TOP SECRET\n", encoding="utf-8")

    return home


@pytest.fixture
def config(gsd_home, tmp_path):
    """Resolved RuntimeConfig pointing at the fake installation."""
    return RuntimeConfig(
        home=gsd_home,
        node_executable=sys.executable,
        tool_timeout=10.0,
        dev_root=tmp_path / "dev",
    ).resolve()


@pytest.fixture
def project(tmp_path):
    """An initialized GSD project directory."""
    project = tmp_path / "project"
    planning = project / ".planning"
    (planning / "phases" / "01-setup").mkdir(parents=True)
    (planning / "phases" / "02-build").mkdir()
    for name in ("PROJECT.md", "REQUIREMENTS.md", "ROADMAP.md"):
        (planning / name).write_text(f"# {name}\n", encoding="utf-8")
    (planning / "STATE.md").write_text(
        "# Project State\n\n"
        "## Current\n\nPhase 2 of 4, building.\n\n"
        "## Metrics\n\nVelocity: 3 plans/day\n",
        encoding="utf-8",
    )
    (project / ".git").mkdir()
    return project


@pytest.fixture
def tmp_gsd_mcp_dir(tmp_path):
    """Point Config.HOME_DIR at a temp directory for CLI tests."""
    from gsd_mcp import config as config_module

    home_dir = tmp_path / ".gsd-mcp"
    original = (config_module.Config.HOME_DIR, config_module.Config.CONFIG_FILE)
    config_module.Config.HOME_DIR = home_dir
    config_module.Config.CONFIG_FILE = home_dir / "config.env"

    yield home_dir

    config_module.Config.HOME_DIR, config_module.Config.CONFIG_FILE = original
