"""
Path Resolver — locate the GSD installation and the gsd-tools entry point

Search order for both:
  1. GSD_CONFIG_DIR override (used as-is, no existence check)
  2. ~/.gsd, ~/.claude, ~/.config/opencode, ~/.gemini (first that exists)
  3. the development checkout the server runs from
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from gsd_mcp.errors import StartupConfigurationError

if TYPE_CHECKING:
    from gsd_mcp.config import RuntimeConfig

GSD_DIR_NAME = "get-shit-done"
TOOL_RELATIVE_PATH = Path(GSD_DIR_NAME) / "bin" / "gsd-tools.js"

# Per-application config directories GSD gets installed into, relative to $HOME
HOME_CANDIDATES = (
    (".gsd",),
    (".claude",),
    (".config", "opencode"),
    (".gemini",),
)


def first_existing(
    candidates: Iterable[Path],
    default: Path,
    probe: Callable[[Path], bool] = os.path.exists,
) -> Path:
    """Return the first candidate accepted by ``probe``, else ``default``."""
    for candidate in candidates:
        if probe(candidate):
            return candidate
    return default


def candidate_roots(home: Path) -> List[Path]:
    return [home.joinpath(*parts) for parts in HOME_CANDIDATES]


def _require_home(config: "RuntimeConfig") -> Optional[Path]:
    if config.home is None and config.config_dir_override is None:
        raise StartupConfigurationError(
            "HOME or USERPROFILE environment variable must be set (or GSD_CONFIG_DIR)"
        )
    return config.home


def resolve_installation_root(config: "RuntimeConfig") -> Path:
    """Directory containing ``get-shit-done/`` and ``agents/``."""
    home = _require_home(config)
    if config.config_dir_override is not None:
        return config.config_dir_override

    return first_existing(
        candidate_roots(home),
        default=config.dev_root,
        probe=lambda root: (root / GSD_DIR_NAME).is_dir(),
    )


def resolve_tool_entry_point(config: "RuntimeConfig") -> Path:
    """Path of ``gsd-tools.js``; each candidate is probed for the file itself."""
    home = _require_home(config)
    if config.config_dir_override is not None:
        return config.config_dir_override / TOOL_RELATIVE_PATH

    return first_existing(
        [root / TOOL_RELATIVE_PATH for root in candidate_roots(home)],
        default=config.dev_root / TOOL_RELATIVE_PATH,
        probe=lambda path: path.is_file(),
    )


def resolve_project_path(cwd: Optional[str]) -> Path:
    """Absolute ``cwd`` is taken as-is; anything else means the process cwd."""
    if cwd and os.path.isabs(cwd):
        return Path(cwd)
    return Path(os.getcwd())
