"""
GSD MCP Configuration — Unified settings for the MCP server

Load order: env vars > ~/.gsd-mcp/config.env > defaults

Server identity and logging live on ``Config`` (read once at import, like any
other module constant). Everything that drives path resolution and the
external tool lives on ``RuntimeConfig``, which is built exactly once at
startup and handed explicitly to every component that needs it.
"""

import dataclasses
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from gsd_mcp import __version__
from gsd_mcp.errors import StartupConfigurationError

# The server may live inside a GSD checkout (<repo>/mcp-server/src/gsd_mcp);
# the repo root is then the last-resort installation root.
DEV_ROOT = Path(__file__).resolve().parents[3]

DEFAULT_TOOL_TIMEOUT = 60.0
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024


class Config:
    # Server identity
    SERVER_NAME = "gsd-mcp-server"
    SERVER_VERSION = __version__
    PROTOCOL_VERSION = "2024-11-05"

    # Paths
    HOME_DIR = Path(os.environ.get("GSD_MCP_HOME", str(Path.home() / ".gsd-mcp")))
    CONFIG_FILE = HOME_DIR / "config.env"

    # Logging goes to stderr; stdout is reserved for protocol messages
    LOG_LEVEL = os.environ.get("GSD_MCP_LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.environ.get("GSD_MCP_LOG_FILE") or None

    @classmethod
    def ensure_dirs(cls):
        """Create the config directory."""
        cls.HOME_DIR.mkdir(parents=True, exist_ok=True)


def read_config_env(path: Path) -> Dict[str, str]:
    """Parse key=value pairs from a config.env file. Missing file -> {}."""
    values: Dict[str, str] = {}
    if not path.exists():
        return values
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key:
                values[key] = value
    return values


@dataclasses.dataclass(frozen=True)
class RuntimeConfig:
    """Process-wide settings, immutable after startup."""

    home: Optional[Path]
    config_dir_override: Optional[Path] = None
    node_executable: str = "node"
    tool_timeout: float = DEFAULT_TOOL_TIMEOUT
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    dev_root: Path = DEV_ROOT

    # Filled in by resolve()
    installation_root: Optional[Path] = None
    tool_entry_point: Optional[Path] = None

    @property
    def resolved(self) -> bool:
        return self.installation_root is not None and self.tool_entry_point is not None

    def resolve(self) -> "RuntimeConfig":
        """Run the path resolver and return a copy with both paths set."""
        from gsd_mcp.paths import resolve_installation_root, resolve_tool_entry_point

        return dataclasses.replace(
            self,
            installation_root=resolve_installation_root(self),
            tool_entry_point=resolve_tool_entry_point(self),
        )

    @property
    def gsd_dir(self) -> Path:
        """The ``get-shit-done`` directory inside the installation root."""
        if self.installation_root is None:
            raise StartupConfigurationError("Installation root has not been resolved")
        return self.installation_root / "get-shit-done"


def load_runtime_config(
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
) -> RuntimeConfig:
    """Build a RuntimeConfig from the environment, falling back to config.env."""
    if environ is None:
        environ = os.environ
    if config_file is None:
        config_file = Config.CONFIG_FILE

    env: Dict[str, str] = read_config_env(config_file)
    env.update({k: v for k, v in environ.items() if v != ""})

    home = env.get("HOME") or env.get("USERPROFILE")
    override = env.get("GSD_CONFIG_DIR")

    return RuntimeConfig(
        home=Path(home) if home else None,
        config_dir_override=Path(override).expanduser() if override else None,
        node_executable=env.get("GSD_NODE", "node"),
        tool_timeout=_parse_number(env, "GSD_TOOL_TIMEOUT", DEFAULT_TOOL_TIMEOUT, float),
        max_output_bytes=_parse_number(env, "GSD_TOOL_MAX_OUTPUT", DEFAULT_MAX_OUTPUT_BYTES, int),
    )


def _parse_number(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise StartupConfigurationError(f"{key} must be a number, got {raw!r}") from None
    if value <= 0:
        raise StartupConfigurationError(f"{key} must be positive, got {raw!r}")
    return value
