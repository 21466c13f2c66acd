"""
Resource Catalog — GSD markdown documents as gsd:// resources

URIs:
  gsd://templates/<sub/path/>name   -> get-shit-done/templates/<sub/path/>name.md
  gsd://workflows/<sub/path/>name   -> get-shit-done/workflows/...
  gsd://references/<sub/path/>name  -> get-shit-done/references/...
  gsd://agents/name                 -> agents/name.md (gsd-* only in listings)

Listings are recomputed on every call; files may change between calls.
"""

import asyncio
import os
import re
from pathlib import Path
from typing import Any, Dict, List

from gsd_mcp.config import RuntimeConfig
from gsd_mcp.errors import AccessDenied, ResourceNotFound
from gsd_mcp.server.logger import get_logger

log = get_logger("resources")

SCHEME = "gsd"
MIME_TYPE = "text/markdown"
DOCUMENT_CATEGORIES = ("templates", "workflows", "references")
AGENT_CATEGORY = "agents"
AGENT_PREFIX = "gsd-"

_URI_RE = re.compile(rf"^{SCHEME}://(.+)$")


class ResourceCatalog:
    def __init__(self, config: RuntimeConfig):
        self._gsd_dir = config.gsd_dir
        self._agents_dir = config.installation_root / AGENT_CATEGORY

    def base_dir(self, category: str) -> Path:
        if category in DOCUMENT_CATEGORIES:
            return self._gsd_dir / category
        if category == AGENT_CATEGORY:
            return self._agents_dir
        raise ResourceNotFound(f"Unknown resource category: {category}")

    # -- listing --

    def list_resources(self) -> List[Dict[str, Any]]:
        resources: List[Dict[str, Any]] = []
        for category in DOCUMENT_CATEGORIES:
            resources.extend(_walk(self._gsd_dir / category, category))
        resources.extend(self._list_agents())
        return resources

    def _list_agents(self) -> List[Dict[str, Any]]:
        if not self._agents_dir.is_dir():
            return []
        agents = []
        for path in sorted(self._agents_dir.iterdir()):
            if not path.is_file() or not path.name.startswith(AGENT_PREFIX) or path.suffix != ".md":
                continue
            agents.append({
                "uri": f"{SCHEME}://{AGENT_CATEGORY}/{path.stem}",
                "name": path.name,
                "mimeType": MIME_TYPE,
                "description": f"Agent: {path.stem[len(AGENT_PREFIX):]}",
            })
        return agents

    # -- reading --

    def locate(self, uri: str) -> Path:
        """Map a URI to a file path inside its category's base directory.

        Raises ResourceNotFound for malformed URIs and unknown categories and
        AccessDenied when the normalised path leaves the base directory.
        """
        match = _URI_RE.match(uri)
        if not match:
            raise ResourceNotFound(f"Invalid GSD resource URI: {uri}")

        category, *rest = match.group(1).split("/")
        base_dir = self.base_dir(category)
        file_name = rest.pop() if rest else ""
        if not file_name:
            raise ResourceNotFound(f"Resource not found: {uri}")

        file_path = os.path.join(str(base_dir), *rest, f"{file_name}.md")

        resolved_path = os.path.normpath(os.path.abspath(file_path))
        resolved_base = os.path.normpath(os.path.abspath(str(base_dir)))
        if not resolved_path.startswith(resolved_base.rstrip(os.sep) + os.sep):
            log.warning(f"Access denied for {uri}: {resolved_path} outside {resolved_base}")
            raise AccessDenied("Access denied: path outside allowed directory")

        return Path(resolved_path)

    async def read_resource(self, uri: str) -> str:
        path = self.locate(uri)
        if not path.is_file():
            raise ResourceNotFound(f"Resource not found: {uri}")
        return await asyncio.to_thread(path.read_text, encoding="utf-8")


def _walk(directory: Path, prefix: str) -> List[Dict[str, Any]]:
    """Recursively list .md files, keeping directory nesting in the URI."""
    if not directory.is_dir():
        return []
    resources: List[Dict[str, Any]] = []
    for entry in sorted(directory.iterdir()):
        if entry.is_file() and entry.suffix == ".md":
            resources.append({
                "uri": f"{SCHEME}://{prefix}/{entry.stem}",
                "name": entry.name,
                "mimeType": MIME_TYPE,
                "description": f"{prefix}/{entry.stem}",
            })
        elif entry.is_dir():
            resources.extend(_walk(entry, f"{prefix}/{entry.name}"))
    return resources
