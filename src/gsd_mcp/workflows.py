"""Workflow document loader."""

import asyncio
from pathlib import Path
from typing import List

from gsd_mcp.config import RuntimeConfig
from gsd_mcp.errors import ResourceNotFound
from gsd_mcp.paths import GSD_DIR_NAME


class WorkflowLibrary:
    """Reads ``<name>.md`` from the installed workflows, then the dev checkout."""

    def __init__(self, config: RuntimeConfig):
        dirs: List[Path] = []
        for root in (config.installation_root, config.dev_root):
            if root is None:
                continue
            path = root / GSD_DIR_NAME / "workflows"
            if path not in dirs:
                dirs.append(path)
        self.search_dirs = dirs

    async def load(self, name: str) -> str:
        for directory in self.search_dirs:
            path = directory / f"{name}.md"
            if path.is_file():
                return await asyncio.to_thread(path.read_text, encoding="utf-8")
        raise ResourceNotFound(f"Workflow '{name}' not found")
