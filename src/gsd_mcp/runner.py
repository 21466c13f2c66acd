"""
External Tool Proxy — run gsd-tools.js as an opaque subprocess

The proxy never interprets the tool's output; it only relays stdout/stderr.
A run is bounded by a wall-clock timeout and a combined output budget.
Spawn errors, timeouts, overflow and non-zero exits all surface as
ExternalToolFailure. Nothing is retried.
"""

import asyncio
import shlex
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from gsd_mcp.config import RuntimeConfig
from gsd_mcp.errors import ExternalToolFailure, StartupConfigurationError
from gsd_mcp.paths import resolve_project_path
from gsd_mcp.server.logger import get_logger

log = get_logger("runner")

_CHUNK = 64 * 1024


@dataclass(frozen=True)
class ToolOutput:
    stdout: str
    stderr: str


class _OutputOverflow(Exception):
    pass


class _Budget:
    """Byte allowance shared by stdout and stderr."""

    def __init__(self, limit: int):
        self.remaining = limit

    def spend(self, n: int):
        self.remaining -= n
        if self.remaining < 0:
            raise _OutputOverflow()


class ToolRunner:
    """Spawns ``<node> <gsd-tools.js> <command> <args...>`` in a project dir."""

    def __init__(self, config: RuntimeConfig):
        if config.tool_entry_point is None:
            raise StartupConfigurationError("gsd-tools entry point has not been resolved")
        self._config = config

    @property
    def entry_point(self):
        return self._config.tool_entry_point

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[str] = None,
    ) -> ToolOutput:
        project = resolve_project_path(cwd)
        argv = [self._config.node_executable, str(self.entry_point), command, *args]
        cmdline = shlex.join(argv)
        timeout = self._config.tool_timeout

        log.info(f"Running {cmdline} (cwd={project})")

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(project),
            )
        except OSError as exc:
            log.error(f"Spawn failed for {cmdline}: {exc}")
            raise ExternalToolFailure(f"gsd-tools failed: {exc}") from exc

        budget = _Budget(self._config.max_output_bytes)
        try:
            out, err = await asyncio.wait_for(self._collect(proc, budget), timeout=timeout)
        except asyncio.TimeoutError:
            await _kill(proc)
            log.error(f"Timed out after {timeout:g}s: {cmdline}")
            raise ExternalToolFailure(
                f"gsd-tools failed: Command timed out after {timeout:g}s: {cmdline}"
            ) from None
        except _OutputOverflow:
            await _kill(proc)
            log.error(f"Output exceeded {self._config.max_output_bytes} bytes: {cmdline}")
            raise ExternalToolFailure(
                f"gsd-tools failed: output exceeded {self._config.max_output_bytes} bytes: {cmdline}"
            ) from None

        stdout = out.decode("utf-8", errors="replace")
        stderr = err.decode("utf-8", errors="replace")

        if proc.returncode != 0:
            log.warning(f"Exit {proc.returncode}: {cmdline}")
            message = f"Command failed (exit {proc.returncode}): {cmdline}"
            if stderr.strip():
                message += f"\n{stderr.strip()}"
            raise ExternalToolFailure(f"gsd-tools failed: {message}")

        return ToolOutput(stdout=stdout, stderr=stderr)

    async def _collect(self, proc, budget: _Budget) -> Tuple[bytes, bytes]:
        out, err = await asyncio.gather(
            _drain(proc.stdout, budget),
            _drain(proc.stderr, budget),
        )
        await proc.wait()
        return out, err


async def _drain(stream: asyncio.StreamReader, budget: _Budget) -> bytes:
    chunks: List[bytes] = []
    while True:
        chunk = await stream.read(_CHUNK)
        if not chunk:
            break
        budget.spend(len(chunk))
        chunks.append(chunk)
    return b"".join(chunks)


async def _kill(proc):
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()
