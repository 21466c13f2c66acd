"""
STDIO Transport — newline-delimited JSON-RPC

Reads from stdin, writes to stdout.
NEVER pollutes stdout with logs.
"""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

from gsd_mcp.server.logger import get_logger
from gsd_mcp.server.protocol import PARSE_ERROR, ProtocolError

log = get_logger("transport")

_LINE_LIMIT = 16 * 1024 * 1024


class StdioTransport:
    """Line-oriented JSON over the process's stdin/stdout."""

    def __init__(self, stdin=None, stdout=None, line_limit: int = _LINE_LIMIT):
        self._stdin = stdin or sys.stdin.buffer
        self._line_limit = line_limit
        self._stdout_target = stdout
        self._reader: Optional[asyncio.StreamReader] = None
        self._stdout = None
        self.running = False

    async def start(self):
        """Attach an async reader to stdin."""
        loop = asyncio.get_running_loop()

        self._reader = asyncio.StreamReader(limit=self._line_limit)
        protocol = asyncio.StreamReaderProtocol(self._reader)
        await loop.connect_read_pipe(lambda: protocol, self._stdin)

        self._stdout = self._stdout_target or sys.stdout.buffer
        self.running = True
        log.info("Transport initialized")

    async def read_message(self) -> Optional[Any]:
        """
        Read one JSON-RPC message.
        Returns the decoded JSON value, or None on EOF.
        Raises ProtocolError(PARSE_ERROR) for a line that is not JSON or is
        longer than the line limit; the rest of that line is discarded.
        """
        if not self._reader:
            raise RuntimeError("Transport not started")

        while True:
            try:
                raw_bytes = await self._reader.readuntil(b"\n")
            except asyncio.IncompleteReadError as exc:
                raw_bytes = exc.partial
            except asyncio.LimitOverrunError:
                await self._skip_line()
                log.error(f"Dropped message longer than {self._line_limit} bytes")
                raise ProtocolError(PARSE_ERROR, f"Message exceeds {self._line_limit} bytes") from None
            if not raw_bytes:
                return None
            if raw_bytes.strip():
                break

        try:
            return json.loads(raw_bytes)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log.error(f"JSON parse error: {exc}")
            raise ProtocolError(PARSE_ERROR, f"Parse error: {exc}") from None

    async def _skip_line(self):
        """Consume input up to and including the next newline (or EOF)."""
        while True:
            try:
                await self._reader.readuntil(b"\n")
                return
            except asyncio.LimitOverrunError as exc:
                await self._reader.readexactly(exc.consumed)
            except asyncio.IncompleteReadError:
                return

    async def write_message(self, message: Dict[str, Any]):
        """Write a JSON-RPC message to stdout as a single line."""
        if self._stdout is None:
            raise RuntimeError("Transport not started")

        raw = json.dumps(message, separators=(",", ":"), ensure_ascii=False) + "\n"
        self._stdout.write(raw.encode("utf-8"))
        self._stdout.flush()

    async def close(self):
        self.running = False
        log.info("Transport closed")
