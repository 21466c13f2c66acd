"""Live MCP protocol test: full handshake and calls against a spawned server."""

import asyncio
import json
import os
import signal
import sys

import pytest


async def send(proc, msg):
    """Send a JSON-RPC message and return the parsed response."""
    raw = json.dumps(msg) + "\n"
    proc.stdin.write(raw.encode())
    await proc.stdin.drain()

    if "id" not in msg:
        return None  # notification, no response

    line = await asyncio.wait_for(proc.stdout.readline(), timeout=10)
    return json.loads(line)


@pytest.fixture
def server_env(gsd_home, tmp_path):
    env = dict(os.environ)
    env.update({
        "HOME": str(gsd_home),
        "GSD_CONFIG_DIR": str(gsd_home / ".claude"),
        "GSD_NODE": sys.executable,
        "GSD_MCP_HOME": str(tmp_path / ".gsd-mcp"),
    })
    return env


@pytest.mark.asyncio
async def test_handshake(server_env, project):
    proc = await asyncio.create_subprocess_exec(
        sys.executable, "-m", "gsd_mcp", "server",
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
        env=server_env,
    )

    try:
        resp = await send(proc, {
            "jsonrpc": "2.0", "id": 1, "method": "initialize",
            "params": {
                "protocolVersion": "2024-11-05",
                "capabilities": {},
                "clientInfo": {"name": "test-client", "version": "1.0"},
            },
        })
        assert resp["result"]["serverInfo"]["name"] == "gsd-mcp-server"

        await send(proc, {"jsonrpc": "2.0", "method": "notifications/initialized"})

        resp = await send(proc, {"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
        assert len(resp["result"]["tools"]) == 31

        resp = await send(proc, {"jsonrpc": "2.0", "id": 3, "method": "resources/list"})
        uris = {r["uri"] for r in resp["result"]["resources"]}
        assert {"gsd://references/questioning", "gsd://agents/gsd-executor"} <= uris

        resp = await send(proc, {"jsonrpc": "2.0", "id": 4, "method": "prompts/list"})
        assert len(resp["result"]["prompts"]) == 4

        # Garbage on the wire gets a parse error and the session carries on
        proc.stdin.write(b"{not json\n")
        await proc.stdin.drain()
        line = await asyncio.wait_for(proc.stdout.readline(), timeout=10)
        assert json.loads(line)["error"]["code"] == -32700

        resp = await send(proc, {
            "jsonrpc": "2.0", "id": 5, "method": "tools/call",
            "params": {"name": "gsd_progress", "arguments": {"cwd": str(project)}},
        })
        assert f"progress table in {project}" in resp["result"]["content"][0]["text"]

        resp = await send(proc, {
            "jsonrpc": "2.0", "id": 6, "method": "resources/read",
            "params": {"uri": "gsd://workflows/../secret"},
        })
        assert resp["error"]["code"] == -32002

    finally:
        proc.stdin.close()
        await asyncio.wait_for(proc.wait(), timeout=10)

    assert proc.returncode == 0


async def _spawn(env, stderr=asyncio.subprocess.DEVNULL):
    return await asyncio.create_subprocess_exec(
        sys.executable, "-m", "gsd_mcp", "server",
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=stderr,
        env=env,
    )


async def _wait_for_log(proc, needle):
    while True:
        line = await asyncio.wait_for(proc.stderr.readline(), timeout=10)
        assert line, f"server exited before logging {needle!r}"
        if needle in line.decode("utf-8", errors="replace"):
            return


@pytest.mark.asyncio
async def test_oversized_line_does_not_end_session(server_env):
    proc = await _spawn(server_env)
    try:
        proc.stdin.write(b'{"jsonrpc":"2.0","id":1,"method":"ping","params":{"pad":"')
        proc.stdin.write(b"x" * (17 * 1024 * 1024))
        proc.stdin.write(b'"}}\n')
        await proc.stdin.drain()

        line = await asyncio.wait_for(proc.stdout.readline(), timeout=30)
        error = json.loads(line)
        assert error["id"] is None
        assert error["error"]["code"] == -32700

        resp = await send(proc, {"jsonrpc": "2.0", "id": 2, "method": "ping"})
        assert resp == {"jsonrpc": "2.0", "id": 2, "result": {}}
    finally:
        proc.stdin.close()
        await asyncio.wait_for(proc.wait(), timeout=10)

    assert proc.returncode == 0


@pytest.mark.asyncio
async def test_sigterm_when_idle_exits_cleanly(server_env):
    proc = await _spawn(server_env)
    try:
        resp = await send(proc, {"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert resp["result"] == {}

        proc.send_signal(signal.SIGTERM)
        await asyncio.wait_for(proc.wait(), timeout=10)
    finally:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()

    assert proc.returncode == 0


@pytest.mark.asyncio
async def test_sigterm_lets_request_in_flight_finish(server_env, tmp_path):
    proc = await _spawn(server_env, stderr=asyncio.subprocess.PIPE)
    try:
        resp = await send(proc, {"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert resp["result"] == {}

        proc.stdin.write((json.dumps({
            "jsonrpc": "2.0", "id": 2, "method": "tools/call",
            "params": {"name": "gsd_run_cli", "arguments": {"command": "nap 1.5", "cwd": str(tmp_path)}},
        }) + "\n").encode())
        await proc.stdin.drain()
        await _wait_for_log(proc, "Running ")

        proc.send_signal(signal.SIGTERM)

        line = await asyncio.wait_for(proc.stdout.readline(), timeout=10)
        resp = json.loads(line)
        assert resp["id"] == 2
        assert "isError" not in resp["result"]
        assert "rested" in resp["result"]["content"][0]["text"]

        await asyncio.wait_for(proc.wait(), timeout=10)
    finally:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()

    assert proc.returncode == 0
