"""Test fixtures: stub Stitch MCP server, test config, fixed clock.

All tests should use these fixtures for consistency.
"""

import json
from datetime import datetime

import httpx
import pytest

from stitchflow.config import StitchflowConfig
from stitchflow.mcp.client import MCPClient

MCP_URL = "https://stitch.test/mcp"
FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5)


def text_result(text: str) -> dict:
    return {"content": [{"type": "text", "text": text}]}


class StubStitchServer:
    """Answers JSON-RPC ``tools/call`` requests from a canned table.

    ``replies`` maps tool name → reply. A reply may be:
      - str             → wrapped as a successful text result
      - dict            → returned verbatim as the JSON-RPC ``result``
      - httpx.Response  → sent as-is
      - Exception       → raised from the transport
    Every request is recorded in ``calls``.
    """

    def __init__(self, replies: dict | None = None):
        self.replies = dict(replies or {})
        self.calls: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        envelope = json.loads(request.content)
        name = envelope["params"]["name"]
        self.calls.append({
            "tool": name,
            "arguments": envelope["params"]["arguments"],
            "headers": dict(request.headers),
            "envelope": envelope,
        })
        reply = self.replies.get(name, "")
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        result = text_result(reply) if isinstance(reply, str) else reply
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": envelope["id"], "result": result})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self, auth_scheme: str = "api_key") -> MCPClient:
        return MCPClient(url=MCP_URL, auth_scheme=auth_scheme, transport=self.transport())

    @property
    def tools_called(self) -> list[str]:
        return [c["tool"] for c in self.calls]


@pytest.fixture
def config():
    """Test configuration: no default token, no default project."""
    return StitchflowConfig(
        _env_file=None,
        access_token=None,
        project_id=None,
        mcp_url=MCP_URL,
        code_source="stitch",
        log_level="DEBUG",
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def happy_server():
    """Stub server for the 'minimal todo list' scenario."""
    return StubStitchServer({
        "create_project": 'Created project "projects/abc123" titled AI Gen',
        "generate_screen_from_text": "Screen ready at projects/abc123/screens/xyz789",
        "get_screen": "<html><body><h1>Todo</h1></body></html>",
    })


@pytest.fixture
def make_server():
    """Factory for StubStitchServer instances with custom replies."""
    return StubStitchServer
