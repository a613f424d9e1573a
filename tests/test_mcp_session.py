"""MCPSessionInvoker tests with the MCP SDK transport and session patched out."""

from contextlib import asynccontextmanager
from unittest.mock import patch

import httpx
import pytest
from mcp.shared.exceptions import McpError
from mcp.types import CallToolResult, ErrorData, TextContent

from stitchflow.exceptions import MCPAuthError, MCPConnectionError, MCPToolError
from stitchflow.mcp.client import result_text
from stitchflow.mcp.session import MCPSessionInvoker

URL = "https://stitch.test/mcp"


class _FakeSession:
    """Stands in for mcp.ClientSession; behaviour set via class attributes."""

    reply = None
    calls: list = []

    def __init__(self, read, write):
        self.initialized = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def initialize(self):
        self.initialized = True

    async def call_tool(self, name, arguments):
        _FakeSession.calls.append((name, arguments, self.initialized))
        if isinstance(_FakeSession.reply, BaseException):
            raise _FakeSession.reply
        return _FakeSession.reply


def _patched(reply, connect_error=None, captured=None):
    _FakeSession.reply = reply
    _FakeSession.calls = []

    @asynccontextmanager
    async def fake_sse_client(url, headers=None, **kwargs):
        if captured is not None:
            captured["url"] = url
            captured["headers"] = headers
        if connect_error is not None:
            raise connect_error
        yield ("read-stream", "write-stream")

    return (
        patch("stitchflow.mcp.session.sse_client", new=fake_sse_client),
        patch("stitchflow.mcp.session.ClientSession", new=_FakeSession),
    )


def _ok(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


@pytest.mark.asyncio
async def test_invoke_returns_result_dict():
    captured = {}
    sse_patch, session_patch = _patched(_ok("projects/s1"), captured=captured)
    with sse_patch, session_patch:
        result = await MCPSessionInvoker(URL).invoke("create_project", {"title": "T"}, "key-1")

    assert result_text(result) == "projects/s1"
    assert captured["url"] == URL
    assert captured["headers"] == {"X-Goog-Api-Key": "key-1"}
    assert _FakeSession.calls == [("create_project", {"title": "T"}, True)]


@pytest.mark.asyncio
async def test_bearer_scheme_header():
    captured = {}
    sse_patch, session_patch = _patched(_ok("x"), captured=captured)
    with sse_patch, session_patch:
        await MCPSessionInvoker(URL, auth_scheme="bearer").invoke("get_screen", {}, "tok")
    assert captured["headers"] == {"Authorization": "Bearer tok"}


@pytest.mark.asyncio
async def test_is_error_result_is_tool_error():
    reply = CallToolResult(content=[TextContent(type="text", text="no such screen")], isError=True)
    sse_patch, session_patch = _patched(reply)
    with sse_patch, session_patch:
        with pytest.raises(MCPToolError) as exc_info:
            await MCPSessionInvoker(URL).invoke("get_screen", {}, "tok")
    assert "no such screen" in str(exc_info.value)


@pytest.mark.asyncio
async def test_mcp_error_is_tool_error():
    sse_patch, session_patch = _patched(McpError(ErrorData(code=-32602, message="bad arguments")))
    with sse_patch, session_patch:
        with pytest.raises(MCPToolError):
            await MCPSessionInvoker(URL).invoke("get_screen", {}, "tok")


@pytest.mark.asyncio
async def test_auth_shaped_mcp_error_is_auth_error():
    sse_patch, session_patch = _patched(McpError(ErrorData(code=-32001, message="Unauthenticated request")))
    with sse_patch, session_patch:
        with pytest.raises(MCPAuthError):
            await MCPSessionInvoker(URL).invoke("get_screen", {}, "tok")


@pytest.mark.asyncio
async def test_connect_failure_is_connection_error():
    sse_patch, session_patch = _patched(_ok("x"), connect_error=httpx.ConnectError("refused"))
    with sse_patch, session_patch:
        with pytest.raises(MCPConnectionError):
            await MCPSessionInvoker(URL).invoke("get_screen", {}, "tok")
    assert _FakeSession.calls == []


@pytest.mark.asyncio
async def test_http_401_during_handshake_is_auth_error():
    request = httpx.Request("GET", URL)
    error = httpx.HTTPStatusError("401", request=request, response=httpx.Response(401, request=request))
    sse_patch, session_patch = _patched(_ok("x"), connect_error=error)
    with sse_patch, session_patch:
        with pytest.raises(MCPAuthError) as exc_info:
            await MCPSessionInvoker(URL).invoke("get_screen", {}, "tok")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_exception_group_is_unwrapped():
    group = ExceptionGroup("task group", [httpx.ConnectError("refused")])
    sse_patch, session_patch = _patched(_ok("x"), connect_error=group)
    with sse_patch, session_patch:
        with pytest.raises(MCPConnectionError):
            await MCPSessionInvoker(URL).invoke("get_screen", {}, "tok")


@pytest.mark.asyncio
async def test_empty_credential_rejected():
    with pytest.raises(ValueError):
        await MCPSessionInvoker(URL).invoke("get_screen", {}, "")


@pytest.mark.asyncio
async def test_unknown_auth_scheme_is_config_error_not_tool_error():
    sse_patch, session_patch = _patched(_ok("projects/s1"))
    with sse_patch, session_patch:
        with pytest.raises(ValueError, match="auth scheme"):
            await MCPSessionInvoker(URL, auth_scheme="basic").invoke("get_screen", {}, "tok")
    assert _FakeSession.calls == []
