"""MCPSessionInvoker — the same ``invoke`` contract over an MCP SDK session.

Opens an SSE transport and a ClientSession per call, initializes it, calls the
tool, and closes everything again. Slower than the direct JSON-RPC client but
speaks the full protocol handshake for servers that require it.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from mcp.client.session import ClientSession
from mcp.client.sse import sse_client
from mcp.shared.exceptions import McpError

from stitchflow.exceptions import MCPAuthError, MCPConnectionError, MCPToolError
from stitchflow.mcp.client import auth_headers, looks_like_auth_error, result_text

logger = logging.getLogger(__name__)


def _leaf(exc: BaseException) -> BaseException:
    """Unwrap task-group exception groups down to the first real error."""
    while isinstance(exc, BaseExceptionGroup) and exc.exceptions:
        exc = exc.exceptions[0]
    return exc


class MCPSessionInvoker:
    """Tool invoker backed by ``mcp.ClientSession`` over SSE."""

    def __init__(self, url: str, auth_scheme: str = "api_key", timeout: float = 120.0) -> None:
        self.url = url
        self.auth_scheme = auth_scheme
        self.timeout = timeout

    async def invoke(
        self, tool_name: str, arguments: dict[str, Any], credential: str
    ) -> dict[str, Any]:
        if not tool_name:
            raise ValueError("tool_name is required")
        if not credential:
            raise ValueError("credential is required")

        headers = auth_headers(self.auth_scheme, credential)
        try:
            result = await self._call(tool_name, arguments, headers)
        except Exception as exc:
            raise self._classify(_leaf(exc), tool_name) from exc

        data = result.model_dump(mode="json", exclude_none=True)
        if data.get("isError"):
            raise MCPToolError(
                f"Tool '{tool_name}' returned error: {result_text(data) or 'unknown error'}",
                tool_name=tool_name,
            )
        return data

    async def _call(self, tool_name: str, arguments: dict[str, Any], headers: dict[str, str]):
        async with sse_client(url=self.url, headers=headers, sse_read_timeout=self.timeout) as (read, write):
            async with ClientSession(read, write) as session:
                await session.initialize()
                logger.debug("MCP session open; calling %s", tool_name)
                return await session.call_tool(tool_name, arguments)

    def _classify(self, exc: BaseException, tool_name: str) -> Exception:
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            if status in (401, 403):
                return MCPAuthError(f"Authentication failed ({status}): {exc}", status_code=status)
            return MCPToolError(f"HTTP {status}: {exc}", tool_name=tool_name)
        if isinstance(exc, McpError):
            message = str(exc)
            code = getattr(getattr(exc, "error", None), "code", None)
            if looks_like_auth_error(message, code):
                return MCPAuthError(f"MCP authentication error: {message}", status_code=code or 0)
            return MCPToolError(f"MCP error: {message}", tool_name=tool_name)
        if isinstance(exc, (httpx.TransportError, OSError, TimeoutError)):
            return MCPConnectionError(
                f"Could not reach MCP endpoint {self.url}: {exc}", server_url=self.url
            )
        return MCPToolError(f"MCP tool '{tool_name}' raised: {exc}", tool_name=tool_name)
