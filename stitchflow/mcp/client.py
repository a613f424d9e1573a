"""MCPClient — single-shot JSON-RPC tool calls against a remote MCP endpoint.

Each ``invoke`` builds one ``tools/call`` envelope, POSTs it, and classifies
the outcome:

  - transport failure (connect, read, timeout)   → MCPConnectionError
  - HTTP 401/403 or auth-shaped JSON-RPC error    → MCPAuthError
  - other non-2xx, JSON-RPC error, result.isError → MCPToolError
  - non-JSON body or missing ``result`` object    → UpstreamMalformed

There is no retry and no backoff. Callers decide what a failure means.
"""

from __future__ import annotations

import itertools
import json
import logging
import re
import time
from typing import Any, Optional

import httpx

from stitchflow.exceptions import (
    MCPAuthError,
    MCPConnectionError,
    MCPToolError,
    UpstreamMalformed,
)

logger = logging.getLogger(__name__)

_AUTH_ERROR_RE = re.compile(
    r"unauthori[sz]ed|unauthenticated|permission denied|api key not valid|"
    r"invalid (api[ _-]?key|credential|token|authentication)|expired",
    re.IGNORECASE,
)

# Seeded from wall-clock ms so ids stay unique across restarts.
_request_ids = itertools.count(int(time.time() * 1000))


def auth_headers(scheme: str, credential: str) -> dict[str, str]:
    """Return the credential header for the configured auth scheme."""
    scheme = scheme.lower()
    if scheme == "api_key":
        return {"X-Goog-Api-Key": credential}
    if scheme == "bearer":
        return {"Authorization": f"Bearer {credential}"}
    raise ValueError(f"Unknown auth scheme '{scheme}'")


def build_envelope(tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Build a JSON-RPC 2.0 ``tools/call`` request."""
    return {
        "jsonrpc": "2.0",
        "id": next(_request_ids),
        "method": "tools/call",
        "params": {"name": tool_name, "arguments": arguments},
    }


def result_text(result: Optional[dict[str, Any]]) -> str:
    """Join the text of every content item in a tool result."""
    if not isinstance(result, dict):
        return ""
    content = result.get("content")
    if not isinstance(content, list):
        return ""
    parts: list[str] = []
    for item in content:
        text = item.get("text") if isinstance(item, dict) else getattr(item, "text", None)
        if text is not None:
            parts.append(str(text))
    return "\n".join(parts)


def looks_like_auth_error(message: str, code: Any = None) -> bool:
    if code in (401, 403):
        return True
    return bool(_AUTH_ERROR_RE.search(message or ""))


def _parse_body(response: httpx.Response) -> Any:
    """Decode a JSON body, or the last JSON ``data:`` frame of an SSE body."""
    content_type = response.headers.get("content-type", "")
    text = response.text
    if content_type.startswith("text/event-stream"):
        payload = None
        for line in text.splitlines():
            if not line.startswith("data:"):
                continue
            try:
                payload = json.loads(line[5:].strip())
            except json.JSONDecodeError:
                continue
        if payload is None:
            raise ValueError("no JSON data frame in event stream")
        return payload
    return json.loads(text)


class MCPClient:
    """Sends ``tools/call`` requests to one MCP endpoint.

    Args:
        url:          MCP endpoint URL.
        auth_scheme:  "api_key" or "bearer".
        timeout:      Per-request timeout in seconds.
        http_client:  Shared AsyncClient (owned by the caller). When omitted a
                      client is opened per call.
        transport:    httpx transport for per-call clients (tests pass a
                      ``httpx.MockTransport`` here).
    """

    def __init__(
        self,
        url: str,
        auth_scheme: str = "api_key",
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.auth_scheme = auth_scheme
        self.timeout = timeout
        self._http_client = http_client
        self._transport = transport

    async def invoke(
        self, tool_name: str, arguments: dict[str, Any], credential: str
    ) -> dict[str, Any]:
        """Call a remote tool once and return its JSON-RPC ``result`` object.

        Raises:
            ValueError: If tool_name or credential is empty.
            MCPConnectionError, MCPAuthError, MCPToolError, UpstreamMalformed
        """
        if not tool_name:
            raise ValueError("tool_name is required")
        if not credential:
            raise ValueError("credential is required")

        payload = build_envelope(tool_name, arguments)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
            **auth_headers(self.auth_scheme, credential),
        }
        logger.debug("Calling MCP tool %s (id=%s) args=%s", tool_name, payload["id"], arguments)

        try:
            response = await self._post(payload, headers)
        except httpx.TransportError as exc:
            raise MCPConnectionError(
                f"Could not reach MCP endpoint {self.url}: {exc}",
                server_url=self.url,
            ) from exc

        body = response.text
        if response.status_code in (401, 403):
            raise MCPAuthError(
                f"Authentication failed ({response.status_code}): check that the "
                f"Stitch access token is valid and not expired. Response: {body}",
                status_code=response.status_code,
            )
        if response.is_error:
            raise MCPToolError(
                f"HTTP {response.status_code}: {body}",
                tool_name=tool_name,
                details={"status_code": response.status_code},
            )

        try:
            data = _parse_body(response)
        except ValueError as exc:
            raise UpstreamMalformed(
                f"Could not parse response JSON: {body[:500]}",
                tool_name=tool_name,
            ) from exc
        if not isinstance(data, dict):
            raise UpstreamMalformed(
                f"Expected a JSON-RPC object, got {type(data).__name__}",
                tool_name=tool_name,
            )

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                message = str(error.get("message") or json.dumps(error))
                code = error.get("code")
            else:
                message, code = str(error), None
            if looks_like_auth_error(message, code):
                raise MCPAuthError(f"MCP authentication error: {message}", status_code=code or 0)
            raise MCPToolError(f"MCP error: {message}", tool_name=tool_name, details={"code": code})

        result = data.get("result")
        if not isinstance(result, dict):
            raise UpstreamMalformed(
                f"MCP response for '{tool_name}' has no result object",
                tool_name=tool_name,
            )
        content = result.get("content", [])
        if not isinstance(content, list):
            raise UpstreamMalformed(
                f"MCP result for '{tool_name}' has content of type {type(content).__name__}, expected a list",
                tool_name=tool_name,
            )
        if result.get("isError"):
            raise MCPToolError(
                f"Tool '{tool_name}' returned error: {result_text(result) or 'unknown error'}",
                tool_name=tool_name,
            )

        logger.debug("MCP tool %s succeeded", tool_name)
        return result

    async def _post(self, payload: dict[str, Any], headers: dict[str, str]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(
                self.url, json=payload, headers=headers, timeout=self.timeout
            )
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            return await client.post(self.url, json=payload, headers=headers)


def build_invoker(cfg, http_client: Optional[httpx.AsyncClient] = None):
    """Return the tool invoker selected by ``cfg.transport``."""
    transport = cfg.transport.lower()
    if transport == "jsonrpc":
        return MCPClient(
            url=cfg.mcp_url,
            auth_scheme=cfg.auth_scheme,
            timeout=cfg.request_timeout,
            http_client=http_client,
        )
    if transport == "sse":
        from stitchflow.mcp.session import MCPSessionInvoker
        return MCPSessionInvoker(
            url=cfg.mcp_url,
            auth_scheme=cfg.auth_scheme,
            timeout=cfg.request_timeout,
        )
    raise ValueError(f"Unknown MCP transport '{cfg.transport}'")
