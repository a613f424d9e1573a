"""Tool invokers for the Stitch design-generation MCP service.

Two invokers share one contract, ``await invoke(tool_name, arguments,
credential) -> dict``:

    MCPClient           direct JSON-RPC 2.0 POST per call (default)
    MCPSessionInvoker   MCP SDK ClientSession over SSE, one session per call

``build_invoker(config)`` picks one from ``STITCH_TRANSPORT``.
"""

from stitchflow.mcp.client import MCPClient, build_invoker, result_text

__all__ = ["MCPClient", "build_invoker", "result_text"]
