"""stitchflow — prompt-to-HTML previews through the Stitch design MCP service.

Usage:
    from stitchflow import StitchFlow, StitchflowConfig, MCPClient

    cfg = StitchflowConfig()
    flow = StitchFlow(MCPClient(cfg.mcp_url), cfg)
    result = await flow.run("a minimal todo list", credential="...")
"""

from stitchflow.config import StitchflowConfig
from stitchflow.core.flow import StitchFlow
from stitchflow.exceptions import (
    StitchflowError, CredentialMissing, InvalidRequest, MCPConnectionError,
    MCPAuthError, MCPToolError, UpstreamMalformed, ExtractionFailure, CodegenError,
)
from stitchflow.mcp.client import MCPClient
from stitchflow.types import (
    GenerationRequest, ProjectHandle, ArtifactDescriptor, LogEntry, FlowLog,
    FlowResult, FlowState,
)
from stitchflow.version import __version__

__all__ = [
    "StitchflowConfig", "StitchFlow", "MCPClient",
    "StitchflowError", "CredentialMissing", "InvalidRequest", "MCPConnectionError",
    "MCPAuthError", "MCPToolError", "UpstreamMalformed", "ExtractionFailure", "CodegenError",
    "GenerationRequest", "ProjectHandle", "ArtifactDescriptor", "LogEntry", "FlowLog",
    "FlowResult", "FlowState",
    "__version__",
]
