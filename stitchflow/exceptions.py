"""Typed exception hierarchy. Every error stitchflow can raise."""


class StitchflowError(Exception):
    """Base exception for all stitchflow errors."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class CredentialMissing(StitchflowError):
    """No credential supplied by the request and none configured."""
    pass


class MCPConnectionError(StitchflowError):
    """Network or transport failure talking to the MCP endpoint."""
    def __init__(self, message: str, server_url: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.server_url = server_url


class MCPAuthError(StitchflowError):
    """The MCP endpoint rejected the credential."""
    def __init__(self, message: str, status_code: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class MCPToolError(StitchflowError):
    """The remote tool ran but reported an error."""
    def __init__(self, message: str, tool_name: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.tool_name = tool_name


class UpstreamMalformed(StitchflowError):
    """Response body was not JSON or did not have the JSON-RPC shape."""
    def __init__(self, message: str, tool_name: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.tool_name = tool_name


class ExtractionFailure(StitchflowError):
    """A required identifier could not be found in a response."""
    def __init__(self, message: str, pattern: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.pattern = pattern


class CodegenError(StitchflowError):
    """The code-generation LLM failed or returned no HTML document."""
    pass


class InvalidRequest(StitchflowError):
    """Inbound request failed validation (e.g. blank prompt)."""
    pass
