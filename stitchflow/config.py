"""Application configuration. All env vars defined here with defaults."""

from typing import Optional

from pydantic_settings import BaseSettings


class StitchflowConfig(BaseSettings):
    # ── App ──
    app_name: str = "stitchflow"
    debug: bool = False
    log_level: str = "INFO"

    # ── Stitch MCP ──
    access_token: Optional[str] = None         # default credential; request overrides win
    project_id: Optional[str] = None           # reuse this project instead of creating one
    mcp_url: str = "https://stitch.googleapis.com/mcp"
    auth_scheme: str = "api_key"               # "api_key" (X-Goog-Api-Key) or "bearer"
    transport: str = "jsonrpc"                 # "jsonrpc" (direct POST) or "sse" (MCP SDK session)
    request_timeout: float = 120.0             # seconds; screen generation is slow

    # ── Generation ──
    device_type: str = "DESKTOP"
    model_id: str = "GEMINI_3_FLASH"
    project_title_prefix: str = "AI Gen"
    code_source: str = "stitch"                # "stitch" or "llm"

    # ── Code generation (litellm) ──
    codegen_model: str = "deepseek/deepseek-chat"
    codegen_api_key: Optional[str] = None
    codegen_max_tokens: int = 8192
    codegen_temperature: float = 0.2

    # ── Server ──
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = ["*"]

    model_config = {"env_prefix": "STITCH_", "env_file": ".env", "extra": "ignore"}


config = StitchflowConfig()
