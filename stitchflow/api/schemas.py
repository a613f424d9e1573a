"""Pydantic models for API request/response."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ── Requests ──

class CredentialOverrides(BaseModel):
    """Per-request settings sent by the UI. Only the credential is honoured."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    # Older UI builds send the token as stitchKey or deepSeekKey.
    stitch_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("stitch_key", "stitchKey", "deepSeekKey", "access_token"),
    )


class GenerateRequest(BaseModel):
    prompt: Optional[str] = Field(default=None, max_length=20000)   # blank → 400 from the handler
    config: Optional[CredentialOverrides] = None
    interaction_id: Optional[str] = Field(default=None, max_length=1000)


# ── Responses ──

class GenerateResponse(BaseModel):
    success: bool
    logs: list[str]
    code: Optional[str] = None
    version: Optional[int] = None
    error: Optional[str] = None
    interaction_id: Optional[str] = None    # pass back to resume at code retrieval
    project_id: Optional[str] = None
    screen_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    services: dict[str, bool]
