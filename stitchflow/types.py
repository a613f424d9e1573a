"""All shared types and enums. Everything imports from here."""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, model_validator

flow_logger = logging.getLogger("stitchflow.flow")


# ── Enums ──────────────────────────────────────────────────────────────

class FlowState(str, Enum):
    START = "start"
    PROJECT_RESOLVED = "project_resolved"
    ARTIFACT_GENERATED = "artifact_generated"
    DETAIL_RETRIEVED = "detail_retrieved"
    DONE = "done"
    FAILED = "failed"


# Forward-only transitions. FAILED is reachable from every non-terminal state.
FLOW_TRANSITIONS: dict[FlowState, set[FlowState]] = {
    FlowState.START: {FlowState.PROJECT_RESOLVED, FlowState.DETAIL_RETRIEVED, FlowState.FAILED},
    FlowState.PROJECT_RESOLVED: {FlowState.ARTIFACT_GENERATED, FlowState.FAILED},
    FlowState.ARTIFACT_GENERATED: {FlowState.DETAIL_RETRIEVED, FlowState.DONE, FlowState.FAILED},
    FlowState.DETAIL_RETRIEVED: {FlowState.DONE, FlowState.FAILED},
    FlowState.DONE: set(),
    FlowState.FAILED: set(),
}


# ── Core Data Shapes ───────────────────────────────────────────────────

class GenerationRequest(BaseModel):
    """One inbound prompt with the credential resolved for it."""
    model_config = ConfigDict(frozen=True)

    prompt: str
    credential: str
    continuation_token: Optional[str] = None


class ProjectHandle(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str


class ArtifactDescriptor(BaseModel):
    """A generated screen and the raw text of its detail response."""
    model_config = ConfigDict(frozen=True)

    id: str
    raw_detail: str = ""


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str                         # "System", "Stitch", "Codegen", "Error"
    message: str

    def render(self) -> str:
        return f"[{self.source}] {self.message}"


class FlowLog(BaseModel):
    """Append-only trail of what a single flow did, in order.

    Entries are also emitted on the ``stitchflow.flow`` logger as they are
    added, so server logs and the UI log panel show the same lines.
    """
    _entries: list[LogEntry] = PrivateAttr(default_factory=list)

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def add(self, source: str, message: str) -> LogEntry:
        entry = LogEntry(source=source, message=message)
        self._entries.append(entry)
        level = logging.ERROR if source == "Error" else logging.INFO
        flow_logger.log(level, entry.render())
        return entry

    def lines(self) -> list[str]:
        return [e.render() for e in self.entries]

    def sources(self) -> list[str]:
        return [e.source for e in self.entries]


class FlowResult(BaseModel):
    """Terminal value of one flow invocation."""
    success: bool
    code: Optional[str] = None          # present iff success
    log: FlowLog
    continuation_token: Optional[str] = None
    error: Optional[str] = None
    version: Optional[int] = None       # ms timestamp; UI uses it to reload the iframe
    project_id: Optional[str] = None
    screen_id: Optional[str] = None
    state: FlowState = FlowState.DONE

    @model_validator(mode="after")
    def _code_iff_success(self) -> "FlowResult":
        if self.success and not self.code:
            raise ValueError("successful FlowResult requires code")
        if not self.success and self.code is not None:
            raise ValueError("failed FlowResult must not carry code")
        return self
