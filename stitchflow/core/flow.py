"""StitchFlow — prompt → Stitch project → screen → HTML.

One ``run`` per inbound prompt:

    start ─► project_resolved ─► artifact_generated ─► detail_retrieved ─► done
      │                                   │                                 ▲
      │                                   └──── (no screen id) ─────────────┤
      └──────── continuation token ─────────────► detail_retrieved ─────────┘

Any failure moves to ``failed``. Every step is logged to the FlowLog before and
after it runs; the FlowLog is returned to the UI with the result.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from stitchflow.core.extractor import (
    PROJECT_ID_PATTERN,
    SCREEN_ID_PATTERN,
    extract_code_fragment,
    extract_identifier,
    find_markup,
    make_continuation_token,
    parse_continuation_token,
    placeholder_fragment,
)
from stitchflow.exceptions import ExtractionFailure, StitchflowError
from stitchflow.mcp.client import result_text
from stitchflow.types import (
    FLOW_TRANSITIONS,
    ArtifactDescriptor,
    FlowLog,
    FlowResult,
    FlowState,
    GenerationRequest,
    ProjectHandle,
)

logger = logging.getLogger(__name__)

TOOL_CREATE_PROJECT = "create_project"
TOOL_GENERATE_SCREEN = "generate_screen_from_text"
TOOL_GET_SCREEN = "get_screen"


class _StateTracker:
    """Enforces the forward-only transition table for one run."""

    def __init__(self) -> None:
        self.state = FlowState.START

    def advance(self, new_state: FlowState) -> None:
        if new_state not in FLOW_TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal flow transition {self.state.value} → {new_state.value}")
        self.state = new_state


class StitchFlow:
    """Sequences the Stitch tool calls for one prompt.

    Args:
        invoker:         Anything with ``await invoke(tool_name, arguments, credential)``.
        config:          StitchflowConfig; only read, never mutated.
        code_generator:  Optional CodeGenerator used when ``config.code_source == "llm"``.
        clock:           Returns "now"; injectable for tests.
    """

    def __init__(self, invoker, config, code_generator=None, clock: Optional[Callable[[], datetime]] = None):
        self._invoker = invoker
        self._config = config
        self._clock = clock or datetime.now
        self._code_generator = None
        if config.code_source == "llm":
            if code_generator is None:
                from stitchflow.llm.client import CodeGenerator
                code_generator = CodeGenerator.from_config(config)
            self._code_generator = code_generator

    async def run(
        self, prompt: str, credential: str, continuation_token: Optional[str] = None
    ) -> FlowResult:
        """Run the flow to completion. Never raises; failures come back as results."""
        return await self.run_request(GenerationRequest(
            prompt=prompt, credential=credential, continuation_token=continuation_token,
        ))

    async def run_request(self, request: GenerationRequest) -> FlowResult:
        log = FlowLog()
        tracker = _StateTracker()
        project: Optional[ProjectHandle] = None
        screen_id: Optional[str] = None

        try:
            log.add("System", f"Received design task: {request.prompt}")

            if request.continuation_token:
                parsed = parse_continuation_token(request.continuation_token)
                if parsed is None:
                    raise ExtractionFailure(
                        "Continuation token does not name a project and screen",
                        pattern=SCREEN_ID_PATTERN,
                    )
                project, screen_id = ProjectHandle(id=parsed[0]), parsed[1]
                log.add("System", f"Resuming project {project.id} at screen {screen_id}")
            else:
                project = await self._resolve_project(log, request.credential)
                tracker.advance(FlowState.PROJECT_RESOLVED)

                screen_id = await self._generate_screen(log, project, request)
                tracker.advance(FlowState.ARTIFACT_GENERATED)

                if screen_id is None:
                    log.add("Stitch", "Design saved, but no screen id was returned; showing a placeholder.")
                    tracker.advance(FlowState.DONE)
                    return self._finish(log, placeholder_fragment(project.id), project, None)

            artifact = await self._retrieve_detail(log, project, screen_id, request.credential)
            tracker.advance(FlowState.DETAIL_RETRIEVED)

            code = await self._render_code(log, request.prompt, project, artifact)
            tracker.advance(FlowState.DONE)
            return self._finish(log, code, project, artifact.id)

        except Exception as exc:
            if not isinstance(exc, StitchflowError):
                logger.exception("Unexpected error in design flow")
            message = str(exc) or type(exc).__name__
            log.add("Error", message)
            return FlowResult(
                success=False,
                log=log,
                error=message,
                project_id=project.id if project else None,
                screen_id=screen_id,
                state=FlowState.FAILED,
            )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _resolve_project(self, log: FlowLog, credential: str) -> ProjectHandle:
        if self._config.project_id:
            log.add("Stitch", f"Reusing configured project: {self._config.project_id}")
            return ProjectHandle(id=self._config.project_id)

        log.add("Stitch", "No project id configured; creating a new project...")
        title = f"{self._config.project_title_prefix} - {self._clock().strftime('%H:%M:%S')}"
        result = await self._call(TOOL_CREATE_PROJECT, {"title": title}, credential)
        project_id = extract_identifier(result_text(result), PROJECT_ID_PATTERN)
        if not project_id:
            raise ExtractionFailure(
                "Project creation failed or project id could not be resolved",
                pattern=PROJECT_ID_PATTERN,
            )
        log.add("Stitch", f"Project ready: {project_id}")
        return ProjectHandle(id=project_id)

    async def _generate_screen(
        self, log: FlowLog, project: ProjectHandle, request: GenerationRequest
    ) -> Optional[str]:
        log.add("Stitch", f"Generating screen with {self._config.model_id}...")
        result = await self._call(
            TOOL_GENERATE_SCREEN,
            {
                "projectId": project.id,
                "prompt": request.prompt,
                "deviceType": self._config.device_type,
                "modelId": self._config.model_id,
            },
            request.credential,
        )
        screen_id = extract_identifier(result_text(result), SCREEN_ID_PATTERN)
        if screen_id:
            log.add("Stitch", f"Screen generated: {screen_id}")
        return screen_id

    async def _retrieve_detail(
        self, log: FlowLog, project: ProjectHandle, screen_id: str, credential: str
    ) -> ArtifactDescriptor:
        log.add("Stitch", f"Retrieving screen detail for {screen_id}...")
        result = await self._call(
            TOOL_GET_SCREEN, {"projectId": project.id, "screenId": screen_id}, credential
        )
        return ArtifactDescriptor(id=screen_id, raw_detail=result_text(result))

    async def _render_code(
        self, log: FlowLog, prompt: str, project: ProjectHandle, artifact: ArtifactDescriptor
    ) -> str:
        has_markup = find_markup(artifact.raw_detail) is not None
        if not has_markup and self._code_generator is not None:
            log.add("Codegen", f"Screen detail has no HTML; asking {self._code_generator.model} for code...")
            code = await self._code_generator.generate_html(prompt, artifact.raw_detail)
            log.add("Codegen", "HTML document generated.")
            return code

        if has_markup:
            log.add("Stitch", "HTML source extracted.")
        else:
            log.add("Stitch", "Screen detail is not HTML source; showing a placeholder.")
        return extract_code_fragment(artifact.raw_detail, project.id, artifact.id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _call(self, tool_name: str, arguments: dict[str, Any], credential: str) -> dict:
        logger.info("Invoking %s", tool_name)
        return await self._invoker.invoke(tool_name, arguments, credential)

    def _finish(
        self, log: FlowLog, code: str, project: ProjectHandle, screen_id: Optional[str]
    ) -> FlowResult:
        token = make_continuation_token(project.id, screen_id) if screen_id else None
        return FlowResult(
            success=True,
            code=code,
            log=log,
            continuation_token=token,
            version=int(self._clock().timestamp() * 1000),
            project_id=project.id,
            screen_id=screen_id,
            state=FlowState.DONE,
        )
