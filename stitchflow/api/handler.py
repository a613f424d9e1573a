"""Request handling between the HTTP route and the design flow.

Validates the prompt, picks the credential (request override first, then the
configured default) and runs one StitchFlow. Nothing is retried or queued.
"""

import logging
from typing import Optional

from stitchflow.api.schemas import CredentialOverrides
from stitchflow.core.flow import StitchFlow
from stitchflow.exceptions import CredentialMissing, InvalidRequest
from stitchflow.logging_config import mask_secret
from stitchflow.types import FlowResult, GenerationRequest

logger = logging.getLogger(__name__)


def resolve_credential(overrides: Optional[CredentialOverrides], cfg) -> str:
    """Return the request-supplied token, else the configured default.

    Raises:
        CredentialMissing: If neither is set (blank strings count as unset).
    """
    candidates = (overrides.stitch_key if overrides else None, cfg.access_token)
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    raise CredentialMissing(
        "No credential provided. Enter your Stitch access token in the UI settings "
        "or set STITCH_ACCESS_TOKEN on the server."
    )


class GenerationHandler:
    """Turns one validated prompt into one FlowResult."""

    def __init__(self, config, invoker, code_generator=None, clock=None):
        self._config = config
        self._flow = StitchFlow(invoker, config, code_generator=code_generator, clock=clock)

    async def handle(
        self,
        prompt: Optional[str],
        overrides: Optional[CredentialOverrides] = None,
        continuation_token: Optional[str] = None,
    ) -> FlowResult:
        """Validate inputs and run the flow.

        Raises:
            InvalidRequest: Blank prompt.
            CredentialMissing: No token from the request or the config.
        """
        if not prompt or not prompt.strip():
            raise InvalidRequest("Prompt must not be empty")
        credential = resolve_credential(overrides, self._config)
        logger.info("Running design flow with token %s", mask_secret(credential))

        request = GenerationRequest(
            prompt=prompt.strip(),
            credential=credential,
            continuation_token=continuation_token or None,
        )
        return await self._flow.run_request(request)
