"""Thin wrapper around litellm for turning a design description into HTML.

litellm handles DeepSeek, OpenAI, Anthropic, Ollama and the rest, so the model
is just a string such as ``deepseek/deepseek-chat`` or ``ollama/qwen2.5-coder:7b``.
"""

import asyncio
import logging
from typing import Optional

import litellm

from stitchflow.core.extractor import find_markup, strip_code_fences
from stitchflow.exceptions import CodegenError
from stitchflow.llm.prompts import CODEGEN_SYSTEM, CODEGEN_USER

logger = logging.getLogger(__name__)

# Design notes beyond this are truncated before prompting.
MAX_CONTEXT_CHARS = 12000


class CodeGenerator:
    """Asks an LLM for a single self-contained HTML document."""

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        timeout: float = 120.0,
    ):
        self.model = model
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        litellm.drop_params = True  # ignore unsupported params per provider

    @classmethod
    def from_config(cls, cfg) -> "CodeGenerator":
        return cls(
            model=cfg.codegen_model,
            api_key=cfg.codegen_api_key,
            temperature=cfg.codegen_temperature,
            max_tokens=cfg.codegen_max_tokens,
            timeout=cfg.request_timeout,
        )

    async def generate_html(self, prompt: str, design_context: str = "") -> str:
        """Return an HTML document for ``prompt``.

        Raises:
            CodegenError: On any provider error, or if the reply has no <html> root.
        """
        messages = [
            {"role": "system", "content": CODEGEN_SYSTEM},
            {"role": "user", "content": CODEGEN_USER.format(
                prompt=prompt,
                design_context=(design_context or "(none)")[:MAX_CONTEXT_CHARS],
            )},
        ]
        kwargs = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key

        try:
            response = await asyncio.wait_for(litellm.acompletion(**kwargs), timeout=self.timeout)
            raw = response.choices[0].message.content or ""
        except Exception as e:
            raise CodegenError(f"Code generation failed: {e}", details={"model": self.model}) from e

        html_doc = find_markup(strip_code_fences(raw))
        if html_doc is None:
            logger.warning("Codegen reply from %s had no <html> root (%d chars)", self.model, len(raw))
            raise CodegenError(
                "Code generation returned no HTML document", details={"model": self.model}
            )
        return html_doc
