"""
Rewrite adapter: text + context label -> rewritten text.

Wraps an LLMProvider with the résumé rewrite instruction. The adapter never reads
or writes the document model; binding results to fields is the caller's job
(see RewriteBinding and EditorSession).
"""

import time

from vitae.contexts.rewrite.logger import _log_debug, _log_warning, log_rewrite_result
from vitae.contexts.rewrite.prompts import build_system_prompt
from vitae.exceptions import EmptyInput, RewriteFailed
from vitae.utils.llm import LLMProvider, LLMRequestError


class RewriteAdapter:
    """
    Requests rewrites from an LLM provider.

    Args:
        provider: Any LLMProvider (see vitae.utils.llm.get_provider)
    """

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    async def request(self, text: str, context_label: str) -> str:
        """
        Ask the provider to rewrite text.

        Args:
            text: Current field content
            context_label: Which part of the résumé the text belongs to

        Returns:
            Rewritten text, trimmed

        Raises:
            EmptyInput: If text is empty or whitespace (no request is sent)
            RewriteFailed: If the provider call fails or returns no text
        """
        if not text or not text.strip():
            raise EmptyInput()

        system_prompt = build_system_prompt(context_label)
        _log_debug(f"Requesting rewrite ({context_label}, {len(text)} chars) from {self.provider.name}")

        start = time.perf_counter()
        try:
            response = await self.provider.generate(system_prompt, text)
        except LLMRequestError as e:
            _log_warning(f"Rewrite failed: {e.message}")
            raise RewriteFailed(e.message, status_code=e.status_code, body=e.body) from e

        log_rewrite_result(self.provider.name, response, time.perf_counter() - start)

        rewritten = (response.content or "").strip()
        if not rewritten:
            raise RewriteFailed("Rewrite service returned empty content")
        return rewritten
