"""
LLM provider abstraction.

Provides a provider-agnostic async interface for chat-completion style LLM calls.
Providers translate their SDK errors into LLMRequestError so callers never depend
on a specific SDK's exception hierarchy. No retries are attempted here: a failed
call is reported once and the caller decides what to do.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import openai
from omegaconf import DictConfig

DEFAULT_MODEL = "glm-4-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    model: str
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None


class LLMRequestError(Exception):
    """
    A provider call failed.

    Attributes:
        message: Error description
        status_code: HTTP status of a non-success response (None for transport errors)
        body: Response body of a non-success response, when retrievable
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class LLMProvider(ABC):
    """
    Abstract base for LLM providers.

    Subclasses must:
    - Set _provider_prefix class attribute (e.g., "openai")
    - Implement _call_api() for the actual API call, raising LLMRequestError on failure
    - Call update_model(model) in __init__ to set model and name
    """

    _provider_prefix: str

    name: str
    model: str

    def update_model(self, model: str):
        """Update the model and refresh the provider name."""
        self.model = model
        self.name = f"{self._provider_prefix}/{model}"

    @abstractmethod
    async def _call_api(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """Make a single API call. Implemented by subclasses."""
        pass

    async def generate(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """Generate a response from the LLM (single attempt)."""
        return await self._call_api(system_prompt, user_prompt)


class OpenAICompatibleProvider(LLMProvider):
    """
    Provider for any OpenAI-compatible chat completions endpoint.

    Works with api.openai.com as well as compatible hosts (Zhipu GLM, DeepSeek,
    local gateways) by pointing base_url at the host's /v1-style root.
    """

    _provider_prefix = "openai"

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client: Any = None,
    ):
        if client is None:
            if not api_key:
                raise ValueError("LLM API key not set (set VITAE_LLM_API_KEY)")
            # Trailing slashes would produce '//chat/completions'
            base_url = base_url.rstrip("/") if base_url else None
            client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url)

        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.update_model(model)

    async def _call_api(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.APIStatusError as e:
            body = _response_body(e)
            raise LLMRequestError(
                f"API request failed ({e.status_code}): {body or e.message}",
                status_code=e.status_code,
                body=body,
            ) from e
        except openai.APIError as e:
            raise LLMRequestError(f"API request failed: {e.message or type(e).__name__}") from e

        if not response.choices or response.choices[0].message is None:
            raise LLMRequestError("API response contained no completion choices")

        content = response.choices[0].message.content
        if content is None:
            raise LLMRequestError("API response completion has no text content")

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=content,
            model=self.model,
            input_tokens=getattr(usage, "prompt_tokens", None),
            output_tokens=getattr(usage, "completion_tokens", None),
        )


def _response_body(error: "openai.APIStatusError") -> Optional[str]:
    """Extract the raw response body of a non-success response, if retrievable."""
    text = getattr(error.response, "text", None)
    if text:
        return text
    if error.body is not None:
        return str(error.body)
    return None


# --- Provider Factory ---


def get_provider(config: DictConfig) -> LLMProvider:
    """
    Build the configured LLM provider.

    Args:
        config: Loaded VITAE config (uses the `llm` section)

    Returns:
        LLMProvider instance

    Raises:
        ValueError: If no API key is configured
    """
    llm = config.llm
    return OpenAICompatibleProvider(
        model=llm.model,
        base_url=llm.base_url,
        api_key=llm.api_key,
        temperature=float(llm.temperature),
        max_tokens=int(llm.max_tokens),
    )
