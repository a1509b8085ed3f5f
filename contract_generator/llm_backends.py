"""
Provider backends for the LLM gateway.

Each backend turns a PromptPair + Sampling into a single HTTP request in its
provider's wire format and returns the completion text. Backends make exactly
one attempt; retries, backoff and the per-attempt timeout belong to the
gateway.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol

import httpx
from openai import AsyncOpenAI

from .categories import PromptPair, Sampling
from .config import ProviderSettings
from .errors import ConfigurationError


class MalformedResponseError(RuntimeError):
    """Provider answered, but not with the envelope we expect"""


class LLMBackend(Protocol):
    name: str

    async def complete(self, prompt: PromptPair, sampling: Sampling, timeout: float) -> str:
        ...


class OpenAIChatBackend:
    """Chat Completions API: role-tagged messages, bearer credential."""

    name = "openai"

    def __init__(self, provider: ProviderSettings, client: Optional[AsyncOpenAI] = None):
        self.provider = provider
        # SDK-level retries are disabled; the gateway owns the retry budget.
        self.client = client or AsyncOpenAI(
            api_key=provider.api_key,
            base_url=provider.base_url,
            max_retries=0,
        )

    async def complete(self, prompt: PromptPair, sampling: Sampling, timeout: float) -> str:
        response = await self.client.chat.completions.create(
            model=self.provider.model,
            messages=[
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            max_tokens=sampling.max_tokens,
            temperature=sampling.temperature,
            top_p=1,
            frequency_penalty=0,
            presence_penalty=0,
            timeout=timeout,
        )

        choices = getattr(response, "choices", None)
        if not choices:
            raise MalformedResponseError("Invalid response from OpenAI API: no choices returned")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not content:
            raise MalformedResponseError("Invalid response from OpenAI API: empty message content")

        return content


class AnthropicMessagesBackend:
    """Messages API: top-level system field, x-api-key + version headers."""

    name = "anthropic"
    API_VERSION = "2023-06-01"

    def __init__(self, provider: ProviderSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.provider = provider
        self._http_client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.provider.base_url.rstrip('/')}/v1/messages"

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.provider.api_key or "",
            "anthropic-version": self.API_VERSION,
            "content-type": "application/json",
        }

    def _payload(self, prompt: PromptPair, sampling: Sampling) -> Dict[str, Any]:
        return {
            "model": self.provider.model,
            "max_tokens": sampling.max_tokens,
            "temperature": sampling.temperature,
            "system": prompt.system,
            "messages": [{"role": "user", "content": prompt.user}],
        }

    @staticmethod
    def extract_text(data: Any) -> str:
        """Pull the completion text out of a Messages API response body."""
        if not isinstance(data, dict):
            raise MalformedResponseError("Invalid response from Anthropic API: body is not an object")

        content = data.get("content")
        if not isinstance(content, list) or not content:
            raise MalformedResponseError("Invalid response from Anthropic API: no content returned")

        texts = [
            block.get("text")
            for block in content
            if isinstance(block, dict) and block.get("type", "text") == "text" and block.get("text")
        ]
        if not texts:
            raise MalformedResponseError("Invalid response from Anthropic API: no text content")

        return "".join(texts)

    async def complete(self, prompt: PromptPair, sampling: Sampling, timeout: float) -> str:
        payload = self._payload(prompt, sampling)

        if self._http_client is not None:
            response = await self._http_client.post(
                self.endpoint, json=payload, headers=self._headers(), timeout=timeout
            )
        else:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(self.endpoint, json=payload, headers=self._headers())

        response.raise_for_status()
        return self.extract_text(response.json())


# ---------------------------------------------------------------------------
# Backend registry
# ---------------------------------------------------------------------------

BackendFactory = Callable[[ProviderSettings], LLMBackend]

_BACKEND_FACTORIES: Dict[str, BackendFactory] = {
    OpenAIChatBackend.name: OpenAIChatBackend,
    AnthropicMessagesBackend.name: AnthropicMessagesBackend,
}

_CREDENTIAL_VARIABLES = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def register_backend(name: str, factory: BackendFactory) -> None:
    """Make another provider selectable by name (LLM_PROVIDER)."""
    _BACKEND_FACTORIES[name.lower()] = factory


def available_backends() -> List[str]:
    return list(_BACKEND_FACTORIES)


def build_backend(provider: ProviderSettings) -> LLMBackend:
    """
    Instantiate the backend for ``provider``.

    Raises:
        ConfigurationError: Unknown provider, or no credential configured.
    """
    factory = _BACKEND_FACTORIES.get(provider.name.lower())
    if factory is None:
        raise ConfigurationError(
            f"Unsupported LLM provider: {provider.name} (available: {', '.join(available_backends())})"
        )

    if not provider.api_key:
        variable = _CREDENTIAL_VARIABLES.get(provider.name.lower(), f"{provider.name.upper()}_API_KEY")
        raise ConfigurationError(
            f"No API key configured for provider '{provider.name}'. Set {variable} in your environment/.env."
        )

    return factory(provider)
