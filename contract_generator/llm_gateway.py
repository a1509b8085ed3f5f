"""
LLM Gateway - provider selection, per-attempt timeout and retry with backoff
"""

import asyncio
from typing import Awaitable, Callable, Optional

from .categories import PromptPair, Sampling
from .config import GeneratorSettings
from .errors import ProviderError
from .llm_backends import LLMBackend, build_backend

Sleep = Callable[[float], Awaitable[None]]


class LLMGateway:
    """
    Send prompts to the configured provider.

    The backend is built on first use, so a missing credential surfaces as
    ConfigurationError from the first ``generate`` call, before any network
    attempt, and is never retried.
    """

    def __init__(
        self,
        settings: GeneratorSettings,
        backend: Optional[LLMBackend] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings
        self._backend = backend
        self._sleep = sleep

    @property
    def provider_name(self) -> str:
        if self._backend is not None:
            return self._backend.name
        return self.settings.provider

    @property
    def backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = build_backend(self.settings.active_provider())
        return self._backend

    def backoff_delay(self, attempt: int) -> float:
        """Wait after failed attempt ``attempt`` (1-based): base * 2^attempt"""
        return self.settings.backoff_base * (2 ** attempt)

    async def generate(self, prompt: PromptPair, sampling: Optional[Sampling] = None) -> str:
        """
        Resilient provider call with timeout and retry logic.

        Args:
            prompt: System + user instruction
            sampling: max tokens / temperature; configured defaults if omitted

        Returns:
            The completion text of the first successful attempt

        Raises:
            ConfigurationError: If the active provider cannot be built
            ProviderError: If all attempts fail
        """
        backend = self.backend
        if sampling is None:
            sampling = self.settings.sampling()
        max_attempts = self.settings.max_attempts
        timeout = self.settings.attempt_timeout
        last_error: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                print(f"[gateway] {backend.name}: attempt {attempt}/{max_attempts}")
                text = await asyncio.wait_for(backend.complete(prompt, sampling, timeout), timeout)
                print(f"[gateway] {backend.name}: completion received on attempt {attempt}")
                return text

            except asyncio.TimeoutError:
                last_error = TimeoutError(f"attempt timed out after {timeout:g}s")
            except Exception as e:
                last_error = e

            print(f"[gateway] {backend.name}: attempt {attempt}/{max_attempts} failed: {last_error}")
            if attempt < max_attempts:
                wait_time = self.backoff_delay(attempt)
                print(f"[gateway] retrying in {wait_time:g} seconds...")
                await self._sleep(wait_time)

        raise ProviderError(
            f"LLM generation failed after {max_attempts} attempts: {last_error}",
            attempts=max_attempts,
            cause=last_error,
        )
