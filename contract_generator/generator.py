"""High-level generator entry point.

This is the class you should call from a service or script:

    from contract_generator import ContractGenerator

It takes a caller payload (or an already validated GenerationRequest) and
returns an Artifact: sanitized Solidity source plus metadata. Every failure
is one of the typed errors in ``contract_generator.errors``.
"""

from __future__ import annotations

from typing import Any, Optional

from . import __version__
from .categories import Artifact, ContractCategory, GenerationRequest
from .classifier import classify
from .config import GeneratorSettings, load_settings
from .errors import RateLimitError
from .llm_gateway import LLMGateway
from .prompt_builder import compose
from .rate_limiter import RequestGovernor
from .sanitizer import sanitize


class ContractGenerator:
    """Governor -> classifier -> prompt builder -> gateway -> sanitizer."""

    def __init__(
        self,
        settings: Optional[GeneratorSettings] = None,
        gateway: Optional[LLMGateway] = None,
        governor: Optional[RequestGovernor] = None,
        debug: Optional[bool] = None,
    ):
        # An empty governor has len() == 0, so compare against None.
        self.settings = settings if settings is not None else load_settings()
        self.gateway = gateway if gateway is not None else LLMGateway(self.settings)
        if governor is None:
            governor = RequestGovernor(
                limit=self.settings.rate_limit,
                window_seconds=self.settings.rate_window,
            )
        self.governor = governor
        self.debug = self.settings.debug if debug is None else debug

    def _log(self, message: str) -> None:
        if self.debug:
            print(message)

    async def generate_from_payload(self, payload: Any, identity: str) -> Artifact:
        """Admission control, request validation, then generation.

        Raises:
            RateLimitError: The identity is over its window; nothing else runs.
            ValidationError: The payload is malformed.
        """
        if not self.governor.admit(identity):
            retry_after = self.governor.retry_after(identity)
            self._log(f"⚠️  Rate limit exceeded for {identity}")
            raise RateLimitError("Too many requests. Please try again later.", retry_after=retry_after)

        request = GenerationRequest.from_payload(payload)
        return await self.generate(request)

    async def generate(self, request: GenerationRequest) -> Artifact:
        """Run the generation pipeline on a validated request."""

        self._log("=" * 80)
        self._log("SMART CONTRACT GENERATION")
        self._log("=" * 80)

        # 1) Category
        self._log("\n[1/4] Selecting contract category...")
        category: ContractCategory = request.category or classify(request.requirements)
        source = "explicit" if request.category else "detected"
        self._log(f"✓ Category: {category.value} ({source})")

        # 2) Prompts
        self._log("\n[2/4] Building prompts...")
        prompt = compose(request.requirements, category, request.options)
        self._log(f"✓ System prompt: {len(prompt.system)} chars, user prompt: {len(prompt.user)} chars")

        # 3) Provider call
        self._log(f"\n[3/4] Generating Solidity code via {self.gateway.provider_name}...")
        raw = await self.gateway.generate(prompt, request.sampling(self.settings.sampling()))
        self._log(f"✓ Received {len(raw)} characters")

        # 4) Sanitize + validate
        self._log("\n[4/4] Cleaning and validating generated code...")
        body = sanitize(raw)
        self._log(f"✓ Contract validated ({len(body)} characters)")

        artifact = Artifact(
            source=body,
            category=category,
            provider=self.gateway.provider_name,
            version=__version__,
            requirements=request.requirements,
            options=request.options,
        )

        self._log("\n✅ GENERATION COMPLETE")
        self._log("=" * 80)
        return artifact
