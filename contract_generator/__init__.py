"""Smart contract generation package.

This package exposes a small high-level API:

    from contract_generator import ContractGenerator, load_settings

which takes natural-language requirements and returns an Artifact
containing validated Solidity source code plus metadata.
"""

__version__ = "1.0.0"

from .categories import Artifact, ContractCategory, GenerationOptions, GenerationRequest, PromptPair, Sampling
from .classifier import classify
from .config import GeneratorSettings, ProviderSettings, load_settings
from .errors import (
    ConfigurationError,
    ContractGenerationError,
    ProviderError,
    RateLimitError,
    ValidationError,
)
from .generator import ContractGenerator
from .llm_backends import register_backend
from .llm_gateway import LLMGateway
from .prompt_builder import compose
from .rate_limiter import RequestGovernor
from .sanitizer import sanitize

__all__ = [
    "__version__",
    "Artifact",
    "ContractCategory",
    "GenerationOptions",
    "GenerationRequest",
    "PromptPair",
    "Sampling",
    "classify",
    "GeneratorSettings",
    "ProviderSettings",
    "load_settings",
    "ConfigurationError",
    "ContractGenerationError",
    "ProviderError",
    "RateLimitError",
    "ValidationError",
    "ContractGenerator",
    "register_backend",
    "LLMGateway",
    "compose",
    "RequestGovernor",
    "sanitize",
]
