"""Typed errors raised by the contract generation pipeline.

Every error carries a ``kind`` (reported to callers) and the HTTP ``status``
the request handlers map it to. None of them are retried by the pipeline
itself; the gateway's retry loop wraps provider failures into ProviderError
once its budget is spent.
"""

from __future__ import annotations

from typing import Dict, Optional


class ContractGenerationError(Exception):
    """Base class for all terminal pipeline errors."""

    kind = "GenerationError"
    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict:
        return {"message": self.message, "kind": self.kind}


class ValidationError(ContractGenerationError):
    """Caller input or sanitized output failed a structural check."""

    kind = "ValidationError"
    status = 400


class RateLimitError(ContractGenerationError):
    """The request governor rejected the caller."""

    kind = "RateLimitExceeded"
    status = 429

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class ProviderError(ContractGenerationError):
    """All attempts against the generative-text provider failed."""

    kind = "ProviderError"
    status = 502

    def __init__(self, message: str, attempts: int = 0, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.cause = cause


class ConfigurationError(ContractGenerationError):
    """The active provider (or another setting) is missing or unusable."""

    kind = "ConfigurationError"
    status = 500
