"""Runtime configuration read from the environment (and .env files).

Only values live here; nothing in this module talks to a provider. A
missing credential is not an error until the provider is actually used.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from .categories import Sampling
from .errors import ConfigurationError


@dataclass(frozen=True)
class ProviderSettings:
    """Credential, model and endpoint for one provider backend."""

    name: str
    api_key: Optional[str]
    model: str
    base_url: str

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class GeneratorSettings:
    """Everything the pipeline needs from configuration."""

    provider: str = "openai"
    providers: Dict[str, ProviderSettings] = field(default_factory=dict)
    max_tokens: int = 4000
    temperature: float = 0.7
    max_attempts: int = 3
    attempt_timeout: float = 30.0
    backoff_base: float = 1.0
    rate_limit: int = 10
    rate_window: float = 15 * 60.0
    debug: bool = False

    def active_provider(self) -> ProviderSettings:
        """Settings of the selected provider.

        Raises:
            ConfigurationError: If the selector names no known provider.
        """
        settings = self.providers.get(self.provider)
        if settings is None:
            known = ", ".join(sorted(self.providers)) or "none"
            raise ConfigurationError(f"Unsupported LLM provider: {self.provider} (known: {known})")
        return settings

    def sampling(self) -> Sampling:
        return Sampling(max_tokens=self.max_tokens, temperature=self.temperature)


def _get(env: Mapping[str, str], *names: str, default: Optional[str] = None) -> Optional[str]:
    for name in names:
        value = env.get(name)
        if value is not None and value.strip() != "":
            return value.strip()
    return default


def _get_int(env: Mapping[str, str], *names: str, default: int) -> int:
    raw = _get(env, *names)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{names[0]} must be an integer, got '{raw}'")


def _get_float(env: Mapping[str, str], *names: str, default: float) -> float:
    raw = _get(env, *names)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{names[0]} must be a number, got '{raw}'")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> GeneratorSettings:
    """Build GeneratorSettings from environment variables.

    Args:
        environ: Explicit variable mapping. When omitted, ``.env.local`` and
            ``.env`` are loaded into the process environment first and
            ``os.environ`` is used.
    """

    if environ is None:
        load_dotenv(".env.local")
        load_dotenv()
        environ = os.environ

    providers = {
        "openai": ProviderSettings(
            name="openai",
            api_key=_get(environ, "OPENAI_API_KEY", "API_KEY"),
            model=_get(environ, "OPENAI_MODEL", default="gpt-4o"),
            base_url=_get(environ, "OPENAI_BASE_URL", default="https://api.openai.com/v1"),
        ),
        "anthropic": ProviderSettings(
            name="anthropic",
            api_key=_get(environ, "ANTHROPIC_API_KEY"),
            model=_get(environ, "ANTHROPIC_MODEL", default="claude-3-5-sonnet-20240620"),
            base_url=_get(environ, "ANTHROPIC_BASE_URL", default="https://api.anthropic.com"),
        ),
    }

    settings = GeneratorSettings(
        provider=(_get(environ, "LLM_PROVIDER", default="openai") or "openai").lower(),
        providers=providers,
        max_tokens=_get_int(environ, "LLM_MAX_TOKENS", "OPENAI_MAX_TOKENS", default=4000),
        temperature=_get_float(environ, "LLM_TEMPERATURE", "OPENAI_TEMPERATURE", default=0.7),
        max_attempts=_get_int(environ, "LLM_MAX_ATTEMPTS", default=3),
        attempt_timeout=_get_float(environ, "LLM_TIMEOUT_SECONDS", default=30.0),
        backoff_base=_get_float(environ, "LLM_BACKOFF_SECONDS", default=1.0),
        rate_limit=_get_int(environ, "RATE_LIMIT_MAX_REQUESTS", default=10),
        rate_window=_get_float(environ, "RATE_LIMIT_WINDOW_SECONDS", default=15 * 60.0),
        debug=(_get(environ, "GENERATOR_DEBUG", default="false") or "").lower() in ("1", "true", "yes", "on"),
    )

    if settings.max_attempts < 1:
        raise ConfigurationError("LLM_MAX_ATTEMPTS must be at least 1")
    if settings.attempt_timeout <= 0:
        raise ConfigurationError("LLM_TIMEOUT_SECONDS must be positive")
    if settings.rate_limit < 1 or settings.rate_window <= 0:
        raise ConfigurationError("RATE_LIMIT_MAX_REQUESTS and RATE_LIMIT_WINDOW_SECONDS must be positive")

    return settings
