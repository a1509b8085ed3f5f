"""Core enums and data structures for contract generation.

This module is intentionally dependency-light so it can be imported
everywhere else in the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import ValidationError

MIN_REQUIREMENTS_LENGTH = 10
MAX_REQUIREMENTS_LENGTH = 5000
MAX_FEATURES = 20

# Temperature range accepted by both supported providers.
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
MAX_TOKENS_LIMIT = 32000


class ContractCategory(Enum):
    """All supported contract categories.

    Declaration order is significant: the classifier returns the first
    category (in this order) whose keywords match.
    """

    # Token standards
    ERC20 = "erc20"
    ERC721 = "erc721"

    # Multi-party approval
    MULTISIG = "multisig"

    # Fundraising
    CROWDFUNDING = "crowdfunding"

    # Yield protocols
    DEFI = "defi"

    # Governance / DAO
    GOVERNANCE = "governance"

    # Generic fallback
    CUSTOM = "custom"

    @classmethod
    def from_string(cls, s: str) -> "ContractCategory":
        """Parse an explicit category override (case-insensitive)."""
        if isinstance(s, str):
            value = s.strip().lower()
            for category in cls:
                if category.value == value:
                    return category
        supported = ", ".join(c.value for c in cls)
        raise ValidationError(f"Unsupported contract type '{s}'. Supported types: {supported}")


@dataclass(frozen=True)
class Sampling:
    """Sampling parameters forwarded to the provider."""

    max_tokens: int
    temperature: float


@dataclass(frozen=True)
class PromptPair:
    """System + user instruction sent to the provider for one request."""

    system: str
    user: str


# Inbound option keys -> GenerationOptions field. The token* / additional*
# spellings are what the web client historically sent.
_OPTION_ALIASES = {
    "name": "name",
    "tokenName": "name",
    "symbol": "symbol",
    "tokenSymbol": "symbol",
    "initialSupply": "initial_supply",
    "initial_supply": "initial_supply",
    "features": "features",
    "additionalFeatures": "features",
    "maxTokens": "max_tokens",
    "max_tokens": "max_tokens",
    "temperature": "temperature",
}


@dataclass(frozen=True)
class GenerationOptions:
    """Optional structured hints supplied alongside the requirements."""

    name: Optional[str] = None
    symbol: Optional[str] = None
    initial_supply: Optional[str] = None
    features: Tuple[str, ...] = ()
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "GenerationOptions":
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise ValidationError("Options must be an object")

        values: Dict[str, Any] = {}
        for key, value in raw.items():
            target = _OPTION_ALIASES.get(key)
            # Unknown keys and empty values are ignored, never invented.
            if target is None or value is None or value == "":
                continue
            values[target] = value

        for text_field in ("name", "symbol"):
            if text_field in values:
                if not isinstance(values[text_field], str):
                    raise ValidationError(f"Option '{text_field}' must be a string")
                values[text_field] = values[text_field].strip()

        if "initial_supply" in values:
            supply = values["initial_supply"]
            if isinstance(supply, bool) or not isinstance(supply, (str, int, float)):
                raise ValidationError("Option 'initialSupply' must be a number or a string")
            values["initial_supply"] = str(supply).strip()

        if "features" in values:
            features = values["features"]
            if isinstance(features, str):
                features = [features]
            if not isinstance(features, (list, tuple)) or not all(isinstance(f, str) for f in features):
                raise ValidationError("Option 'features' must be a list of strings")
            features = [f.strip() for f in features if f.strip()]
            if len(features) > MAX_FEATURES:
                raise ValidationError(f"Option 'features' accepts at most {MAX_FEATURES} entries")
            values["features"] = tuple(features)

        if "max_tokens" in values:
            max_tokens = values["max_tokens"]
            if isinstance(max_tokens, bool) or not isinstance(max_tokens, int):
                raise ValidationError("Option 'maxTokens' must be an integer")
            if not 1 <= max_tokens <= MAX_TOKENS_LIMIT:
                raise ValidationError(f"Option 'maxTokens' must be between 1 and {MAX_TOKENS_LIMIT}")

        if "temperature" in values:
            temperature = values["temperature"]
            if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
                raise ValidationError("Option 'temperature' must be a number")
            if not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE:
                raise ValidationError(
                    f"Option 'temperature' must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}"
                )
            values["temperature"] = float(temperature)

        return cls(**values)

    def prompt_fields(self) -> List[Tuple[str, str]]:
        """(KEY, value) pairs for the options present, in prompt order."""
        fields: List[Tuple[str, str]] = []
        if self.name:
            fields.append(("CONTRACT NAME", self.name))
        if self.symbol:
            fields.append(("SYMBOL", self.symbol))
        if self.initial_supply:
            fields.append(("INITIAL SUPPLY", self.initial_supply))
        if self.features:
            fields.append(("ADDITIONAL FEATURES", ", ".join(self.features)))
        return fields

    def to_dict(self) -> Dict:
        data: Dict[str, Any] = {}
        if self.name:
            data["name"] = self.name
        if self.symbol:
            data["symbol"] = self.symbol
        if self.initial_supply:
            data["initialSupply"] = self.initial_supply
        if self.features:
            data["features"] = list(self.features)
        if self.max_tokens is not None:
            data["maxTokens"] = self.max_tokens
        if self.temperature is not None:
            data["temperature"] = self.temperature
        return data


@dataclass(frozen=True)
class GenerationRequest:
    """One validated generation request, owned by a single pipeline run."""

    requirements: str
    category: Optional[ContractCategory] = None
    options: GenerationOptions = field(default_factory=GenerationOptions)

    def __post_init__(self):
        self.validate_requirements(self.requirements)

    @staticmethod
    def validate_requirements(requirements: Any) -> None:
        if not isinstance(requirements, str) or len(requirements.strip()) < MIN_REQUIREMENTS_LENGTH:
            raise ValidationError(
                f"Requirements must be at least {MIN_REQUIREMENTS_LENGTH} characters long"
            )
        if len(requirements.strip()) > MAX_REQUIREMENTS_LENGTH:
            raise ValidationError(
                f"Requirements must not exceed {MAX_REQUIREMENTS_LENGTH} characters"
            )

    @classmethod
    def from_payload(cls, payload: Any) -> "GenerationRequest":
        """Build a request from an inbound JSON body.

        Raises ValidationError for anything structurally wrong; nothing
        downstream re-validates.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")

        requirements = payload.get("requirements")
        cls.validate_requirements(requirements)

        # ``contractType`` is the original web client's name for the field.
        raw_category = payload.get("category") or payload.get("contractType")
        category = ContractCategory.from_string(raw_category) if raw_category else None

        options = GenerationOptions.from_dict(payload.get("options"))
        return cls(requirements=requirements.strip(), category=category, options=options)

    def sampling(self, defaults: Sampling) -> Sampling:
        """Per-request sampling, falling back to the configured defaults."""
        return Sampling(
            max_tokens=self.options.max_tokens if self.options.max_tokens is not None else defaults.max_tokens,
            temperature=self.options.temperature if self.options.temperature is not None else defaults.temperature,
        )


@dataclass
class Artifact:
    """Sanitized contract source plus generation metadata.

    This is what the pipeline returns; nothing keeps a reference to it.
    """

    source: str
    category: ContractCategory
    provider: str
    version: str
    requirements: str
    options: GenerationOptions
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )

    def to_metadata_dict(self) -> Dict:
        return {
            "generatedAt": self.generated_at,
            "provider": self.provider,
            "version": self.version,
            "requirements": self.requirements,
            "options": self.options.to_dict(),
        }

    def to_response_dict(self) -> Dict:
        return {
            "artifact": self.source,
            "category": self.category.value,
            "metadata": self.to_metadata_dict(),
        }
