"""
Template Loader
===============

Load the category registry (keywords, names, instruction blocks) from YAML.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from .categories import ContractCategory
from .errors import ConfigurationError

DEFAULT_REGISTRY_PATH = Path(__file__).parent / "categories.yaml"

_default_registry: Optional[Dict[ContractCategory, "CategoryTemplate"]] = None


class CategoryTemplate:
    """Per-category configuration loaded from YAML"""

    def __init__(self, category: ContractCategory, config: dict):
        self.category = category
        self.name = config.get("name", category.value)
        self.description = config.get("description", "")
        self.keywords: List[str] = [str(k).lower() for k in config.get("keywords") or []]
        self.examples: List[str] = list(config.get("examples") or [])
        self.instructions = (config.get("instructions") or "").strip()

    def matches(self, text: str) -> bool:
        """True if any keyword occurs in the already lower-cased text"""
        return any(keyword in text for keyword in self.keywords)

    def to_dict(self) -> dict:
        return {
            "type": self.category.value,
            "name": self.name,
            "description": self.description,
            "keywords": self.keywords,
            "examples": self.examples,
        }


def load_category_registry(
    path: Optional[Union[str, Path]] = None,
) -> Dict[ContractCategory, CategoryTemplate]:
    """
    Load the category registry from a YAML file.

    Args:
        path: Registry file; the packaged categories.yaml when omitted.

    Returns:
        Mapping of every ContractCategory to its template, in enum order.

    Raises:
        ConfigurationError: If the file is missing, malformed, or does not
            cover exactly the supported categories.
    """
    global _default_registry

    if path is None and _default_registry is not None:
        return _default_registry

    config_path = Path(path) if path is not None else DEFAULT_REGISTRY_PATH
    if not config_path.exists():
        raise ConfigurationError(f"Category registry not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid category registry {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Category registry {config_path} must be a mapping")

    known = {category.value for category in ContractCategory}
    unknown = sorted(set(config) - known)
    if unknown:
        raise ConfigurationError(f"Unknown categories in {config_path}: {', '.join(unknown)}")

    registry: Dict[ContractCategory, CategoryTemplate] = {}
    for category in ContractCategory:
        entry = config.get(category.value)
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Category '{category.value}' missing from {config_path}")
        registry[category] = CategoryTemplate(category, entry)

    if path is None:
        _default_registry = registry
    return registry
