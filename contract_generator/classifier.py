"""Keyword-based category detection.

Lower-cases the requirements and returns the first category, in
ContractCategory declaration order, with a keyword that occurs as a
substring. Hit counts are not compared: an earlier category always wins.
"""

from __future__ import annotations

from typing import Dict, Optional

from .categories import ContractCategory
from .template_loader import CategoryTemplate, load_category_registry


def classify(
    requirements: str,
    registry: Optional[Dict[ContractCategory, CategoryTemplate]] = None,
) -> ContractCategory:
    """Detect the contract category for free-text requirements."""

    templates = registry if registry is not None else load_category_registry()
    text = requirements.lower()

    for category in ContractCategory:
        template = templates.get(category)
        if template is not None and template.matches(text):
            return category

    return ContractCategory.CUSTOM
