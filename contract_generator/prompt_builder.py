"""Prompt construction for contract generation.

Takes:
- the caller's requirements text
- the ContractCategory (detected or explicit)
- GenerationOptions (optional structured hints)

and returns a PromptPair (system instruction + user instruction).
"""

from __future__ import annotations

from typing import Dict, Optional

from .categories import ContractCategory, GenerationOptions, PromptPair
from .template_loader import CategoryTemplate, load_category_registry


# ---------------------------------------------------------------------------
# Baseline rules shared by every category
# ---------------------------------------------------------------------------

BASE_SYSTEM_PROMPT = """You are an expert Solidity smart contract developer with deep knowledge of blockchain security, gas optimization, and best practices. Your task is to generate production-ready smart contracts based on user requirements.

REQUIREMENTS:
- Use Solidity ^0.8.20
- Follow OpenZeppelin standards when applicable
- Include comprehensive NatSpec documentation
- Implement proper security measures (reentrancy guards, access controls, etc.)
- Optimize for gas efficiency
- Use custom errors for validation failures
- Emit events for important state changes
- Follow the Checks-Effects-Interactions pattern

SECURITY CONSIDERATIONS:
- Always validate inputs (zero addresses, zero amounts, bounds)
- Implement proper access controls
- Consider potential attack vectors
- Use reentrancy guards where needed

OUTPUT FORMAT:
- Return ONLY the Solidity source code
- Start with an SPDX license identifier comment
- Follow it with the pragma statement
- Keep all documentation inside Solidity comments
- No Markdown fences and no explanatory text before or after the code"""

CLOSING_DIRECTIVE = (
    "Please ensure the contract is secure, well-documented, and follows best practices. "
    "Generate only the Solidity code without any additional explanations."
)


def build_system_prompt(
    category: ContractCategory,
    registry: Optional[Dict[ContractCategory, CategoryTemplate]] = None,
) -> str:
    """Baseline block followed by the category's instruction block."""

    templates = registry if registry is not None else load_category_registry()
    template = templates.get(category) or templates[ContractCategory.CUSTOM]
    return f"{BASE_SYSTEM_PROMPT}\n\n{template.instructions}"


def build_user_prompt(
    requirements: str,
    category: ContractCategory,
    options: Optional[GenerationOptions] = None,
    registry: Optional[Dict[ContractCategory, CategoryTemplate]] = None,
) -> str:
    templates = registry if registry is not None else load_category_registry()
    template = templates.get(category)
    contract_name = template.name if template is not None else "smart contract"

    prompt = f"Please generate a {contract_name} based on the following requirements:\n\n"
    prompt += f"REQUIREMENTS:\n{requirements}\n\n"

    if options is not None:
        for key, value in options.prompt_fields():
            prompt += f"{key}: {value}\n"

    prompt += f"\n{CLOSING_DIRECTIVE}"
    return prompt


def compose(
    requirements: str,
    category: ContractCategory,
    options: Optional[GenerationOptions] = None,
    registry: Optional[Dict[ContractCategory, CategoryTemplate]] = None,
) -> PromptPair:
    """Build the (system, user) prompt pair for one request.

    Pure: the same inputs always produce the same PromptPair.
    """

    return PromptPair(
        system=build_system_prompt(category, registry),
        user=build_user_prompt(requirements, category, options, registry),
    )
