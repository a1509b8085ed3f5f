"""
Prompt construction
"""

from contract_generator import ContractCategory, GenerationOptions, compose
from contract_generator.prompt_builder import BASE_SYSTEM_PROMPT, CLOSING_DIRECTIVE
from contract_generator.template_loader import load_category_registry

REQUIREMENTS = "Create a utility token with 1,000,000 supply called FooCoin (FOO)"


def test_system_prompt_is_baseline_plus_category_block():
    prompt = compose(REQUIREMENTS, ContractCategory.ERC20)
    instructions = load_category_registry()[ContractCategory.ERC20].instructions

    assert prompt.system.startswith(BASE_SYSTEM_PROMPT)
    assert prompt.system.endswith(instructions)
    assert "SPECIFIC REQUIREMENTS FOR ERC-20 TOKEN" in prompt.system


def test_baseline_states_output_format():
    assert "SPDX" in BASE_SYSTEM_PROMPT
    assert "pragma" in BASE_SYSTEM_PROMPT
    assert "ONLY the Solidity source code" in BASE_SYSTEM_PROMPT


def test_user_prompt_without_options():
    prompt = compose(REQUIREMENTS, ContractCategory.ERC20)

    assert prompt.user == (
        "Please generate a ERC-20 Token Contract based on the following requirements:\n\n"
        f"REQUIREMENTS:\n{REQUIREMENTS}\n\n"
        f"\n{CLOSING_DIRECTIVE}"
    )


def test_user_prompt_lists_present_options_only():
    options = GenerationOptions(name="FooCoin", features=("burnable", "pausable"))
    prompt = compose(REQUIREMENTS, ContractCategory.ERC20, options)

    assert "CONTRACT NAME: FooCoin\n" in prompt.user
    assert "ADDITIONAL FEATURES: burnable, pausable\n" in prompt.user
    assert "SYMBOL:" not in prompt.user
    assert "INITIAL SUPPLY:" not in prompt.user
    assert prompt.user.index("REQUIREMENTS:") < prompt.user.index("CONTRACT NAME:")
    assert prompt.user.index("ADDITIONAL FEATURES:") < prompt.user.index(CLOSING_DIRECTIVE)
    assert prompt.user.endswith(CLOSING_DIRECTIVE)


def test_option_order_is_fixed():
    options = GenerationOptions.from_dict(
        {"features": ["capped"], "initialSupply": 1000, "tokenSymbol": "FOO", "tokenName": "FooCoin"}
    )
    user = compose(REQUIREMENTS, ContractCategory.ERC20, options).user

    positions = [user.index(key) for key in ("CONTRACT NAME", "SYMBOL", "INITIAL SUPPLY", "ADDITIONAL FEATURES")]
    assert positions == sorted(positions)
    assert "INITIAL SUPPLY: 1000\n" in user


def test_compose_is_pure():
    options = GenerationOptions(name="Vault", symbol="VLT")
    first = compose(REQUIREMENTS, ContractCategory.DEFI, options)
    second = compose(REQUIREMENTS, ContractCategory.DEFI, GenerationOptions(name="Vault", symbol="VLT"))
    assert first == second


def test_each_category_gets_its_own_block():
    systems = {compose(REQUIREMENTS, category).system for category in ContractCategory}
    assert len(systems) == len(ContractCategory)
