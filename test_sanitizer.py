"""
Cleaning of raw provider completions
"""

import pytest

from contract_generator import ValidationError, sanitize
from contract_generator.sanitizer import (
    DEFAULT_LICENSE_HEADER,
    DEFAULT_PRAGMA,
    NARRATIVE_PATTERNS,
    collapse_blank_lines,
    is_narrative,
    strip_code_fences,
    truncate_after_declaration,
)
from conftest import CLEAN_CONTRACT


def _count(source, marker):
    return sum(1 for line in source.split("\n") if marker in line)


def test_clean_contract_is_unchanged():
    assert sanitize(CLEAN_CONTRACT) == CLEAN_CONTRACT


def test_fences_and_surrounding_prose_are_removed():
    raw = (
        "Here is the contract you asked for:\n\n"
        "```solidity\n"
        f"{CLEAN_CONTRACT}\n"
        "```\n\n"
        "This contract implements a simple mintable token.\n"
        "Let me know if you need changes!"
    )
    assert sanitize(raw) == CLEAN_CONTRACT


def test_missing_headers_are_added_in_order():
    result = sanitize("contract A {\n    uint256 public x;\n}")
    lines = result.split("\n")
    assert lines[0] == DEFAULT_LICENSE_HEADER
    assert lines[1] == DEFAULT_PRAGMA
    assert lines[2] == "contract A {"


def test_existing_headers_are_not_duplicated():
    raw = "// SPDX-License-Identifier: Apache-2.0\npragma solidity ^0.8.24;\n\nlibrary L {\n}"
    result = sanitize(raw)
    assert _count(result, "SPDX-License-Identifier") == 1
    assert _count(result, "pragma solidity") == 1
    assert "Apache-2.0" in result
    assert "^0.8.24" in result


def test_pragma_goes_after_existing_license():
    result = sanitize("// SPDX-License-Identifier: MIT\ninterface I {\n    function f() external;\n}")
    assert result.split("\n")[:2] == [DEFAULT_LICENSE_HEADER, DEFAULT_PRAGMA]


def test_trailing_commentary_after_declaration_is_cut():
    raw = "contract A {\n    uint256 x;\n}\n\nDeploy it with Hardhat and verify on Etherscan."
    result = sanitize(raw)
    assert result.endswith("}")
    assert "Hardhat" not in result


def test_braces_in_strings_and_comments_do_not_close_the_contract():
    raw = (
        "contract A {\n"
        '    string public s = "}";\n'
        "    // } is not a brace here\n"
        "    uint256 public y;\n"
        "}\n"
        "Trailing note here."
    )
    result = sanitize(raw)
    assert "uint256 public y;" in result
    assert "Trailing note" not in result


def test_following_top_level_declarations_are_kept():
    raw = (
        "interface IFoo {\n"
        "    function foo() external;\n"
        "}\n"
        "\n"
        "contract Foo is IFoo {\n"
        "    function foo() external {}\n"
        "}"
    )
    result = sanitize(raw)
    assert "interface IFoo {" in result
    assert "contract Foo is IFoo {" in result


def test_one_line_declaration_still_truncates():
    raw = (
        "interface IFoo { function foo() external; }\n"
        "Deploy with hardhat run scripts/deploy.js\n"
        "then verify on etherscan"
    )
    result = sanitize(raw)
    assert result.endswith("interface IFoo { function foo() external; }")
    assert "hardhat" not in result
    assert "etherscan" not in result


def test_empty_contract_body_still_truncates():
    result = sanitize("contract A {}\nThat is all you need.")
    assert result.endswith("contract A {}")


def test_prose_starting_with_type_keyword_is_cut():
    raw = "contract A {\n    uint256 x;\n}\n\naddress the reentrancy concerns before you deploy this to mainnet please\n"
    result = sanitize(raw)
    assert result.endswith("}")
    assert "reentrancy concerns" not in result


@pytest.mark.parametrize(
    "follower",
    [
        "contract B {\n}",
        "library SafeMath {\n}",
        "struct Position {\n    uint256 amount;\n}",
        "error Unauthorized(address caller);",
        "event Deposited(address indexed from, uint256 amount);",
        "function helper(uint256 a) pure returns (uint256) {\n    return a;\n}",
        "uint256 constant MAX_SUPPLY = 1_000_000;",
        "using SafeERC20 for IERC20;",
    ],
)
def test_file_level_declarations_after_close_are_kept(follower):
    result = sanitize(f"contract A {{\n}}\n\n{follower}\nThanks for reading.")
    assert result.endswith(follower.split("\n")[-1])
    assert "Thanks" not in result


@pytest.mark.parametrize(
    "trailer",
    [
        "contract with the owner as admin",
        "library of helpers is shown above",
        "string literals are escaped",
        "}",
    ],
)
def test_lookalike_lines_after_close_are_cut(trailer):
    result = sanitize(f"contract A {{\n    uint256 x;\n}}\n{trailer}")
    assert result.endswith("    uint256 x;\n}")


def test_operator_continuation_lines_are_kept():
    raw = (
        "contract M {\n"
        "    function f(uint256 a, uint256 b) public pure returns (uint256) {\n"
        "        uint256 c = a\n"
        "            * b\n"
        "            - 1\n"
        "            / 1e18;\n"
        "        return c;\n"
        "    }\n"
        "}"
    )
    result = sanitize(raw)
    assert "            * b\n            - 1\n            / 1e18;" in result


def test_multi_line_inheritance_header_is_kept():
    raw = "contract Foo is\n    ERC20,\n    Ownable\n{\n    uint256 x;\n}"
    result = sanitize(raw)
    assert "    Ownable" in result
    assert result.endswith("}")


def test_interleaved_narrative_is_removed_and_comments_kept():
    raw = (
        "## Token contract\n"
        "pragma solidity ^0.8.20;\n"
        "contract A {\n"
        "    // Here is the mint function\n"
        "    Note: the owner can mint tokens\n"
        "    /**\n"
        "     * This contract lets the owner mint new coins for users and it is simple\n"
        "     */\n"
        "    function mint() external {}\n"
        "}"
    )
    result = sanitize(raw)
    assert "## Token contract" not in result
    assert "Note: the owner" not in result
    assert "// Here is the mint function" in result
    assert "This contract lets the owner mint" in result


def test_blank_runs_collapse_to_one():
    result = sanitize("contract A {\n\n\n\n    uint256 x;\n\n\n}\n\n\n")
    assert "\n\n\n" not in result
    assert "{\n\n    uint256 x;\n\n}" in result


def test_crlf_input():
    result = sanitize("contract A {\r\n    uint256 x;\r\n}\r\n")
    assert "\r" not in result
    assert "contract A {" in result


@pytest.mark.parametrize(
    "raw",
    [
        CLEAN_CONTRACT,
        "Sure! Here's the code:\n```solidity\ncontract A {\n    uint256 x;\n}\n```\nEnjoy.",
        "contract A {\n\n\n\n}\n\n\nSome explanation that follows the code block here.",
        "/* header */\nabstract contract Base {\n    function f() public virtual;\n}\ncontract B is Base {\n}",
    ],
)
def test_sanitize_is_idempotent(raw):
    once = sanitize(raw)
    assert sanitize(once) == once


def test_no_declaration_is_rejected():
    with pytest.raises(ValidationError, match="valid Solidity contract"):
        sanitize("Sorry, I cannot help with that request.")


def test_non_text_is_rejected():
    with pytest.raises(ValidationError):
        sanitize(None)


def test_transforms_never_raise_on_noise():
    noise = ["```", "}}}}", "{", "/* unterminated", "", "   ", "'\"", "- item"]
    for step in (strip_code_fences, truncate_after_declaration, collapse_blank_lines):
        assert isinstance(step(noise), list)


@pytest.mark.parametrize(
    "line, expected",
    [
        ("Here is the contract:", True),
        ("### Features", True),
        ("**Security Notes**", True),
        ("1. Owner can mint tokens", True),
        ("- Uses OpenZeppelin for the base implementation", True),
        ("The implementation below uses a pull pattern for all of the refunds", True),
        ("uint256 public totalRaised;", False),
        ("function withdraw() external nonReentrant {", False),
        ("// Here is a comment", False),
        ("address indexed from,", False),
        ("", False),
    ],
)
def test_is_narrative(line, expected):
    assert is_narrative(line) is expected


def test_narrative_patterns_are_extensible():
    import re

    pattern = re.compile(r"^hope this helps", re.IGNORECASE)
    NARRATIVE_PATTERNS.append(pattern)
    try:
        assert is_narrative("Hope this helps")
    finally:
        NARRATIVE_PATTERNS.remove(pattern)
    assert not is_narrative("Hope this helps")
