"""Shared test fixtures: settings, stub backends and a recording sleep."""

import pytest

from contract_generator.config import GeneratorSettings, ProviderSettings

CLEAN_CONTRACT = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

import "@openzeppelin/contracts/token/ERC20/ERC20.sol";
import "@openzeppelin/contracts/access/Ownable.sol";

/// @title FooCoin
contract FooCoin is ERC20, Ownable {
    constructor() ERC20("FooCoin", "FOO") Ownable(msg.sender) {
        _mint(msg.sender, 1_000_000 * 10 ** decimals());
    }

    function mint(address to, uint256 amount) external onlyOwner {
        _mint(to, amount);
    }
}"""


class StubBackend:
    """Backend that replays a script of results (str) and failures (Exception)."""

    name = "stub"

    def __init__(self, script):
        self.script = list(script)
        self.calls = []

    async def complete(self, prompt, sampling, timeout):
        self.calls.append((prompt, sampling, timeout))
        result = self.script[min(len(self.calls), len(self.script)) - 1]
        if isinstance(result, Exception):
            raise result
        return result


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def make_settings(**overrides) -> GeneratorSettings:
    values = dict(
        provider="openai",
        providers={
            "openai": ProviderSettings("openai", "sk-test", "gpt-4o", "https://api.openai.com/v1"),
            "anthropic": ProviderSettings("anthropic", None, "claude-3-5-sonnet-20240620", "https://api.anthropic.com"),
        },
    )
    values.update(overrides)
    return GeneratorSettings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def clean_contract():
    return CLEAN_CONTRACT
