"""Pytest configuration and fixtures."""

import asyncio
import os

import pytest
from eth_abi import encode

# Keep developer overrides out of the test run
for _key in [k for k in os.environ if k.startswith("BYTECHU_")]:
    del os.environ[_key]

from bytechu.app import DappSession
from bytechu.config import Settings, get_settings
from bytechu.providers.dryrun import DryRunWalletProvider
from bytechu.providers.factory import reset_provider

TARGET_CHAIN_ID = 23295
OTHER_CHAIN_ID = 1
ACCOUNT = "0xABC" + "0" * 34 + "123"
OTHER_ACCOUNT = "0xDEF" + "0" * 34 + "456"
CONTRACT_ADDRESS = "0x6eED2f58ed21a651CCc42Af123E243FaBad920E0"


def encode_string(value: str) -> str:
    """ABI-encode a string return value as an eth_call result."""
    return "0x" + encode(["string"], [value]).hex()


async def wait_for_pending(provider: DryRunWalletProvider, method: str, count: int = 1) -> None:
    """Let scheduled tasks run until ``count`` requests of ``method`` are parked."""
    for _ in range(100):
        if len(provider.pending(method)) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} pending {method} request(s)")


@pytest.fixture(autouse=True)
def reset_singletons():
    """Clear cached settings and provider between tests."""
    get_settings.cache_clear()
    reset_provider()
    yield
    get_settings.cache_clear()
    reset_provider()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def provider() -> DryRunWalletProvider:
    """Wallet holding ACCOUNT, not yet authorized, on a non-target chain."""
    return DryRunWalletProvider(
        accounts=[ACCOUNT],
        chain_id=OTHER_CHAIN_ID,
        contracts={CONTRACT_ADDRESS: "hello"},
    )


@pytest.fixture
def session(provider, settings) -> DappSession:
    return DappSession(provider=provider, settings=settings)
