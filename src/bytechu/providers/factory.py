"""Provider factory for creating the wallet provider."""

import logging
from typing import Optional

from bytechu.config import Settings, get_settings
from bytechu.providers.base import WalletProvider
from bytechu.providers.dryrun import DryRunWalletProvider
from bytechu.providers.rpc import JsonRpcProvider

logger = logging.getLogger(__name__)

# Singleton instance
_provider_instance: Optional[WalletProvider] = None
_provider_resolved = False


def get_provider(settings: Optional[Settings] = None) -> Optional[WalletProvider]:
    """Get the configured wallet provider.

    Provider is selected based on the BYTECHU_PROVIDER environment variable:
    - dryrun (default): Simulated wallet with the greeter contract deployed
    - rpc: Read-only JSON-RPC provider for the configured endpoint
    - none: No provider detected (every wallet action reports it)

    Returns:
        Configured WalletProvider, or None when no provider is available
    """
    global _provider_instance, _provider_resolved

    if _provider_resolved:
        return _provider_instance

    settings = settings or get_settings()
    provider_name = settings.provider.lower()

    if provider_name == "rpc":
        _provider_instance = JsonRpcProvider(settings.rpc_url, timeout=settings.rpc_timeout)
    elif provider_name == "none":
        _provider_instance = None
    else:
        if provider_name != "dryrun":
            logger.warning(f"Unknown provider '{provider_name}' - falling back to dryrun")
        _provider_instance = DryRunWalletProvider(
            accounts=["0x" + "ab" * 20],
            contracts={settings.contract_address: "Hello from Sapphire"},
        )

    _provider_resolved = True
    return _provider_instance


def reset_provider() -> None:
    """Reset provider instance (useful for testing)."""
    global _provider_instance, _provider_resolved
    _provider_instance = None
    _provider_resolved = False
