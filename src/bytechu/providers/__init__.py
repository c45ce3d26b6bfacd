"""Wallet provider adapters."""

from bytechu.providers.base import ProviderRpcError, WalletProvider
from bytechu.providers.factory import get_provider
from bytechu.providers.gateway import ProviderGateway

__all__ = ["ProviderGateway", "ProviderRpcError", "WalletProvider", "get_provider"]
