"""Gateway over the injected wallet provider.

The controllers never talk to a ``WalletProvider`` directly; they go through
this adapter, which turns raw RPC methods into named primitives and turns
event registration into a subscribe/unsubscribe capability.
"""

import logging
from typing import Any, Callable, Optional

from bytechu.contracts.wallet import ChainDescriptor
from bytechu.errors import ProviderUnavailable
from bytechu.providers.base import EventHandler, WalletProvider

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class ProviderGateway:
    """Request and event primitives over an optional wallet provider.

    A gateway built without a provider is valid: every request raises
    ``ProviderUnavailable`` so the failure surfaces at the operation that
    needed it, not at construction time.
    """

    def __init__(self, provider: Optional[WalletProvider] = None):
        self._provider = provider

    @property
    def available(self) -> bool:
        """Whether a wallet provider was detected."""
        return self._provider is not None

    @property
    def provider_name(self) -> Optional[str]:
        return self._provider.name if self._provider is not None else None

    def _require_provider(self) -> WalletProvider:
        if self._provider is None:
            raise ProviderUnavailable()
        return self._provider

    async def _request(self, method: str, params: Optional[list] = None) -> Any:
        provider = self._require_provider()
        logger.debug("Provider request: %s", method)
        return await provider.request(method, params)

    async def request_accounts(self) -> list[str]:
        """Ask the user to authorize accounts (prompts)."""
        return list(await self._request("eth_requestAccounts") or [])

    async def request_already_authorized_accounts(self) -> list[str]:
        """Return accounts already authorized for this origin (never prompts)."""
        return list(await self._request("eth_accounts") or [])

    async def request_current_chain_id(self) -> str:
        """Return the wallet's active chain ID as a hex string."""
        return await self._request("eth_chainId")

    async def request_add_or_switch_chain(self, descriptor: ChainDescriptor) -> None:
        """Ask the wallet to add (and switch to) the given network (prompts)."""
        await self._request(
            "wallet_addEthereumChain",
            [descriptor.model_dump(by_alias=True)],
        )

    async def call(self, to: str, data: str) -> str:
        """Execute a read-only eth_call against the latest block."""
        return await self._request("eth_call", [{"to": to, "data": data}, "latest"])

    def subscribe(self, event: str, handler: EventHandler) -> Unsubscribe:
        """Register ``handler`` for ``event`` and return its unsubscribe handle.

        The handle is idempotent. Without a provider there is nothing to
        listen to and a no-op handle is returned.
        """
        if self._provider is None:
            logger.debug("No provider - skipping %s subscription", event)
            return lambda: None

        provider = self._provider
        provider.on(event, handler)
        active = True

        def unsubscribe() -> None:
            nonlocal active
            if active:
                provider.remove_listener(event, handler)
                active = False

        return unsubscribe
