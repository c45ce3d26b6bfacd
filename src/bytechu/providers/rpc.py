"""Read-only provider over an HTTP JSON-RPC endpoint.

Useful when no wallet is injected but the contract should still be
reachable for diagnostics: it answers the silent methods (chain id, empty
account list, eth_call) and rejects anything that would need a user prompt.
"""

import itertools
import logging
from typing import Any, Optional

import httpx

from bytechu.providers.base import (
    INTERNAL_ERROR,
    UNSUPPORTED_METHOD,
    EventHandler,
    ListenerRegistry,
    ProviderRpcError,
    WalletProvider,
)

logger = logging.getLogger(__name__)

# Methods forwarded to the node as-is
FORWARDED_METHODS = {"eth_chainId", "eth_call", "eth_blockNumber", "net_version"}


class JsonRpcProvider(WalletProvider):
    """JSON-RPC provider backed by httpx.

    Holds no accounts and never emits events; listeners are recorded only
    so that subscribe/unsubscribe stay balanced.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the provider.

        Args:
            rpc_url: Node endpoint
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)
        self._listeners = ListenerRegistry()

    @property
    def name(self) -> str:
        return "rpc"

    def on(self, event: str, handler: EventHandler) -> None:
        self._listeners.add(event, handler)

    def remove_listener(self, event: str, handler: EventHandler) -> None:
        self._listeners.remove(event, handler)

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        if method == "eth_accounts":
            return []

        if method not in FORWARDED_METHODS:
            raise ProviderRpcError(
                UNSUPPORTED_METHOD,
                f"{method} requires a wallet; {self.rpc_url} is read-only",
            )

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"RPC request {method} to {self.rpc_url} failed: {e}")
            raise ProviderRpcError(INTERNAL_ERROR, f"RPC request failed: {e}") from e

        error = data.get("error")
        if error:
            raise ProviderRpcError(
                error.get("code", INTERNAL_ERROR),
                error.get("message", "RPC error"),
                error.get("data"),
            )

        return data.get("result")
