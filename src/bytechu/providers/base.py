"""Wallet provider base interface.

Models the EIP-1193 surface an injected wallet exposes: a single
``request`` entry point plus ``on``/``remove_listener`` for events.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

ACCOUNTS_CHANGED = "accountsChanged"
CHAIN_CHANGED = "chainChanged"

# EIP-1193 error codes
USER_REJECTED_REQUEST = 4001
UNSUPPORTED_METHOD = 4200
INTERNAL_ERROR = -32603

EventHandler = Callable[[Any], None]


class ProviderRpcError(Exception):
    """Error returned by a provider request."""

    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


class WalletProvider(ABC):
    """Abstract base class for EIP-1193 wallet providers."""

    @abstractmethod
    async def request(self, method: str, params: Optional[list] = None) -> Any:
        """Send a JSON-RPC style request to the wallet.

        Args:
            method: RPC method name (eth_requestAccounts, eth_chainId, etc.)
            params: Positional parameters

        Returns:
            The decoded result

        Raises:
            ProviderRpcError: If the wallet or the user rejects the request
        """
        raise NotImplementedError()

    @abstractmethod
    def on(self, event: str, handler: EventHandler) -> None:
        """Register an event handler."""
        raise NotImplementedError()

    @abstractmethod
    def remove_listener(self, event: str, handler: EventHandler) -> None:
        """Remove a previously registered event handler."""
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        raise NotImplementedError()


class ListenerRegistry:
    """Event listener bookkeeping shared by provider implementations."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventHandler]] = {}

    def add(self, event: str, handler: EventHandler) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def remove(self, event: str, handler: EventHandler) -> None:
        handlers = self._listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def count(self, event: Optional[str] = None) -> int:
        """Number of registered handlers, for one event or all of them."""
        if event is not None:
            return len(self._listeners.get(event, []))
        return sum(len(handlers) for handlers in self._listeners.values())

    def emit(self, event: str, payload: Any) -> None:
        # Copy so handlers may unsubscribe while being notified
        for handler in list(self._listeners.get(event, [])):
            handler(payload)
