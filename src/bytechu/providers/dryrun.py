"""Dry-run wallet provider for development and testing (no real wallet)."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from bytechu.providers.base import (
    ACCOUNTS_CHANGED,
    CHAIN_CHANGED,
    UNSUPPORTED_METHOD,
    USER_REJECTED_REQUEST,
    EventHandler,
    ListenerRegistry,
    ProviderRpcError,
    WalletProvider,
)

logger = logging.getLogger(__name__)

GREETING_SELECTOR = "0x" + function_signature_to_4byte_selector("greeting()").hex()

_UNSET = object()


@dataclass
class PendingRequest:
    """A request parked by ``hold()`` until the test releases it."""

    method: str
    params: Optional[list]
    future: asyncio.Future = field(repr=False)


class DryRunWalletProvider(WalletProvider):
    """Simulated injected wallet with scriptable accounts, chain and contracts.

    Behaves like a browser wallet: ``eth_requestAccounts`` authorizes the
    wallet's accounts and emits ``accountsChanged``, adding a chain switches
    to it and emits ``chainChanged``. Failures are scripted per method with
    ``fail()``, and ``hold()`` parks requests so callers can control the
    order in which responses arrive.
    """

    def __init__(
        self,
        accounts: Optional[list[str]] = None,
        chain_id: int = 1,
        authorized: bool = False,
        contracts: Optional[dict[str, str]] = None,
    ):
        self.wallet_accounts: list[str] = list(accounts or [])
        self.authorized = authorized
        self.chain_id = chain_id
        self.contracts: dict[str, str] = {
            address.lower(): greeting for address, greeting in (contracts or {}).items()
        }
        self.requests: list[str] = []
        self.last_params: dict[str, Optional[list]] = {}
        self._listeners = ListenerRegistry()
        self._failures: dict[str, ProviderRpcError] = {}
        self._held: set[str] = set()
        self._pending: list[PendingRequest] = []

    @property
    def name(self) -> str:
        return "dryrun"

    # ------------------------------------------------------------------
    # Scripting helpers
    # ------------------------------------------------------------------

    def deploy(self, address: str, greeting: str) -> None:
        """Register a greeter contract returning ``greeting``."""
        self.contracts[address.lower()] = greeting

    def fail(
        self,
        method: str,
        message: str = "User rejected the request.",
        code: int = USER_REJECTED_REQUEST,
    ) -> None:
        """Make every subsequent ``method`` request raise until ``succeed()``."""
        self._failures[method] = ProviderRpcError(code, message)

    def succeed(self, method: str) -> None:
        """Clear a scripted failure."""
        self._failures.pop(method, None)

    def hold(self, method: str) -> None:
        """Park every subsequent ``method`` request until released."""
        self._held.add(method)

    def pending(self, method: Optional[str] = None) -> list[PendingRequest]:
        """Parked requests, oldest first."""
        return [p for p in self._pending if method is None or p.method == method]

    def release(
        self,
        request: PendingRequest,
        result: Any = _UNSET,
        error: Optional[ProviderRpcError] = None,
    ) -> None:
        """Resolve a parked request.

        Without an explicit ``result`` or ``error`` the request is answered
        from the wallet's state at release time.
        """
        self._pending.remove(request)
        if request.future.done():
            # Caller went away (cancelled task)
            return
        if error is not None:
            request.future.set_exception(error)
            return
        if result is _UNSET:
            try:
                result = self._dispatch(request.method, request.params)
            except ProviderRpcError as exc:
                request.future.set_exception(exc)
                return
        request.future.set_result(result)

    def release_next(self, method: str, **kwargs: Any) -> None:
        """Resolve the oldest parked ``method`` request."""
        self.release(self.pending(method)[0], **kwargs)

    def emit_accounts_changed(self, accounts: list[str]) -> None:
        """Simulate the user switching or disconnecting accounts."""
        logger.debug("Simulating accountsChanged: %s", accounts)
        self.wallet_accounts = list(accounts)
        self.authorized = bool(accounts)
        self._listeners.emit(ACCOUNTS_CHANGED, list(accounts))

    def emit_chain_changed(self, chain_id: int) -> None:
        """Simulate the user switching networks in the wallet."""
        logger.debug("Simulating chainChanged: %d", chain_id)
        self.chain_id = chain_id
        self._listeners.emit(CHAIN_CHANGED, hex(chain_id))

    def listener_count(self, event: Optional[str] = None) -> int:
        return self._listeners.count(event)

    # ------------------------------------------------------------------
    # WalletProvider
    # ------------------------------------------------------------------

    def on(self, event: str, handler: EventHandler) -> None:
        self._listeners.add(event, handler)

    def remove_listener(self, event: str, handler: EventHandler) -> None:
        self._listeners.remove(event, handler)

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        self.requests.append(method)
        self.last_params[method] = params

        if method in self._held:
            future = asyncio.get_running_loop().create_future()
            self._pending.append(PendingRequest(method, params, future))
            return await future

        # Yield once so callers observe a real suspension point
        await asyncio.sleep(0)
        return self._dispatch(method, params)

    def _dispatch(self, method: str, params: Optional[list]) -> Any:
        failure = self._failures.get(method)
        if failure is not None:
            raise failure

        if method == "eth_requestAccounts":
            if not self.authorized:
                self.authorized = True
                self._listeners.emit(ACCOUNTS_CHANGED, list(self.wallet_accounts))
            return list(self.wallet_accounts)

        if method == "eth_accounts":
            return list(self.wallet_accounts) if self.authorized else []

        if method == "eth_chainId":
            return hex(self.chain_id)

        if method == "wallet_addEthereumChain":
            descriptor = (params or [{}])[0]
            target = int(descriptor["chainId"], 16)
            if target != self.chain_id:
                self.emit_chain_changed(target)
            return None

        if method == "eth_call":
            tx = (params or [{}])[0]
            greeting = self.contracts.get(str(tx.get("to", "")).lower())
            if greeting is None or tx.get("data") != GREETING_SELECTOR:
                # No code at the address: calls return empty data
                return "0x"
            return "0x" + encode(["string"], [greeting]).hex()

        raise ProviderRpcError(UNSUPPORTED_METHOD, f"Method {method} is not supported")
