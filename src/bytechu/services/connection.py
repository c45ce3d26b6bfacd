"""Connection controller: owns the connected account.

The account changes through exactly three paths: a successful ``connect()``,
an ``accountsChanged`` notification from the wallet, and the silent startup
check. Every change is pushed synchronously to the registered listeners so
readiness is recomputed after each individual mutation.
"""

import logging
from typing import Callable, Optional

from bytechu.contracts.wallet import ConnectResponse, OperationError, OperationSource
from bytechu.errors import ConnectRejected, NoAccountsReturned, WalletGateError
from bytechu.providers.base import ACCOUNTS_CHANGED, ProviderRpcError
from bytechu.providers.gateway import ProviderGateway, Unsubscribe
from bytechu.services.error_channel import ErrorChannel

logger = logging.getLogger(__name__)

AccountListener = Callable[[Optional[str]], None]


def normalize_address(address: Optional[str]) -> Optional[str]:
    """Lowercase an address; empty values become None."""
    if not address:
        return None
    return address.lower()


def short_address(address: Optional[str]) -> str:
    """Shorten an address for logs and display (0x1234...abcd)."""
    if not address:
        return "(none)"
    return f"{address[:6]}...{address[-4:]}" if len(address) > 10 else address


class ConnectionController:
    """Performs the connect handshake and tracks account changes."""

    def __init__(self, gateway: ProviderGateway, errors: ErrorChannel):
        self._gateway = gateway
        self._errors = errors
        self._account: Optional[str] = None
        self._pending_connects = 0
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: list[AccountListener] = []

    @property
    def account(self) -> Optional[str]:
        return self._account

    @property
    def connecting(self) -> bool:
        """True while any connect() call is pending."""
        return self._pending_connects > 0

    def add_listener(self, listener: AccountListener) -> None:
        self._listeners.append(listener)

    def _set_account(self, account: Optional[str]) -> None:
        account = normalize_address(account)
        if account == self._account:
            return
        logger.info(
            "Account changed: %s -> %s", short_address(self._account), short_address(account)
        )
        self._account = account
        for listener in list(self._listeners):
            listener(account)

    async def connect(self) -> ConnectResponse:
        """Ask the wallet to authorize an account.

        Returns:
            ConnectResponse with the connected account, or the error that was
            also published to the error channel
        """
        attempt = self._errors.begin(OperationSource.CONNECT)
        self._pending_connects += 1

        try:
            try:
                accounts = await self._gateway.request_accounts()
            except ProviderRpcError as e:
                raise ConnectRejected(e.message or "Failed to connect wallet") from e
            except WalletGateError:
                raise
            except Exception as e:
                raise ConnectRejected(str(e) or "Failed to connect wallet") from e

            if not accounts:
                raise NoAccountsReturned()

            self._set_account(accounts[0])
            self._errors.succeed(OperationSource.CONNECT, attempt)
            logger.info("Wallet connected: %s", short_address(self._account))
            return ConnectResponse(success=True, account=self._account)

        except WalletGateError as e:
            error = OperationError(source=OperationSource.CONNECT, kind=e.kind, message=e.message)
            self._errors.fail(OperationSource.CONNECT, attempt, e.kind, e.message)
            return ConnectResponse(success=False, account=self._account, error=error)

        finally:
            self._pending_connects -= 1

    def observe_account_changes(self) -> None:
        """Subscribe to accountsChanged. Idempotent; released by close()."""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._gateway.subscribe(ACCOUNTS_CHANGED, self._handle_accounts_changed)

    def _handle_accounts_changed(self, accounts: list[str]) -> None:
        accounts = list(accounts or [])
        if not accounts:
            logger.info("Wallet reported no accounts - disconnected")
        self._set_account(accounts[0] if accounts else None)

    async def bootstrap_existing_connection(self) -> None:
        """Silently seed the account from an existing authorization.

        Best-effort: failures are logged and otherwise ignored.
        """
        try:
            accounts = await self._gateway.request_already_authorized_accounts()
        except Exception as e:
            logger.debug(f"Account bootstrap skipped: {e}")
            return

        if accounts:
            self._set_account(accounts[0])

    def close(self) -> None:
        """Release the accountsChanged subscription."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
