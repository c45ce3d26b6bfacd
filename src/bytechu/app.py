"""Dapp session: wires the wallet state machine together.

The session is the composition root. It builds every component from an
explicitly injected provider and settings, acquires the provider event
subscriptions on ``start()`` and releases them on ``shutdown()``.
"""

import logging
from typing import Optional

from bytechu.config import Settings, get_settings
from bytechu.contracts.wallet import (
    ConnectResponse,
    ReadResponse,
    SessionSnapshot,
    SwitchChainResponse,
)
from bytechu.providers.base import WalletProvider
from bytechu.providers.factory import get_provider
from bytechu.providers.gateway import ProviderGateway
from bytechu.services.chain import ChainController
from bytechu.services.connection import ConnectionController, short_address
from bytechu.services.error_channel import ErrorChannel
from bytechu.services.greeter import GreeterContract
from bytechu.services.readiness import ReadinessGate
from bytechu.services.reader import ContractReadCoordinator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger("httpx").setLevel(logging.WARNING)


class DappSession:
    """Connect, switch network and read the greeter contract."""

    def __init__(
        self,
        provider: Optional[WalletProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.gateway = ProviderGateway(provider)
        self.errors = ErrorChannel()
        self.connection = ConnectionController(self.gateway, self.errors)
        self.chain = ChainController(self.gateway, self.errors, self.settings.chain_descriptor())
        self.gate = ReadinessGate(
            get_account=lambda: self.connection.account,
            get_chain_id=lambda: self.chain.chain_id,
            target_chain_id=self.settings.chain_id,
        )
        self.contract = GreeterContract(self.gateway, self.settings.contract_address)
        self.reader = ContractReadCoordinator(self.contract, self.gate, self.errors)

        # Readiness is recomputed after every individual mutation
        self.connection.add_listener(lambda _account: self.gate.recompute())
        self.chain.add_listener(lambda _chain_id: self.gate.recompute())
        self.reader.attach()
        self._started = False

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DappSession":
        """Build a session using the provider configured in settings."""
        settings = settings or get_settings()
        return cls(provider=get_provider(settings), settings=settings)

    async def start(self, configure_logs: bool = False) -> None:
        """Subscribe to wallet events and check for an existing connection."""
        if configure_logs:
            configure_logging(self.settings)

        if self._started:
            return
        self._started = True

        if not self.gateway.available:
            logger.warning("No wallet provider detected - actions will report it")
        else:
            logger.info(f"Starting session with provider: {self.gateway.provider_name}")

        self.reader.attach()
        self.connection.observe_account_changes()
        self.chain.observe_chain_changes()

        await self.connection.bootstrap_existing_connection()
        await self.chain.bootstrap_current_chain()

    async def shutdown(self, cancel_reads: bool = False) -> None:
        """Release subscriptions and settle outstanding reads."""
        self.connection.close()
        self.chain.close()
        self.reader.close()
        if cancel_reads:
            self.reader.cancel_pending()
        await self.reader.wait_idle()
        self._started = False
        logger.info("Session shut down")

    async def __aenter__(self) -> "DappSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown(cancel_reads=True)
        return False

    async def connect(self) -> ConnectResponse:
        """Connect the wallet, then refresh the chain ID from the wallet."""
        response = await self.connection.connect()
        if response.success:
            await self.chain.bootstrap_current_chain()
        return response

    async def switch_network(self) -> SwitchChainResponse:
        return await self.chain.switch_to_target_chain()

    async def refresh(self) -> ReadResponse:
        return await self.reader.refresh()

    @property
    def ready(self) -> bool:
        return self.gate.ready

    def snapshot(self) -> SessionSnapshot:
        """Return the current observable state."""
        return SessionSnapshot(
            account=self.connection.account,
            chain_id=self.chain.chain_id,
            target_chain_id=self.settings.chain_id,
            ready=self.gate.ready,
            connecting=self.connection.connecting,
            switching=self.chain.switching,
            loading=self.reader.loading,
            result=self.reader.result,
            error=self.errors.error,
            provider_available=self.gateway.available,
        )

    def status_line(self) -> str:
        """One-line summary of the connection for display."""
        account = self.connection.account
        if self.connection.connecting:
            return "Connecting..."
        if account is None:
            return "Wallet not connected"
        if not self.chain.on_target_chain:
            chain = self.chain.chain_id if self.chain.chain_id is not None else "unknown"
            return f"Connected · {short_address(account)} · wrong network (chain {chain})"
        return f"Connected to {self.settings.chain_name} · {short_address(account)}"
