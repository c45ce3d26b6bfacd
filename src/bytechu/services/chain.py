"""Chain controller: owns the wallet's active chain ID."""

import logging
from typing import Callable, Optional

from bytechu.contracts.wallet import (
    ChainDescriptor,
    OperationError,
    OperationSource,
    SwitchChainResponse,
)
from bytechu.errors import ChainSwitchRejected, WalletGateError
from bytechu.providers.base import CHAIN_CHANGED, ProviderRpcError
from bytechu.providers.gateway import ProviderGateway, Unsubscribe
from bytechu.services.error_channel import ErrorChannel

logger = logging.getLogger(__name__)

ChainListener = Callable[[Optional[int]], None]


def parse_chain_id(value) -> int:
    """Decode a wallet chain ID ("0x5b7f" or an int).

    Strings are always hexadecimal, with or without the 0x prefix.

    Raises:
        ValueError: If the value is not a non-negative integer id
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid chain ID: {value!r}")
    if isinstance(value, int):
        chain_id = value
    else:
        chain_id = int(str(value).strip(), 16)
    if chain_id < 0:
        raise ValueError(f"Invalid chain ID: {value!r}")
    return chain_id


class ChainController:
    """Performs the add/switch network handshake and tracks chain changes."""

    def __init__(
        self,
        gateway: ProviderGateway,
        errors: ErrorChannel,
        descriptor: ChainDescriptor,
    ):
        self._gateway = gateway
        self._errors = errors
        self.descriptor = descriptor
        self.target_chain_id = parse_chain_id(descriptor.chain_id)
        self._chain_id: Optional[int] = None
        self._pending_switches = 0
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: list[ChainListener] = []

    @property
    def chain_id(self) -> Optional[int]:
        return self._chain_id

    @property
    def switching(self) -> bool:
        """True while any switch_to_target_chain() call is pending."""
        return self._pending_switches > 0

    @property
    def on_target_chain(self) -> bool:
        return self._chain_id == self.target_chain_id

    def add_listener(self, listener: ChainListener) -> None:
        self._listeners.append(listener)

    def _set_chain_id(self, chain_id: Optional[int]) -> None:
        if chain_id == self._chain_id:
            return
        logger.info("Chain changed: %s -> %s", self._chain_id, chain_id)
        self._chain_id = chain_id
        for listener in list(self._listeners):
            listener(chain_id)

    async def switch_to_target_chain(self) -> SwitchChainResponse:
        """Ask the wallet to add and switch to the target network.

        On success the chain ID is re-read from the wallet rather than
        assumed, so the state reflects what the wallet actually did.
        """
        attempt = self._errors.begin(OperationSource.SWITCH_CHAIN)
        self._pending_switches += 1

        try:
            try:
                await self._gateway.request_add_or_switch_chain(self.descriptor)
                hex_chain_id = await self._gateway.request_current_chain_id()
                chain_id = parse_chain_id(hex_chain_id)
            except ProviderRpcError as e:
                raise ChainSwitchRejected(e.message or "Failed to switch network") from e
            except WalletGateError:
                raise
            except Exception as e:
                raise ChainSwitchRejected(str(e) or "Failed to switch network") from e

            self._set_chain_id(chain_id)
            self._errors.succeed(OperationSource.SWITCH_CHAIN, attempt)
            logger.info("Switched to %s (chain %d)", self.descriptor.chain_name, chain_id)
            return SwitchChainResponse(success=True, chain_id=self._chain_id)

        except WalletGateError as e:
            error = OperationError(source=OperationSource.SWITCH_CHAIN, kind=e.kind, message=e.message)
            self._errors.fail(OperationSource.SWITCH_CHAIN, attempt, e.kind, e.message)
            return SwitchChainResponse(success=False, chain_id=self._chain_id, error=error)

        finally:
            self._pending_switches -= 1

    def observe_chain_changes(self) -> None:
        """Subscribe to chainChanged. Idempotent; released by close()."""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._gateway.subscribe(CHAIN_CHANGED, self._handle_chain_changed)

    def _handle_chain_changed(self, hex_chain_id: str) -> None:
        try:
            chain_id = parse_chain_id(hex_chain_id)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring undecodable chain ID from wallet: {hex_chain_id!r}")
            return
        self._set_chain_id(chain_id)

    async def bootstrap_current_chain(self) -> None:
        """Silently seed the chain ID from the wallet.

        Best-effort: failures are logged and otherwise ignored.
        """
        try:
            chain_id = parse_chain_id(await self._gateway.request_current_chain_id())
        except Exception as e:
            logger.debug(f"Chain bootstrap skipped: {e}")
            return

        self._set_chain_id(chain_id)

    def close(self) -> None:
        """Release the chainChanged subscription."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
