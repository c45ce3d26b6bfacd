"""Wallet, chain and read-result contracts.

These Pydantic models describe everything the session exposes to a client:
the add/switch chain descriptor sent to the wallet, the error slot, the
committed read result and the per-operation responses.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OperationSource(str, Enum):
    """User-facing operations that may report an error."""

    CONNECT = "connect"
    SWITCH_CHAIN = "switch_chain"
    READ = "read"


class ErrorKind(str, Enum):
    """Error taxonomy surfaced through the error channel."""

    PROVIDER_UNAVAILABLE = "provider_unavailable"
    NO_ACCOUNTS_RETURNED = "no_accounts_returned"
    CONNECT_REJECTED = "connect_rejected"
    CHAIN_SWITCH_REJECTED = "chain_switch_rejected"
    READ_FAILED = "read_failed"
    NOT_READY = "not_ready"


class NativeCurrency(BaseModel):
    """Native currency block of an EIP-3085 chain descriptor."""

    name: str = Field(..., description="Currency name")
    symbol: str = Field(..., description="Currency ticker")
    decimals: int = Field(default=18, description="Currency decimals")


class ChainDescriptor(BaseModel):
    """Parameters for wallet_addEthereumChain.

    Serialize with ``model_dump(by_alias=True)`` to get the camelCase wire
    form the wallet expects.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    chain_id: str = Field(..., alias="chainId", description="Hex chain ID")
    chain_name: str = Field(..., alias="chainName")
    native_currency: NativeCurrency = Field(..., alias="nativeCurrency")
    rpc_urls: list[str] = Field(default_factory=list, alias="rpcUrls")
    block_explorer_urls: list[str] = Field(default_factory=list, alias="blockExplorerUrls")


class OperationError(BaseModel):
    """The single error currently shown to the user."""

    model_config = ConfigDict(frozen=True)

    source: OperationSource = Field(..., description="Operation that failed")
    kind: ErrorKind = Field(..., description="Error category")
    message: str = Field(..., description="Human-readable message")


class ReadResult(BaseModel):
    """A committed contract read."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Value returned by greeting()")
    fetched_at: int = Field(..., description="Readiness window the read was issued in")


class ConnectResponse(BaseModel):
    """Outcome of a connect attempt."""

    success: bool = Field(..., description="Whether the wallet connected")
    account: Optional[str] = Field(None, description="Connected account (lowercase)")
    error: Optional[OperationError] = Field(None, description="Error if failed")


class SwitchChainResponse(BaseModel):
    """Outcome of a switch-to-target-chain attempt."""

    success: bool = Field(..., description="Whether the wallet accepted the switch")
    chain_id: Optional[int] = Field(None, description="Chain ID reported after the switch")
    error: Optional[OperationError] = Field(None, description="Error if failed")


class ReadResponse(BaseModel):
    """Outcome of a contract read attempt."""

    success: bool = Field(..., description="Whether the read was committed")
    result: Optional[ReadResult] = Field(None, description="Committed result")
    error: Optional[OperationError] = Field(None, description="Error if failed")
    discarded: bool = Field(
        default=False,
        description="True if the outcome belonged to a stale readiness window",
    )


class SessionSnapshot(BaseModel):
    """Point-in-time view of all observable session state."""

    account: Optional[str] = None
    chain_id: Optional[int] = None
    target_chain_id: int
    ready: bool = False
    connecting: bool = False
    switching: bool = False
    loading: bool = False
    result: Optional[ReadResult] = None
    error: Optional[OperationError] = None
    provider_available: bool = False
