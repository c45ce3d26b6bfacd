"""Data contracts shared by the providers, services and session."""

from bytechu.contracts.wallet import (
    ChainDescriptor,
    ConnectResponse,
    ErrorKind,
    NativeCurrency,
    OperationError,
    OperationSource,
    ReadResponse,
    ReadResult,
    SessionSnapshot,
    SwitchChainResponse,
)

__all__ = [
    "ChainDescriptor",
    "ConnectResponse",
    "ErrorKind",
    "NativeCurrency",
    "OperationError",
    "OperationSource",
    "ReadResponse",
    "ReadResult",
    "SessionSnapshot",
    "SwitchChainResponse",
]
