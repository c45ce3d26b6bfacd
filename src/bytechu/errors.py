"""Error taxonomy for wallet, chain and contract read operations.

These exceptions are raised inside the controllers and caught at each
operation boundary, where they are converted into an ``OperationError`` on
the error channel. None of them escapes a public operation.
"""

from bytechu.contracts.wallet import ErrorKind

PROVIDER_MISSING_MESSAGE = "MetaMask is not installed. Please install MetaMask to continue."


class WalletGateError(Exception):
    """Base class for all operation failures."""

    kind: ErrorKind

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProviderUnavailable(WalletGateError):
    """No injected wallet provider was detected."""

    kind = ErrorKind.PROVIDER_UNAVAILABLE

    def __init__(self, message: str = PROVIDER_MISSING_MESSAGE):
        super().__init__(message)


class NoAccountsReturned(WalletGateError):
    """The wallet authorized the request but returned no accounts."""

    kind = ErrorKind.NO_ACCOUNTS_RETURNED

    def __init__(self, message: str = "Wallet returned no accounts"):
        super().__init__(message)


class ConnectRejected(WalletGateError):
    """The user declined the connection or the provider failed."""

    kind = ErrorKind.CONNECT_REJECTED


class ChainSwitchRejected(WalletGateError):
    """The user declined the network switch or the provider failed."""

    kind = ErrorKind.CHAIN_SWITCH_REJECTED


class ReadFailed(WalletGateError):
    """The contract call or its decoding failed."""

    kind = ErrorKind.READ_FAILED


class NotReady(WalletGateError):
    """A read was requested while not connected to the target chain."""

    kind = ErrorKind.NOT_READY

    def __init__(self, message: str = "Connect a wallet on the target network first"):
        super().__init__(message)
