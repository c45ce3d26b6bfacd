"""Wallet connection state machine and chain-gated contract reads.

Components, leaves first:
- ErrorChannel: single error slot
- ConnectionController: connected account
- ChainController: active chain ID
- ReadinessGate: connected AND on target chain
- GreeterContract: read-only contract boundary
- ContractReadCoordinator: window-tagged reads driven by readiness
"""

from bytechu.services.chain import ChainController, parse_chain_id
from bytechu.services.connection import ConnectionController
from bytechu.services.error_channel import ErrorChannel
from bytechu.services.greeter import GreeterContract
from bytechu.services.readiness import ReadinessGate, is_ready
from bytechu.services.reader import ContractReadCoordinator

__all__ = [
    "ChainController",
    "ConnectionController",
    "ContractReadCoordinator",
    "ErrorChannel",
    "GreeterContract",
    "ReadinessGate",
    "is_ready",
    "parse_chain_id",
]
