"""Greeter contract boundary: the single read-only ``greeting()`` call."""

import logging

from eth_abi import decode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from bytechu.providers.gateway import ProviderGateway

logger = logging.getLogger(__name__)

# Minimal ABI: only the view function the dapp reads
GREETER_ABI = [
    {
        "inputs": [],
        "name": "greeting",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
]


def _function_signature(abi: list[dict], name: str) -> tuple[str, list[str]]:
    """Return (signature, output types) for ``name`` in ``abi``."""
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == name:
            inputs = ",".join(arg["type"] for arg in entry.get("inputs", []))
            outputs = [arg["type"] for arg in entry.get("outputs", [])]
            return f"{name}({inputs})", outputs
    raise KeyError(f"Function {name} not found in ABI")


class GreeterContract:
    """Read-only binding to the greeter contract through the wallet provider."""

    def __init__(self, gateway: ProviderGateway, address: str):
        self._gateway = gateway
        self.address = to_checksum_address(address)
        signature, self._output_types = _function_signature(GREETER_ABI, "greeting")
        self._calldata = "0x" + function_signature_to_4byte_selector(signature).hex()

    async def greeting(self) -> str:
        """Call greeting() and decode the returned string.

        Raises:
            ValueError: If the call returned no data or undecodable data
        """
        raw = await self._gateway.call(self.address, self._calldata)
        data = bytes.fromhex(raw[2:] if raw and raw.startswith("0x") else (raw or ""))
        if not data:
            # Empty return data means no contract code or wrong network
            raise ValueError(f"could not decode result data (no data returned by {self.address})")

        (value,) = decode(self._output_types, data)
        logger.debug("greeting() -> %r", value)
        return value
