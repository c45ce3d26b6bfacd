"""Bytechu - wallet connection and chain-gated greeter reads for Oasis Sapphire."""

__version__ = "0.1.0"
