"""Application configuration using pydantic-settings.

All network and contract constants are fixed at build time but can be
overridden through BYTECHU_* environment variables or a local .env file.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bytechu.contracts.wallet import ChainDescriptor, NativeCurrency


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BYTECHU_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Contract
    # ======================
    contract_address: str = Field(
        default="0x6eED2f58ed21a651CCc42Af123E243FaBad920E0",
        description="Greeter contract address",
    )

    # ======================
    # Target network (Oasis Sapphire Testnet)
    # ======================
    chain_id: int = Field(default=23295, description="Target EVM chain ID")
    chain_name: str = Field(default="Oasis Sapphire Testnet", description="Chain display name")
    native_currency_name: str = Field(default="SROSE", description="Native currency name")
    native_currency_symbol: str = Field(default="SROSE", description="Native currency symbol")
    native_currency_decimals: int = Field(default=18, description="Native currency decimals")
    rpc_url: str = Field(
        default="https://testnet.sapphire.oasis.dev", description="Public RPC URL"
    )
    block_explorer_url: str = Field(
        default="https://testnet.explorer.sapphire.oasis.dev/",
        description="Block explorer URL",
    )

    # ======================
    # Provider
    # ======================
    provider: str = Field(
        default="dryrun", description="Wallet provider: dryrun, rpc or none"
    )
    rpc_timeout: float = Field(default=30.0, description="JSON-RPC request timeout (seconds)")

    # ======================
    # Environment
    # ======================
    debug: bool = Field(default=False, description="Enable debug logging")

    @field_validator("contract_address")
    @classmethod
    def validate_contract_address(cls, v: str) -> str:
        """Validate Ethereum address format."""
        if not v.startswith("0x") or len(v) != 42:
            raise ValueError("Invalid contract address format")
        int(v[2:], 16)
        return v

    @field_validator("chain_id")
    @classmethod
    def validate_chain_id(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Chain ID must be non-negative")
        return v

    @property
    def chain_id_hex(self) -> str:
        """Chain ID in the hex form wallets expect (e.g. 0x5b7f)."""
        return hex(self.chain_id)

    def chain_descriptor(self) -> ChainDescriptor:
        """Build the add/switch chain descriptor for the target network."""
        return ChainDescriptor(
            chain_id=self.chain_id_hex,
            chain_name=self.chain_name,
            native_currency=NativeCurrency(
                name=self.native_currency_name,
                symbol=self.native_currency_symbol,
                decimals=self.native_currency_decimals,
            ),
            rpc_urls=[self.rpc_url],
            block_explorer_urls=[self.block_explorer_url],
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
