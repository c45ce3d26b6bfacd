"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from bytechu.config import Settings, get_settings


class TestSettings:
    """Tests for Settings defaults, overrides and validation."""

    def test_defaults_target_sapphire_testnet(self):
        settings = Settings(_env_file=None)

        assert settings.chain_id == 23295
        assert settings.chain_id_hex == "0x5b7f"
        assert settings.provider == "dryrun"

    def test_descriptor_wire_format(self):
        descriptor = Settings(_env_file=None).chain_descriptor()

        wire = descriptor.model_dump(by_alias=True)
        assert wire["chainId"] == "0x5b7f"
        assert wire["nativeCurrency"]["symbol"] == "SROSE"
        assert wire["rpcUrls"] == ["https://testnet.sapphire.oasis.dev"]

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BYTECHU_CHAIN_ID", "42")
        monkeypatch.setenv("BYTECHU_PROVIDER", "none")
        get_settings.cache_clear()

        settings = get_settings()

        assert settings.chain_id == 42
        assert settings.chain_id_hex == "0x2a"
        assert settings.provider == "none"

    @pytest.mark.parametrize("address", ["0x1234", "6eED2f58ed21a651CCc42Af123E243FaBad920E0xx", "0x" + "zz" * 20])
    def test_invalid_contract_address(self, address):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, contract_address=address)

    def test_negative_chain_id_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, chain_id=-1)
