"""Tests for the provider gateway, JSON-RPC provider, greeter binding and factory."""

import json

import httpx
import pytest

from bytechu.config import Settings
from bytechu.errors import ProviderUnavailable
from bytechu.providers.base import UNSUPPORTED_METHOD, ProviderRpcError
from bytechu.providers.dryrun import GREETING_SELECTOR, DryRunWalletProvider
from bytechu.providers.factory import get_provider, reset_provider
from bytechu.providers.gateway import ProviderGateway
from bytechu.providers.rpc import JsonRpcProvider
from bytechu.services.greeter import GreeterContract

from conftest import CONTRACT_ADDRESS, encode_string

RPC_URL = "https://rpc.test"


def _rpc_transport(results: dict, calls: list):
    """MockTransport answering JSON-RPC methods from ``results``."""

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        calls.append(payload)
        result = results[payload["method"]]
        if isinstance(result, dict) and "error" in result:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], **result})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    return httpx.MockTransport(handler)


class TestProviderGateway:
    """Tests for the gateway adapter."""

    @pytest.mark.asyncio
    async def test_requests_without_provider_raise(self):
        gateway = ProviderGateway(None)

        assert not gateway.available
        with pytest.raises(ProviderUnavailable):
            await gateway.request_accounts()
        with pytest.raises(ProviderUnavailable):
            await gateway.request_current_chain_id()

    def test_subscribe_without_provider_is_noop(self):
        unsubscribe = ProviderGateway(None).subscribe("chainChanged", lambda _: None)
        unsubscribe()

    def test_unsubscribe_is_idempotent(self):
        provider = DryRunWalletProvider()
        gateway = ProviderGateway(provider)
        received = []

        unsubscribe = gateway.subscribe("chainChanged", received.append)
        provider.emit_chain_changed(5)
        unsubscribe()
        unsubscribe()
        provider.emit_chain_changed(6)

        assert received == ["0x5"]
        assert provider.listener_count() == 0

    @pytest.mark.asyncio
    async def test_call_targets_latest_block(self):
        provider = DryRunWalletProvider(contracts={CONTRACT_ADDRESS: "hi"})
        gateway = ProviderGateway(provider)

        result = await gateway.call(CONTRACT_ADDRESS, GREETING_SELECTOR)

        assert result == encode_string("hi")
        assert provider.last_params["eth_call"] == [
            {"to": CONTRACT_ADDRESS, "data": GREETING_SELECTOR},
            "latest",
        ]


class TestJsonRpcProvider:
    """Tests for the read-only HTTP provider."""

    @pytest.mark.asyncio
    async def test_forwards_silent_methods(self):
        calls = []
        provider = JsonRpcProvider(
            RPC_URL, transport=_rpc_transport({"eth_chainId": "0x5b7f"}, calls)
        )

        assert await provider.request("eth_chainId") == "0x5b7f"
        assert await provider.request("eth_accounts") == []
        assert [c["method"] for c in calls] == ["eth_chainId"]

    @pytest.mark.asyncio
    async def test_rejects_prompting_methods(self):
        provider = JsonRpcProvider(RPC_URL, transport=_rpc_transport({}, []))

        with pytest.raises(ProviderRpcError) as exc_info:
            await provider.request("eth_requestAccounts")

        assert exc_info.value.code == UNSUPPORTED_METHOD

    @pytest.mark.asyncio
    async def test_rpc_error_is_raised(self):
        results = {"eth_call": {"error": {"code": 3, "message": "execution reverted"}}}
        provider = JsonRpcProvider(RPC_URL, transport=_rpc_transport(results, []))

        with pytest.raises(ProviderRpcError) as exc_info:
            await provider.request("eth_call", [{"to": CONTRACT_ADDRESS, "data": "0x"}, "latest"])

        assert exc_info.value.code == 3
        assert exc_info.value.message == "execution reverted"

    @pytest.mark.asyncio
    async def test_http_failure_becomes_rpc_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502))
        provider = JsonRpcProvider(RPC_URL, transport=transport)

        with pytest.raises(ProviderRpcError):
            await provider.request("eth_chainId")


class TestGreeterContract:
    """Tests for the contract boundary."""

    @pytest.mark.asyncio
    async def test_greeting_over_json_rpc(self):
        calls = []
        transport = _rpc_transport({"eth_call": encode_string("hello")}, calls)
        gateway = ProviderGateway(JsonRpcProvider(RPC_URL, transport=transport))
        contract = GreeterContract(gateway, CONTRACT_ADDRESS.lower())

        assert await contract.greeting() == "hello"
        tx, block = calls[0]["params"]
        assert tx["to"].lower() == CONTRACT_ADDRESS.lower()
        assert tx["data"] == GREETING_SELECTOR
        assert block == "latest"

    @pytest.mark.asyncio
    async def test_empty_result_raises(self):
        gateway = ProviderGateway(DryRunWalletProvider())
        contract = GreeterContract(gateway, CONTRACT_ADDRESS)

        with pytest.raises(ValueError):
            await contract.greeting()


class TestProviderFactory:
    """Tests for provider selection."""

    def test_default_is_dryrun(self):
        provider = get_provider(Settings(_env_file=None))

        assert isinstance(provider, DryRunWalletProvider)
        assert get_provider() is provider

    def test_rpc_provider(self):
        provider = get_provider(Settings(_env_file=None, provider="rpc"))

        assert isinstance(provider, JsonRpcProvider)
        assert provider.rpc_url == "https://testnet.sapphire.oasis.dev"

    def test_none_provider(self):
        assert get_provider(Settings(_env_file=None, provider="none")) is None
        reset_provider()
        assert get_provider(Settings(_env_file=None, provider="dryrun")) is not None
