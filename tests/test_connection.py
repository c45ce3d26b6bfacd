"""Tests for the connection controller."""

import asyncio

import pytest

from bytechu.contracts.wallet import ErrorKind, OperationSource
from bytechu.providers.dryrun import DryRunWalletProvider
from bytechu.providers.gateway import ProviderGateway
from bytechu.services.connection import ConnectionController, normalize_address, short_address
from bytechu.services.error_channel import ErrorChannel

from conftest import ACCOUNT, OTHER_ACCOUNT, wait_for_pending


def _controller(provider=None):
    errors = ErrorChannel()
    return ConnectionController(ProviderGateway(provider), errors), errors


class TestConnect:
    """Tests for the connect handshake."""

    @pytest.mark.asyncio
    async def test_connect_sets_lowercase_account(self, provider):
        controller, errors = _controller(provider)

        response = await controller.connect()

        assert response.success
        assert response.account == ACCOUNT.lower()
        assert controller.account == ACCOUNT.lower()
        assert errors.error is None

    @pytest.mark.asyncio
    async def test_connect_without_provider(self):
        controller, errors = _controller(None)

        response = await controller.connect()

        assert not response.success
        assert response.error.kind == ErrorKind.PROVIDER_UNAVAILABLE
        assert "MetaMask is not installed" in errors.error.message
        assert not controller.connecting

    @pytest.mark.asyncio
    async def test_connect_with_no_accounts(self):
        controller, errors = _controller(DryRunWalletProvider(accounts=[]))

        response = await controller.connect()

        assert not response.success
        assert errors.error.kind == ErrorKind.NO_ACCOUNTS_RETURNED
        assert controller.account is None

    @pytest.mark.asyncio
    async def test_rejection_leaves_account_unchanged(self, provider):
        controller, errors = _controller(provider)
        await controller.connect()
        provider.fail("eth_requestAccounts", "User rejected the request.")

        response = await controller.connect()

        assert not response.success
        assert controller.account == ACCOUNT.lower()
        assert errors.error.source == OperationSource.CONNECT
        assert errors.error.kind == ErrorKind.CONNECT_REJECTED
        assert errors.error.message == "User rejected the request."

    @pytest.mark.asyncio
    async def test_success_after_failure_clears_error(self, provider):
        controller, errors = _controller(provider)
        provider.fail("eth_requestAccounts")
        await controller.connect()
        assert errors.error is not None

        provider.succeed("eth_requestAccounts")
        response = await controller.connect()

        assert response.success
        assert errors.error is None

    @pytest.mark.asyncio
    async def test_connecting_flag_only_while_pending(self, provider):
        controller, _ = _controller(provider)
        provider.hold("eth_requestAccounts")
        assert not controller.connecting

        task = asyncio.create_task(controller.connect())
        await wait_for_pending(provider, "eth_requestAccounts")
        assert controller.connecting

        provider.release_next("eth_requestAccounts")
        await task
        assert not controller.connecting

    @pytest.mark.asyncio
    async def test_connecting_stays_set_while_overlapping_connect_pending(self, provider):
        controller, _ = _controller(provider)
        provider.hold("eth_requestAccounts")

        first = asyncio.create_task(controller.connect())
        second = asyncio.create_task(controller.connect())
        await wait_for_pending(provider, "eth_requestAccounts", 2)

        provider.release_next("eth_requestAccounts")
        assert (await first).success
        assert controller.connecting

        provider.release_next("eth_requestAccounts")
        assert (await second).success
        assert not controller.connecting


class TestAccountChanges:
    """Tests for accountsChanged handling."""

    @pytest.mark.asyncio
    async def test_account_tracks_latest_notification(self, provider):
        controller, _ = _controller(provider)
        controller.observe_account_changes()

        sequence = [
            [ACCOUNT],
            [OTHER_ACCOUNT, ACCOUNT],
            [],
            [ACCOUNT, OTHER_ACCOUNT],
        ]
        for accounts in sequence:
            provider.emit_accounts_changed(accounts)
            expected = accounts[0].lower() if accounts else None
            assert controller.account == expected

    @pytest.mark.asyncio
    async def test_listeners_see_every_change(self, provider):
        controller, _ = _controller(provider)
        seen = []
        controller.add_listener(seen.append)
        controller.observe_account_changes()

        provider.emit_accounts_changed([ACCOUNT])
        provider.emit_accounts_changed([ACCOUNT])  # no change
        provider.emit_accounts_changed([])

        assert seen == [ACCOUNT.lower(), None]

    def test_subscribe_once_and_release(self, provider):
        controller, _ = _controller(provider)

        controller.observe_account_changes()
        controller.observe_account_changes()
        assert provider.listener_count("accountsChanged") == 1

        controller.close()
        assert provider.listener_count("accountsChanged") == 0

        provider.emit_accounts_changed([ACCOUNT])
        assert controller.account is None


class TestBootstrap:
    """Tests for the silent startup check."""

    @pytest.mark.asyncio
    async def test_no_authorized_accounts(self, provider):
        controller, errors = _controller(provider)

        await controller.bootstrap_existing_connection()

        assert controller.account is None
        assert errors.error is None
        assert "eth_requestAccounts" not in provider.requests

    @pytest.mark.asyncio
    async def test_seeds_authorized_account(self):
        provider = DryRunWalletProvider(accounts=[ACCOUNT], authorized=True)
        controller, _ = _controller(provider)

        await controller.bootstrap_existing_connection()

        assert controller.account == ACCOUNT.lower()

    @pytest.mark.asyncio
    async def test_failures_are_swallowed(self, provider):
        controller, errors = _controller(provider)
        provider.fail("eth_accounts", "wallet locked", code=4100)

        await controller.bootstrap_existing_connection()

        assert controller.account is None
        assert errors.error is None

    @pytest.mark.asyncio
    async def test_missing_provider_is_swallowed(self):
        controller, errors = _controller(None)

        await controller.bootstrap_existing_connection()

        assert errors.error is None


def test_address_helpers():
    assert normalize_address("") is None
    assert normalize_address(ACCOUNT) == ACCOUNT.lower()
    assert short_address(ACCOUNT) == "0xABC0...0123"
    assert short_address(None) == "(none)"
