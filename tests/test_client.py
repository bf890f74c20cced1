import pytest

from w3wallet import (
    ConnectionStatus,
    JsonFileStore,
    MemoryStore,
    WalletClient,
    WalletSettings,
)
from w3wallet.recovery import HANDOFF_KEY

from .conftest import ADDRESS, FakeConnector, FakeModal, FakeNavigator, RejectedByUser

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"
DAPP_URL = "https://example.org/app"


def make_client(connectors, navigator=None, store=None, **settings):
    settings.setdefault("dapp_url", DAPP_URL)
    modal = FakeModal()
    client = WalletClient.from_settings(
        WalletSettings(_env_file=None, **settings),
        connectors,
        navigator=navigator or FakeNavigator(),
        modal=modal,
        store=store if store is not None else MemoryStore(),
    )
    return client, modal


@pytest.mark.asyncio
async def test_connect_metamask_by_name():
    metamask = FakeConnector("metaMaskSDK", "MetaMask SDK")
    client, modal = make_client([metamask])
    seen = []
    client.orchestrator.subscribe(lambda session: seen.append(session.status))

    session = await client.connect("metaMask")

    assert seen == [ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED]
    assert session.address == ADDRESS
    assert modal.opened == 0


@pytest.mark.asyncio
async def test_unresolved_wallet_opens_modal():
    metamask = FakeConnector("metaMaskSDK", "MetaMask SDK")
    client, modal = make_client([metamask])

    assert await client.connect("trust") is None

    assert modal.opened == 1
    assert metamask.initiated == 0
    assert client.session.status is ConnectionStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_mobile_handoff_and_recovery(tmp_path):
    path = tmp_path / "state.json"
    navigator = FakeNavigator(IPHONE)
    client, modal = make_client([], navigator=navigator, store=JsonFileStore(path))

    assert await client.connect("metaMask") is None
    assert navigator.urls == ["https://metamask.app.link/dapp/example.org/app"]
    assert modal.opened == 0
    assert JsonFileStore(path).get(HANDOFF_KEY) is not None

    # the page reloads inside the wallet's browser, where the injected connector exists
    injected = FakeConnector("io.metamask", "MetaMask")
    reloaded, _ = make_client([injected], navigator=FakeNavigator(IPHONE), store=JsonFileStore(path))
    session = await reloaded.restore()

    assert session.status is ConnectionStatus.CONNECTED
    assert injected.initiated == 1
    assert JsonFileStore(path).get(HANDOFF_KEY) is None
    assert await reloaded.restore() is None


@pytest.mark.asyncio
async def test_mobile_wallet_without_deep_link_opens_modal():
    navigator = FakeNavigator(IPHONE)
    client, modal = make_client([], navigator=navigator)

    await client.connect("walletConnect")

    assert navigator.urls == []
    assert modal.opened == 1


@pytest.mark.asyncio
async def test_connect_replaces_active_session():
    metamask = FakeConnector("metaMaskSDK", "MetaMask SDK")
    coinbase = FakeConnector("coinbaseWalletSDK", "Coinbase Wallet")
    client, _ = make_client([metamask, coinbase])
    await client.connect("metaMask")

    session = await client.connect("coinbaseWallet")

    assert session.connector_id == "coinbaseWalletSDK"
    assert metamask.transport.closed


@pytest.mark.asyncio
async def test_full_session_flow():
    metamask = FakeConnector("metaMaskSDK", "MetaMask SDK")
    client, _ = make_client([metamask])
    await client.connect("metaMask")

    switched = await client.switch_network(84532)
    signed = await client.sign_message("Hello from my app!")
    sent = await client.send_transaction(ADDRESS, 10 ** 15)

    assert switched.ok and signed.ok and sent.ok
    assert client.session.network.name == "Base Sepolia"
    assert await client.get_tx_scan() == f"https://sepolia.basescan.org/tx/{sent.result}"

    await client.disconnect()
    assert client.gateway.signature is None
    assert client.gateway.tx_hash is None
    assert await client.get_tx_scan() is None


@pytest.mark.asyncio
async def test_failed_switch_to_base_keeps_sepolia():
    metamask = FakeConnector("metaMaskSDK", "MetaMask SDK")
    metamask.transport.switch_error = RejectedByUser("User rejected the request.")
    client, _ = make_client([metamask], chains=[11155111, 84532, 8453])
    await client.connect("metaMask")

    outcome = await client.switch_network(8453)

    assert not outcome.ok
    assert client.session.status is ConnectionStatus.CONNECTED
    assert client.session.chain_id == 11155111
    assert client.switcher.error is outcome.reason


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("W3WALLET_CHAINS", "[8453]")
    monkeypatch.setenv("W3WALLET_LOG_LEVEL", "debug")
    settings = WalletSettings(_env_file=None)
    assert settings.chains == [8453]
    assert settings.log_level == "DEBUG"
    assert settings.handoff_key == HANDOFF_KEY


def test_settings_require_a_chain():
    with pytest.raises(ValueError):
        WalletSettings(_env_file=None, chains=[])


@pytest.mark.asyncio
async def test_unresolved_wallet_keeps_active_session():
    metamask = FakeConnector("metaMaskSDK", "MetaMask SDK")
    client, modal = make_client([metamask])
    await client.connect("metaMask")

    assert await client.connect("trust") is None

    assert modal.opened == 1
    assert client.session.status is ConnectionStatus.CONNECTED
    assert client.session.connector_id == "metaMaskSDK"
    assert not metamask.transport.closed


@pytest.mark.asyncio
async def test_handoff_replaces_active_session():
    metamask = FakeConnector("metaMaskSDK", "MetaMask SDK")
    navigator = FakeNavigator(IPHONE)
    client, _ = make_client([metamask], navigator=navigator)
    await client.connect("metaMask")

    assert await client.connect("trust") is None

    assert client.session.status is ConnectionStatus.DISCONNECTED
    assert navigator.urls[0].startswith("https://link.trustwallet.com/open_url?coin_id=60&url=")
    assert client.recovery.peek().wallet_id == "trust"
