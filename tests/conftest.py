import asyncio
from typing import Any, List, Optional

import pytest
import pytest_asyncio

from w3wallet import ConnectionOrchestrator, ConnectorRegistry, MemoryStore, NetworkCatalog
from w3wallet.chain import BASE, BASE_SEPOLIA, SEPOLIA

ADDRESS = "0x78Bdc100555672a193359bd3e9CD68F23015A051"


class RejectedByUser(Exception):
    code = 4001


class FakeTransport:
    def __init__(self, address: str = ADDRESS, chain_id: int = 11155111) -> None:
        self.address = address
        self.chain_id = chain_id
        self.switch_error: Optional[BaseException] = None
        self.sign_error: Optional[BaseException] = None
        self.tx_error: Optional[BaseException] = None
        self.calls: List[Any] = []
        self.closed = False

    async def request_chain_switch(self, chain_id: int) -> None:
        self.calls.append(("switch", chain_id))
        if self.switch_error is not None:
            raise self.switch_error
        self.chain_id = chain_id

    async def request_signature(self, payload) -> str:
        self.calls.append(("sign", payload))
        if self.sign_error is not None:
            raise self.sign_error
        return "0xsig:" + str(payload)

    async def request_transaction(self, to: str, value: int) -> str:
        self.calls.append(("tx", to, value))
        if self.tx_error is not None:
            raise self.tx_error
        return "0x" + "ab" * 32

    async def close(self) -> None:
        self.closed = True


class FakeConnector:
    def __init__(self, id: str, name: str, transport: Optional[FakeTransport] = None,
                 error: Optional[BaseException] = None, gate: Optional[asyncio.Event] = None) -> None:
        self.id = id
        self.name = name
        self.transport = transport or FakeTransport()
        self.error = error
        self.gate = gate
        self.initiated = 0

    async def initiate_session(self) -> FakeTransport:
        self.initiated += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.transport


class FakeNavigator:
    def __init__(self, user_agent: Optional[str] = None) -> None:
        self.user_agent = user_agent
        self.urls: List[str] = []

    def navigate(self, url: str) -> None:
        self.urls.append(url)


class FakeModal:
    def __init__(self) -> None:
        self.opened = 0

    def open(self) -> None:
        self.opened += 1


@pytest.fixture
def catalog():
    return NetworkCatalog([SEPOLIA, BASE_SEPOLIA, BASE])


@pytest.fixture
def orchestrator(catalog):
    return ConnectionOrchestrator(catalog)


@pytest.fixture
def metamask():
    return FakeConnector("metaMaskSDK", "MetaMask SDK")


@pytest.fixture
def registry(metamask):
    return ConnectorRegistry([
        FakeConnector("walletConnect", "WalletConnect"),
        metamask,
        FakeConnector("coinbaseWalletSDK", "Coinbase Wallet"),
    ])


@pytest.fixture
def store():
    return MemoryStore()


@pytest_asyncio.fixture
async def connected(orchestrator, metamask):
    await orchestrator.connect(metamask)
    return orchestrator
