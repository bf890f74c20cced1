import pytest
from eth_account import Account as Web3Account
from eth_account.messages import encode_defunct, encode_typed_data

from w3wallet import (
    Account,
    AccountConnector,
    ConnectionOrchestrator,
    ConnectionStatus,
    ConnectorRegistry,
    ProviderRejection,
    SigningGateway,
)

KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
RECIPIENT = "0x78Bdc100555672a193359bd3e9CD68F23015A051"

TYPED_DATA = {
    "types": {
        "EIP712Domain": [
            {"name": "name", "type": "string"},
            {"name": "chainId", "type": "uint256"},
        ],
        "Mail": [{"name": "contents", "type": "string"}],
    },
    "primaryType": "Mail",
    "domain": {"name": "Example", "chainId": 11155111},
    "message": {"contents": "Hello"},
}


class FakeEth:
    def __init__(self, base_fee: int = 0) -> None:
        self.base_fee = base_fee
        self.sent = []

    async def fee_history(self, count, block):
        return {"baseFeePerGas": [self.base_fee]}

    async def get_transaction_count(self, address, block):
        return 7

    async def estimate_gas(self, transaction):
        return 21000

    @property
    async def gas_price(self):
        return 2 * 10 ** 9

    @property
    async def max_priority_fee(self):
        return 10 ** 9

    async def get_block(self, block):
        return {"baseFeePerGas": self.base_fee}

    async def send_raw_transaction(self, raw):
        self.sent.append(raw)
        return bytes.fromhex("cd" * 32)


class FakeWeb3:
    def __init__(self, eth: FakeEth) -> None:
        self.eth = eth


@pytest.fixture
def account():
    return Account.from_key(KEY)


def test_sign_text(account):
    signature = account.sign("Hello from my app!")
    recovered = Web3Account.recover_message(encode_defunct(text="Hello from my app!"), signature=signature)
    assert signature.startswith("0x")
    assert recovered == account.address


def test_sign_typed_data_as_json(account):
    import json

    signature = account.sign(json.dumps(TYPED_DATA))
    recovered = Web3Account.recover_message(encode_typed_data(full_message=TYPED_DATA), signature=signature)
    assert recovered == account.address
    assert account.sign(TYPED_DATA) == signature


def test_key_without_prefix(account):
    assert Account.from_key(KEY[2:]).address == account.address


@pytest.mark.asyncio
async def test_connect_and_sign_through_gateway(account):
    connector = AccountConnector(account, 11155111, lambda chain_id: None)
    orchestrator = ConnectionOrchestrator()
    gateway = SigningGateway(orchestrator)

    session = await orchestrator.connect(ConnectorRegistry([connector]).require("localAccount"))
    outcome = await gateway.sign_message("Hello from my app!")

    assert session.address == account.address
    assert session.chain_id == 11155111
    assert outcome.ok
    recovered = Web3Account.recover_message(encode_defunct(text="Hello from my app!"), signature=outcome.result)
    assert recovered == account.address


@pytest.mark.asyncio
async def test_declined_connection(account):
    connector = AccountConnector(account, 11155111, lambda chain_id: None, approve=lambda action, detail: False)
    session = await ConnectionOrchestrator().connect(connector)
    assert session.status is ConnectionStatus.ERROR
    assert isinstance(session.error, ProviderRejection)


@pytest.mark.asyncio
async def test_declined_signature(account):
    connector = AccountConnector(account, 11155111, lambda chain_id: None, approve=lambda action, detail: action != "sign_message")
    orchestrator = ConnectionOrchestrator()
    gateway = SigningGateway(orchestrator)
    await orchestrator.connect(connector)

    outcome = await gateway.sign_message("hi")

    assert isinstance(outcome.reason, ProviderRejection)


@pytest.mark.asyncio
async def test_legacy_transaction_is_signed_and_submitted(account):
    eth = FakeEth(base_fee=0)
    chains = []

    def web3_factory(chain_id):
        chains.append(chain_id)
        return FakeWeb3(eth)

    session = await AccountConnector(account, 84532, web3_factory).initiate_session()
    tx_hash = await session.request_transaction(RECIPIENT, 10 ** 15)

    assert tx_hash == "0x" + "cd" * 32
    assert chains == [84532]
    decoded = Web3Account.recover_transaction(eth.sent[0])
    assert decoded == account.address


@pytest.mark.asyncio
async def test_eip1559_transaction_after_switch(account):
    eth = FakeEth(base_fee=10 ** 9)
    chains = []

    def web3_factory(chain_id):
        chains.append(chain_id)
        return FakeWeb3(eth)

    session = await AccountConnector(account, 11155111, web3_factory).initiate_session()
    await session.request_chain_switch(84532)
    await session.request_transaction(RECIPIENT, 1)

    assert chains == [84532]
    # EIP-1559 raw transactions start with the type byte 0x02
    assert eth.sent[0][0] == 2
    assert Web3Account.recover_transaction(eth.sent[0]) == account.address


@pytest.mark.asyncio
async def test_closed_session_refuses_requests(account):
    session = await AccountConnector(account, 1, lambda chain_id: None).initiate_session()
    await session.close()
    with pytest.raises(Exception, match="closed"):
        await session.request_signature("hi")
