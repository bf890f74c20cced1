"""
Local account connector for w3wallet.

A connector backed by a private key held in-process. It gives headless
applications, scripts and tests a real wallet that signs with ``eth_account``
instead of prompting a user in a browser extension or mobile app.

Classes:
    Account: Wrapper around eth_account's LocalAccount for message and transaction signing
    AccountConnector: Connector exposing an Account to the ConnectorRegistry
    AccountSession: Session transport returned by AccountConnector

Example:
    >>> account = Account.from_key("0x1234...")
    >>> w3 = AsyncWeb3(AsyncHTTPProvider("https://rpc.sepolia.org"))
    >>> registry = ConnectorRegistry([AccountConnector(account, 11155111, lambda chain_id: w3)])
    >>> session = await orchestrator.connect(registry.resolve("localAccount"))
    >>> outcome = await gateway.sign_message("Hello from my app!")
"""

# pylint: disable=no-name-in-module
import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from eth_account import Account as Web3Account
from eth_account.messages import encode_defunct, encode_typed_data, SignableMessage
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from web3 import AsyncWeb3

from .exceptions import ProviderFault, ProviderRejection
from .types import ChainId, SignablePayload
from .utils import fill_gas, fill_gas_price, fill_nonce, to_checksum_address, to_hex

__all__ = ["Account", "AccountConnector", "AccountSession"]

logger = logging.getLogger(__name__)

EIP712_KEYS = ('types', 'primaryType', 'domain', 'message')

Web3Factory = Callable[[ChainId], AsyncWeb3]


def encode_payload(data: SignablePayload) -> SignableMessage:
    """
    Encode data for signing.

    Supports multiple data formats:
    - EIP-712 typed data (as dict or JSON string)
    - Raw bytes
    - Hex strings (with 0x prefix)
    - Plain text strings
    """
    if isinstance(data, Mapping):
        return encode_typed_data(full_message=dict(data))
    if isinstance(data, bytes):
        return encode_defunct(primitive=data)
    if data.startswith('0x'):
        return encode_defunct(hexstr=data)
    try:
        decoded = json.loads(data)
    except json.JSONDecodeError:
        decoded = None
    if isinstance(decoded, dict) and all(key in decoded for key in EIP712_KEYS):
        return encode_typed_data(full_message=decoded)
    # by default encode it as a simple text
    return encode_defunct(text=data)


class Account:
    """
    Wrapper around eth_account's LocalAccount.

    Example:
        >>> account = Account.from_key("0x1234567890abcdef...")
        >>> signature = account.sign("Hello, world!")
    """
    # Checksum address of the account
    address: ChecksumAddress

    def __init__(self, local_account: LocalAccount) -> None:
        self._acc = local_account
        self.address = local_account.address

    @classmethod
    def from_key(cls, key: str) -> 'Account':
        """Create an Account from a private key hex string (with or without '0x')."""
        key = key if key.startswith('0x') else f"0x{key}"
        return cls(Web3Account.from_key(key))

    @classmethod
    def create(cls) -> 'Account':
        """Create an Account with a freshly generated key."""
        return cls(Web3Account.create())

    def sign(self, data: SignablePayload) -> str:
        """Sign data and return the 0x-prefixed signature."""
        signed = self._acc.sign_message(encode_payload(data))
        return to_hex(signed.signature)

    def sign_transaction(self, transaction: Dict[str, Any]) -> bytes:
        """Sign a complete transaction dict and return the raw transaction bytes."""
        return bytes(self._acc.sign_transaction(transaction).raw_transaction)

    def __str__(self) -> str:
        return self.address


class AccountSession:
    """
    Session transport of an :class:`AccountConnector`.

    Transactions are signed locally and submitted with ``eth_sendRawTransaction``
    through the ``AsyncWeb3`` the factory returns for the active chain.
    """

    def __init__(
        self,
        account: Account,
        chain_id: ChainId,
        web3_factory: Web3Factory,
        approve: Optional[Callable[[str, Any], bool]] = None,
    ) -> None:
        self._account = account
        self._web3_factory = web3_factory
        self._approve = approve
        self.address: str = account.address
        self.chain_id: ChainId = int(chain_id)
        self.closed = False

    def _check(self, action: str, detail: Any) -> None:
        if self.closed:
            raise ProviderFault("Session is closed")
        if self._approve is not None and not self._approve(action, detail):
            raise ProviderRejection(f"User rejected {action}")

    async def request_chain_switch(self, chain_id: ChainId) -> None:
        self._check("switch_chain", chain_id)
        self.chain_id = int(chain_id)

    async def request_signature(self, payload: SignablePayload) -> str:
        self._check("sign_message", payload)
        return self._account.sign(payload)

    async def request_transaction(self, to: str, value: int) -> str:
        self._check("send_transaction", {"to": to, "value": value})
        w3 = self._web3_factory(self.chain_id)
        transaction: Dict[str, Any] = {
            'from': self.address,
            'to': to_checksum_address(to),
            'value': int(value),
            'chainId': self.chain_id,
        }
        transaction = await fill_nonce(w3, transaction)
        transaction = await fill_gas(w3, transaction)
        transaction = await fill_gas_price(w3, transaction)
        raw = self._account.sign_transaction(transaction)
        tx_hash = await w3.eth.send_raw_transaction(raw)
        logger.debug("Submitted transaction %s on chain %s", to_hex(tx_hash), self.chain_id)
        return to_hex(tx_hash)

    async def close(self) -> None:
        self.closed = True


class AccountConnector:
    """
    Connector exposing an in-process :class:`Account`.

    Args:
        account: The signing account
        chain_id: Chain the session starts on
        web3_factory: Returns the AsyncWeb3 to submit transactions with for a chain id;
            the connector owns no RPC client of its own
        approve: Optional callback ``(action, detail) -> bool``; returning False
            makes the request fail as a user rejection
        id, name: Identity reported to the ConnectorRegistry
    """

    def __init__(
        self,
        account: Account,
        chain_id: ChainId,
        web3_factory: Web3Factory,
        approve: Optional[Callable[[str, Any], bool]] = None,
        *,
        id: str = "localAccount",
        name: str = "Local Account",
    ) -> None:
        self.id = id
        self.name = name
        self._account = account
        self._chain_id = int(chain_id)
        self._approve = approve
        self._web3_factory = web3_factory

    async def initiate_session(self) -> AccountSession:
        if self._approve is not None and not self._approve("connect", self._account.address):
            raise ProviderRejection("User rejected the connection request")
        return AccountSession(self._account, self._chain_id, self._web3_factory, self._approve)

    def __repr__(self) -> str:
        return f"AccountConnector({self.id!r}, {self._account.address})"
