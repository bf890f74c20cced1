"""
Type definitions for the collaborators w3wallet talks to.

The core never owns a wallet provider, an RPC transport, a page or a modal.
It only sequences calls to objects satisfying the protocols below, so any
provider library can be plugged in by adapting it to these shapes.

Example:
    >>> from w3wallet.types import Connector
    >>> def describe(connector: Connector) -> str:
    ...     return f"{connector.name} ({connector.id})"
"""
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from web3.types import TxParams  # noqa: F401

__all__ = [
    "ChainId",
    "SignablePayload",
    "SessionTransport",
    "Connector",
    "ConnectModal",
    "Navigator",
    "TxParams",
]

ChainId = int
SignablePayload = Union[str, bytes, Mapping[str, Any]]


@runtime_checkable
class SessionTransport(Protocol):
    """
    Live binding to one wallet account, returned by ``Connector.initiate_session``.

    Failures are signalled by raising; a user rejection should carry the
    EIP-1193 code 4001 or be a ``ProviderRejection``. An optional
    ``async close()`` is awaited on disconnect.
    """
    address: str
    chain_id: ChainId

    async def request_chain_switch(self, chain_id: ChainId) -> None: ...

    async def request_signature(self, payload: SignablePayload) -> str: ...

    async def request_transaction(self, to: str, value: int) -> str: ...


@runtime_checkable
class Connector(Protocol):
    """Adapter exposing one wallet provider's session-initiation capability."""
    id: str
    name: str

    async def initiate_session(self) -> SessionTransport: ...


class ConnectModal(Protocol):
    """Generic wallet-selection UI opened when a wallet id cannot be resolved."""

    def open(self) -> None: ...


class Navigator(Protocol):
    """The page environment: its user agent and full-page navigation."""
    user_agent: Optional[str]

    def navigate(self, url: str) -> None: ...
