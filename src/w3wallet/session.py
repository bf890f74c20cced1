"""
Connection state machine for w3wallet.

:class:`ConnectionOrchestrator` owns the single active :class:`ConnectionSession`
and drives it through its states::

    Disconnected -> Connecting -> Connected -> Disconnected
                         |            |
                         v            v
                       Error    SwitchingNetwork -> Connected

Error is terminal for one attempt: the failure is kept on the session for the
UI, and a fresh ``connect`` is always allowed from it. There is no automatic
retry.

Every transition is delivered to subscribed listeners, in the order the
triggering calls complete.

Example:
    >>> orchestrator = ConnectionOrchestrator()
    >>> orchestrator.subscribe(lambda session: print(session.status))
    >>> session = await orchestrator.connect(registry.resolve("metaMask"))
    >>> session.address
    '0x78Bdc100555672a193359bd3e9CD68F23015A051'
"""
import logging
from enum import Enum
from typing import Callable, List, Optional, TYPE_CHECKING

from .exceptions import InvalidStateTransition, WalletException, classify_provider_error
from .types import ChainId, Connector, SessionTransport
if TYPE_CHECKING:
    from .chain import Network, NetworkCatalog

__all__ = ["ConnectionStatus", "ConnectionSession", "ConnectionOrchestrator"]

logger = logging.getLogger(__name__)

SessionListener = Callable[["ConnectionSession"], None]


class ConnectionStatus(str, Enum):
    DISCONNECTED = "Disconnected"
    CONNECTING = "Connecting"
    CONNECTED = "Connected"
    SWITCHING_NETWORK = "SwitchingNetwork"
    ERROR = "Error"

    def __str__(self) -> str:
        return self.value


class ConnectionSession:
    """
    State of the connection the UI renders.

    Attributes:
        status: Current ConnectionStatus
        address: Connected account, None unless Connected or SwitchingNetwork
        chain_id: Active chain id, None unless Connected or SwitchingNetwork
        connector_id: Id of the connector that produced the session
        error: Failure reason of the last connect attempt (status Error only)
    """

    def __init__(
        self,
        status: ConnectionStatus = ConnectionStatus.DISCONNECTED,
        address: Optional[str] = None,
        chain_id: Optional[ChainId] = None,
        connector_id: Optional[str] = None,
        error: Optional[WalletException] = None,
        transport: Optional[SessionTransport] = None,
    ) -> None:
        self.status = status
        self.address = address
        self.chain_id = chain_id
        self.connector_id = connector_id
        self.error = error
        self._transport = transport
        self._catalog: Optional["NetworkCatalog"] = None

    @property
    def transport(self) -> SessionTransport:
        if self._transport is None:
            raise InvalidStateTransition("using the session transport", self.status)
        return self._transport

    @property
    def is_connected(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED

    @property
    def network(self) -> Optional["Network"]:
        """Catalog entry for the active chain; None when unknown or disconnected."""
        if self.chain_id is None or self._catalog is None:
            return None
        return self._catalog.get(self.chain_id)

    def __repr__(self) -> str:
        return (f"ConnectionSession(status={self.status}, address={self.address!r}, "
                f"chain_id={self.chain_id!r}, connector_id={self.connector_id!r})")


class ConnectionOrchestrator:
    """
    Owns the active session and drives connect/disconnect.

    Only one ``connect`` may be in flight: a second call while Connecting is
    rejected with :class:`InvalidStateTransition`, not queued. Provider
    failures never escape ``connect``; they end in status Error with the
    classified exception stored as ``session.error``.
    """

    def __init__(self, catalog: Optional["NetworkCatalog"] = None) -> None:
        self._catalog = catalog
        self._listeners: List[SessionListener] = []
        self._session = self._new_session()

    def _new_session(self, **kwargs) -> ConnectionSession:
        session = ConnectionSession(**kwargs)
        session._catalog = self._catalog
        return session

    @property
    def session(self) -> ConnectionSession:
        return self._session

    @property
    def status(self) -> ConnectionStatus:
        return self._session.status

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener called after every transition; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self._session)

    def _replace(self, session: ConnectionSession) -> None:
        logger.debug("Session %s -> %s", self._session.status, session.status)
        self._session = session
        self._publish()

    def _set_status(self, status: ConnectionStatus) -> None:
        # in-place transition of the current session (network switching)
        logger.debug("Session %s -> %s", self._session.status, status)
        self._session.status = status
        self._publish()

    def _set_chain_id(self, chain_id: ChainId) -> None:
        self._session.chain_id = chain_id

    async def connect(self, connector: Connector) -> ConnectionSession:
        """
        Initiate a session through ``connector``.

        Requires status Disconnected or Error. On success the session holds
        the account address and chain id and status is Connected; on failure
        status is Error and no partial session state is kept.

        Raises:
            InvalidStateTransition: when a connect is in flight, a session is
                already active, or a network switch is pending
        """
        current = self._session.status
        if current not in (ConnectionStatus.DISCONNECTED, ConnectionStatus.ERROR):
            logger.warning("Rejected connect to %s while %s", connector.id, current)
            raise InvalidStateTransition("connect", current)

        self._replace(self._new_session(status=ConnectionStatus.CONNECTING, connector_id=connector.id))
        try:
            transport = await connector.initiate_session()
            address, chain_id = transport.address, int(transport.chain_id)
        except Exception as e:  # pylint: disable=broad-except
            error = classify_provider_error(e)
            logger.warning("Connect via %s failed: %s", connector.id, error)
            self._replace(self._new_session(
                status=ConnectionStatus.ERROR,
                connector_id=connector.id,
                error=error,
            ))
            return self._session

        self._replace(self._new_session(
            status=ConnectionStatus.CONNECTED,
            address=address,
            chain_id=chain_id,
            connector_id=connector.id,
            transport=transport,
        ))
        logger.info("Connected %s on chain %s via %s", address, chain_id, connector.id)
        return self._session

    async def disconnect(self) -> None:
        """
        Tear down the active session. A no-op unless status is Connected.

        A transport ``close()`` coroutine is awaited when the transport has one;
        its failure is logged and does not keep the session alive.
        """
        session = self._session
        if session.status is not ConnectionStatus.CONNECTED:
            logger.debug("Disconnect ignored while %s", session.status)
            return
        self._replace(self._new_session())
        close = getattr(session._transport, "close", None)
        if close is not None:
            try:
                await close()
            except Exception:  # pylint: disable=broad-except
                logger.exception("Closing session of %s failed", session.connector_id)
        logger.info("Disconnected %s", session.address)
