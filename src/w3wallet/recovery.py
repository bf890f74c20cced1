"""
Recovery of connection attempts interrupted by a mobile deep-link handoff.

Before the page navigates to a native wallet app, :meth:`PendingConnectionRecovery.record`
persists which wallet the user picked. On the next page load
:meth:`PendingConnectionRecovery.consume_and_recover` reads that record,
deletes it, and resumes the connection.

The record is consumed at most once: it is deleted before any connect attempt,
so a failing recovery is never replayed by a later reload. A record found while
a session is already Connected is deleted without being acted on.
"""
import json
import logging
import time
from typing import Callable, NamedTuple, Optional, TYPE_CHECKING

from .exceptions import WalletException
from .session import ConnectionSession, ConnectionStatus
from .storage import KeyValueStore

if TYPE_CHECKING:
    from .session import ConnectionOrchestrator
    from .wallets import ConnectorRegistry

__all__ = ["PendingHandoff", "PendingConnectionRecovery", "HANDOFF_KEY"]

logger = logging.getLogger(__name__)

HANDOFF_KEY = "w3wallet.pendingHandoff"


class PendingHandoff(NamedTuple):
    wallet_id: str
    created_at: float

    def dumps(self) -> str:
        return json.dumps({"walletId": self.wallet_id, "createdAt": self.created_at})

    @classmethod
    def loads(cls, raw: str) -> "PendingHandoff":
        data = json.loads(raw)
        wallet_id = data["walletId"]
        if not isinstance(wallet_id, str) or not wallet_id:
            raise ValueError(f"Invalid walletId {wallet_id!r}")
        return cls(wallet_id, float(data["createdAt"]))


class PendingConnectionRecovery:
    """
    Persists and resumes one pending handoff.

    Args:
        store: Key-value store surviving a page reload
        key: Fixed key the record lives under
        max_age: Records older than this many seconds are discarded unread (None disables)
        clock: Returns the current time in seconds since the epoch
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = HANDOFF_KEY,
        max_age: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._key = key
        self._max_age = max_age
        self._clock = clock

    def record(self, wallet_id: str) -> PendingHandoff:
        handoff = PendingHandoff(wallet_id, self._clock())
        self._store.set(self._key, handoff.dumps())
        logger.debug("Recorded pending handoff to %s", wallet_id)
        return handoff

    def peek(self) -> Optional[PendingHandoff]:
        """The persisted record without consuming it; malformed records read as None."""
        try:
            raw = self._store.get(self._key)
        except WalletException as e:
            logger.warning("Pending handoff store unreadable: %s", e)
            return None
        return self._parse(raw)

    def _parse(self, raw: Optional[str]) -> Optional[PendingHandoff]:
        if raw is None:
            return None
        try:
            return PendingHandoff.loads(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring malformed pending handoff %r: %s", raw, e)
            return None

    def _discard(self) -> None:
        try:
            self._store.delete(self._key)
        except WalletException as e:
            logger.warning("Could not delete pending handoff: %s", e)

    def _take(self) -> Optional[PendingHandoff]:
        try:
            raw = self._store.get(self._key)
        except WalletException as e:
            logger.warning("Pending handoff store unreadable, discarding: %s", e)
            self._discard()
            return None
        if raw is None:
            return None
        handoff = self._parse(raw)
        self._discard()
        return handoff

    async def consume_and_recover(
        self,
        registry: "ConnectorRegistry",
        orchestrator: "ConnectionOrchestrator",
        current_status: Optional[ConnectionStatus] = None,
    ) -> Optional[ConnectionSession]:
        """
        Resume the pending handoff, if any. Runs once per page load.

        Returns the session produced by the resumed connect, or None when
        nothing was resumed. Unresolvable wallets and stale records complete
        silently without touching the session.
        """
        if current_status is None:
            current_status = orchestrator.status
        handoff = self._take()
        if handoff is None:
            return None

        if current_status not in (ConnectionStatus.DISCONNECTED, ConnectionStatus.ERROR):
            logger.debug("Discarded handoff to %s while %s", handoff.wallet_id, current_status)
            return None

        age = self._clock() - handoff.created_at
        if self._max_age is not None and age > self._max_age:
            logger.info("Discarded handoff to %s, %.0fs old", handoff.wallet_id, age)
            return None

        connector = registry.resolve(handoff.wallet_id)
        if connector is None:
            logger.info("Abandoned handoff to %s, no matching connector", handoff.wallet_id)
            return None

        logger.info("Resuming connection to %s after handoff", handoff.wallet_id)
        return await orchestrator.connect(connector)
