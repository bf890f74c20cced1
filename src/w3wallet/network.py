"""
Active-chain switching.

Example:
    >>> switcher = NetworkSwitcher(orchestrator, catalog)
    >>> outcome = await switcher.switch_to(84532)
    >>> if not outcome.ok:
    ...     print(outcome.message)
"""
import logging
from typing import Optional, TYPE_CHECKING

from .exceptions import InvalidStateTransition, UnknownNetwork, classify_provider_error
from .outcome import Failure, Outcome, Success
from .session import ConnectionOrchestrator, ConnectionStatus
from .types import ChainId
if TYPE_CHECKING:
    from .chain import NetworkCatalog

__all__ = ["NetworkSwitcher"]

logger = logging.getLogger(__name__)


class NetworkSwitcher:
    """
    Requests chain changes on the orchestrator's active session.

    A switch moves the session to SwitchingNetwork and always back to
    Connected: on success with the new chain id, on failure with the previous
    one. The outcome of the last switch that reached the provider (or was
    refused by the catalog) is kept as ``last_outcome``.
    """

    def __init__(
        self,
        orchestrator: ConnectionOrchestrator,
        catalog: Optional["NetworkCatalog"] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._catalog = catalog
        self.last_outcome: Optional[Outcome] = None

    @property
    def error(self):
        """Failure reason of the last switch, None if it succeeded."""
        outcome = self.last_outcome
        return outcome.reason if isinstance(outcome, Failure) else None

    @property
    def is_switching(self) -> bool:
        return self._orchestrator.status is ConnectionStatus.SWITCHING_NETWORK

    async def switch_to(self, chain_id: ChainId) -> Outcome:
        """
        Switch the active session to ``chain_id``.

        Requesting the chain that is already active returns ``Success`` without
        calling the provider.

        Raises:
            InvalidStateTransition: when the status is not Connected
        """
        session = self._orchestrator.session
        if session.status is not ConnectionStatus.CONNECTED:
            logger.warning("Rejected switch to %s while %s", chain_id, session.status)
            raise InvalidStateTransition("switch network", session.status)

        chain_id = int(chain_id)
        if session.chain_id == chain_id:
            return Success(chain_id)

        if self._catalog is not None and self._catalog.get(chain_id) is None:
            self.last_outcome = Failure(UnknownNetwork(chain_id))
            logger.warning("Refused switch to unsupported chain %s", chain_id)
            return self.last_outcome

        previous = session.chain_id
        self._orchestrator._set_status(ConnectionStatus.SWITCHING_NETWORK)
        try:
            await session.transport.request_chain_switch(chain_id)
        except Exception as e:  # pylint: disable=broad-except
            error = classify_provider_error(e)
            logger.warning("Switch from %s to %s failed: %s", previous, chain_id, error)
            self.last_outcome = Failure(error)
        else:
            self._orchestrator._set_chain_id(chain_id)
            self.last_outcome = Success(chain_id)
            logger.info("Switched from chain %s to %s", previous, chain_id)
        finally:
            self._orchestrator._set_status(ConnectionStatus.CONNECTED)
        return self.last_outcome
