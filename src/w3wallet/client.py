"""
Application-level wiring of the w3wallet components.

:class:`WalletClient` is built once at application start and owns one
instance of every component. It implements the UI flow::

    wallet id -> ConnectorRegistry.resolve -> ConnectionOrchestrator.connect
              -> NetworkSwitcher / SigningGateway on the active session

Example:
    >>> client = WalletClient.from_settings(
    ...     WalletSettings(dapp_url="https://example.org"),
    ...     connectors=provider_library.connectors,
    ...     navigator=page,
    ...     modal=connect_modal,
    ... )
    >>> await client.restore()               # on page load
    >>> await client.connect("metaMask")
    >>> await client.switch_network(84532)
    >>> await client.sign_message("Hello from my app!")
"""
import logging
from typing import Optional, Union

from .chain import ChainlistClient, NetworkCatalog
from .config import WalletSettings
from .device import build_deep_link, is_mobile
from .exceptions import InvalidStateTransition
from .network import NetworkSwitcher
from .outcome import Outcome
from .recovery import PendingConnectionRecovery
from .session import ConnectionOrchestrator, ConnectionSession, ConnectionStatus
from .signing import SigningGateway
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .token import CurrencyAmount
from .types import ChainId, ConnectModal, Navigator, SignablePayload
from .wallets import ConnectorRegistry, ConnectorSource

__all__ = ["WalletClient"]

logger = logging.getLogger(__name__)


class WalletClient:
    """
    Facade over registry, orchestrator, switcher, recovery and gateway.

    Args:
        registry: Resolves wallet ids to connectors
        orchestrator: Owns the active session
        switcher: Switches the active chain
        recovery: Persists and resumes mobile handoffs
        gateway: Signs messages and sends transactions
        navigator: Page environment; needed for mobile handoffs
        modal: Generic wallet picker opened when a wallet id can't be resolved
        dapp_url: URL handed to mobile wallet apps
    """

    def __init__(
        self,
        registry: ConnectorRegistry,
        orchestrator: ConnectionOrchestrator,
        switcher: NetworkSwitcher,
        recovery: PendingConnectionRecovery,
        gateway: SigningGateway,
        *,
        navigator: Optional[Navigator] = None,
        modal: Optional[ConnectModal] = None,
        catalog: Optional[NetworkCatalog] = None,
        dapp_url: str = "",
    ) -> None:
        self.registry = registry
        self.orchestrator = orchestrator
        self.switcher = switcher
        self.recovery = recovery
        self.gateway = gateway
        self.navigator = navigator
        self.modal = modal
        self.catalog = catalog
        self.dapp_url = dapp_url

    @classmethod
    def from_settings(
        cls,
        settings: WalletSettings,
        connectors: Optional[ConnectorSource] = None,
        *,
        navigator: Optional[Navigator] = None,
        modal: Optional[ConnectModal] = None,
        store: Optional[KeyValueStore] = None,
        chainlist: Optional[ChainlistClient] = None,
    ) -> "WalletClient":
        logging.getLogger("w3wallet").setLevel(settings.log_level)
        if store is None:
            store = (JsonFileStore(settings.handoff_store_path)
                     if settings.handoff_store_path else MemoryStore())
        catalog = NetworkCatalog.from_chain_ids(settings.chains, chainlist)
        orchestrator = ConnectionOrchestrator(catalog)
        return cls(
            ConnectorRegistry(connectors),
            orchestrator,
            NetworkSwitcher(orchestrator, catalog),
            PendingConnectionRecovery(store, settings.handoff_key, settings.handoff_max_age),
            SigningGateway(orchestrator),
            navigator=navigator,
            modal=modal,
            catalog=catalog,
            dapp_url=settings.dapp_url,
        )

    @property
    def session(self) -> ConnectionSession:
        return self.orchestrator.session

    @property
    def _on_mobile(self) -> bool:
        return self.navigator is not None and is_mobile(getattr(self.navigator, "user_agent", None))

    async def connect(self, wallet_id: str) -> Optional[ConnectionSession]:
        """
        Connect the wallet the user picked.

        Returns the resulting session, or None when the attempt left this page:
        either a mobile handoff was started (the connection resumes in
        :meth:`restore` on the next load) or the generic modal was opened.
        An active session is disconnected first, but only once the new wallet
        resolved or can be handed off; opening the picker keeps it.
        """
        connector = self.registry.resolve(wallet_id)
        descriptor = self.registry.descriptor(wallet_id)
        can_hand_off = bool(descriptor.deep_link and self._on_mobile and self.dapp_url)
        if connector is None and not can_hand_off:
            logger.info("No connector for %s, opening wallet picker", wallet_id)
            if self.modal is not None:
                self.modal.open()
            return None

        if self.orchestrator.status is ConnectionStatus.CONNECTED:
            await self.orchestrator.disconnect()
        if connector is not None:
            return await self.orchestrator.connect(connector)
        self.handoff(wallet_id)
        return None

    def handoff(self, wallet_id: str) -> str:
        """Record the pending connection and navigate to the wallet app. Returns the link."""
        if self.navigator is None:
            raise InvalidStateTransition("mobile handoff without a navigator", self.orchestrator.status)
        descriptor = self.registry.descriptor(wallet_id)
        if not descriptor.deep_link:
            raise ValueError(f"Wallet {wallet_id} has no deep link")
        url = build_deep_link(descriptor.deep_link, self.dapp_url)
        self.recovery.record(descriptor.id)
        logger.info("Handing off to %s", url)
        self.navigator.navigate(url)
        return url

    async def restore(self) -> Optional[ConnectionSession]:
        return await self.recovery.consume_and_recover(self.registry, self.orchestrator)

    async def disconnect(self) -> None:
        await self.orchestrator.disconnect()

    async def switch_network(self, chain_id: ChainId) -> Outcome:
        return await self.switcher.switch_to(chain_id)

    async def sign_message(self, payload: SignablePayload) -> Optional[Outcome]:
        return await self.gateway.sign_message(payload)

    async def send_transaction(self, to: str, value: Union[int, CurrencyAmount]) -> Optional[Outcome]:
        return await self.gateway.send_transaction(to, value)

    async def get_tx_scan(self, tx_hash: Optional[str] = None) -> Optional[str]:
        """Explorer link for ``tx_hash`` (default: the last sent transaction) on the active chain."""
        tx_hash = tx_hash or self.gateway.tx_hash
        chain_id = self.session.chain_id
        if tx_hash is None or chain_id is None or self.catalog is None:
            return None
        if self.catalog.get(chain_id) is None:
            return None
        return await self.catalog.get_tx_scan(chain_id, tx_hash)
