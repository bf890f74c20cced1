"""
Wallet catalog and connector resolution.

Wallet providers announce themselves at runtime as connectors with an ``id``
and a display ``name``. The UI, on the other hand, refers to wallets by stable
ids such as ``"metaMask"``. :class:`ConnectorRegistry` bridges the two using a
declarative table of :class:`WalletDescriptor` entries whose match strategies
are evaluated in a fixed priority order.

Resolution order for a wallet id:

1. Every strategy of the descriptor, in the order listed.
2. For each strategy, every available connector, in registry order.
3. The first connector satisfying a strategy wins.

Note:
    Name-substring strategies are ambiguous by nature: ``"trust"`` matches any
    connector whose name contains "trust". When several connectors match the
    same strategy the first one in registry order is returned and no further
    disambiguation is attempted.

Example:
    >>> registry = ConnectorRegistry(connectors)
    >>> connector = registry.resolve("metaMask")
    >>> if connector is None:
    ...     modal.open()
"""
import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from .exceptions import ResolutionFailure
from .types import Connector

__all__ = [
    "MatchKind",
    "MatchStrategy",
    "WalletDescriptor",
    "WALLETS",
    "ConnectorRegistry",
]

logger = logging.getLogger(__name__)


class MatchKind(str, Enum):
    ID_EXACT = "id"
    NAME_CONTAINS = "name"


class MatchStrategy(NamedTuple):
    """One way of recognising a connector. Comparison is case-insensitive."""
    kind: MatchKind
    value: str

    def matches(self, connector: Connector) -> bool:
        needle = self.value.lower()
        if self.kind is MatchKind.ID_EXACT:
            return str(connector.id).lower() == needle
        return needle in str(connector.name).lower()


def id_exact(value: str) -> MatchStrategy:
    return MatchStrategy(MatchKind.ID_EXACT, value)


def name_contains(value: str) -> MatchStrategy:
    return MatchStrategy(MatchKind.NAME_CONTAINS, value)


class WalletDescriptor(NamedTuple):
    """
    Static catalog entry for a wallet.

    Attributes:
        id: Stable key the UI refers to (e.g. "metaMask")
        display_name: Human-readable name
        strategies: Match strategies, evaluated in order
        deep_link: Optional native-app link template (see ``device.build_deep_link``)
    """
    id: str
    display_name: str
    strategies: Tuple[MatchStrategy, ...]
    deep_link: Optional[str] = None

    @classmethod
    def default_for(cls, wallet_id: str) -> "WalletDescriptor":
        """Descriptor used for ids missing from the catalog."""
        return cls(wallet_id, wallet_id, (id_exact(wallet_id), name_contains(wallet_id)))


WALLETS: Tuple[WalletDescriptor, ...] = (
    WalletDescriptor(
        "metaMask", "MetaMask",
        (id_exact("metaMask"), id_exact("io.metamask"), name_contains("metamask")),
        deep_link="https://metamask.app.link/dapp/{host_path}",
    ),
    WalletDescriptor(
        "trust", "Trust Wallet",
        (id_exact("trust"), id_exact("com.trustwallet.app"), name_contains("trust")),
        deep_link="https://link.trustwallet.com/open_url?coin_id=60&url={url}",
    ),
    WalletDescriptor(
        "coinbaseWallet", "Coinbase Wallet",
        (id_exact("coinbaseWallet"), id_exact("coinbaseWalletSDK"), name_contains("coinbase")),
        deep_link="https://go.cb-w.com/dapp?cb_url={url}",
    ),
    WalletDescriptor(
        "rainbow", "Rainbow",
        (id_exact("rainbow"), id_exact("me.rainbow"), name_contains("rainbow")),
        deep_link="https://rnbwapp.com/dapp?url={url}",
    ),
    WalletDescriptor(
        "walletConnect", "WalletConnect",
        (id_exact("walletConnect"), name_contains("walletconnect")),
    ),
    WalletDescriptor(
        "injected", "Browser Wallet",
        (id_exact("injected"),),
    ),
)

ConnectorSource = Union[Iterable[Connector], Callable[[], Iterable[Connector]]]


class ConnectorRegistry:
    """
    Resolves wallet ids to the connectors currently offered by the provider library.

    The connector source may be a list (read on every lookup, so later
    announcements are seen) or a callable returning the live connectors.
    Any other iterable is copied into a list once.
    Lookups have no side effects.
    """

    def __init__(
        self,
        connectors: Optional[ConnectorSource] = None,
        wallets: Iterable[WalletDescriptor] = WALLETS,
    ) -> None:
        if connectors is None:
            connectors = []
        elif not callable(connectors) and not isinstance(connectors, list):
            # one-shot iterators would be exhausted by the first lookup
            connectors = list(connectors)
        self._source: ConnectorSource = connectors
        self._wallets: Dict[str, WalletDescriptor] = {w.id.lower(): w for w in wallets}

    @property
    def connectors(self) -> List[Connector]:
        source = self._source
        return list(source() if callable(source) else source)

    @property
    def wallets(self) -> List[WalletDescriptor]:
        return list(self._wallets.values())

    def announce(self, connector: Connector) -> None:
        """Add a connector that announced itself at runtime (ignored if its id is known)."""
        if callable(self._source):
            raise TypeError("Cannot announce into a callable connector source")
        if any(c.id == connector.id for c in self._source):
            return
        self._source.append(connector)
        logger.debug("Connector announced: %s (%s)", connector.name, connector.id)

    def descriptor(self, wallet_id: str) -> WalletDescriptor:
        return self._wallets.get(wallet_id.lower()) or WalletDescriptor.default_for(wallet_id)

    def resolve(self, wallet_id: str) -> Optional[Connector]:
        """
        Return the first connector matching ``wallet_id``, or None when nothing matches.

        The caller decides what NotFound means (open the generic modal, hand off
        to a mobile app, or do nothing).
        """
        connectors = self.connectors
        for strategy in self.descriptor(wallet_id).strategies:
            for connector in connectors:
                if strategy.matches(connector):
                    logger.debug("Resolved %s to %s via %s", wallet_id, connector.id, strategy.kind.value)
                    return connector
        logger.debug("No connector for %s among %d", wallet_id, len(connectors))
        return None

    def require(self, wallet_id: str) -> Connector:
        connector = self.resolve(wallet_id)
        if connector is None:
            raise ResolutionFailure(wallet_id)
        return connector
