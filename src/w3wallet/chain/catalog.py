"""
Supported network catalog.

Chain identifiers are opaque integers; the catalog attaches the display name,
native currency and block explorer to each supported one. A catalog is built
once at application start and passed to the components that need it.

Example:
    >>> catalog = NetworkCatalog([SEPOLIA, BASE_SEPOLIA])
    >>> catalog.get(84532).name
    'Base Sepolia'
    >>> catalog.get_tx_scan(11155111, "0xabc")
    'https://sepolia.etherscan.io/tx/0xabc'
"""
from typing import Dict, Iterable, Iterator, Optional, Union, TYPE_CHECKING

from ..exceptions import UnknownNetwork
from ..token import Currency
if TYPE_CHECKING:
    from .chainlist import ChainlistClient

__all__ = ["Network", "NetworkCatalog", "ETHER", "SEPOLIA", "BASE_SEPOLIA", "BASE", "KNOWN_NETWORKS"]


ETHER = Currency("Ether", "ETH", 18)


class Network:
    """
    A chain the application can switch to.

    Attributes:
        chain_id (int): Numeric chain id
        name (str): Human-readable name (e.g. "Sepolia")
        currency (Currency): Native currency
        scan (str, optional): Block explorer base URL
        color (str, optional): Accent color the UI uses for the network button
    """

    def __init__(
        self,
        chain_id: int,
        name: str,
        currency: Union[str, Currency] = ETHER,
        scan: Optional[str] = None,
        color: Optional[str] = None,
    ) -> None:
        self.chain_id = int(chain_id)
        self.name = name
        self.currency = currency if isinstance(currency, Currency) else Currency(currency, currency)
        self.scan = scan
        self.color = color

    def get_tx_scan(self, tx_hash: Union[str, bytes]) -> Optional[str]:
        """Explorer link for a transaction, or None when the network has no explorer."""
        if not self.scan:
            return None
        hash_str = tx_hash.hex() if isinstance(tx_hash, bytes) else tx_hash
        if not hash_str.startswith('0x'):
            hash_str = f"0x{hash_str}"
        return f"{self.scan.rstrip('/')}/tx/{hash_str}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Network):
            return NotImplemented
        return self.chain_id == other.chain_id

    def __hash__(self) -> int:
        return hash(self.chain_id)

    def __repr__(self) -> str:
        return f"Network({self.chain_id}, {self.name!r})"

    def __str__(self) -> str:
        return self.name or f"Chain#{self.chain_id}"


SEPOLIA = Network(11155111, "Sepolia", scan="https://sepolia.etherscan.io", color="#6d28d9")
BASE_SEPOLIA = Network(84532, "Base Sepolia", scan="https://sepolia.basescan.org", color="#0052ff")
BASE = Network(8453, "Base", scan="https://basescan.org", color="#0052ff")
MAINNET = Network(1, "Ethereum", scan="https://etherscan.io")

KNOWN_NETWORKS: Dict[int, Network] = {n.chain_id: n for n in (MAINNET, SEPOLIA, BASE, BASE_SEPOLIA)}


class NetworkCatalog:
    """Ordered set of networks the application supports."""

    def __init__(
        self,
        networks: Iterable[Network],
        chainlist: Optional["ChainlistClient"] = None,
    ) -> None:
        self._networks: Dict[int, Network] = {n.chain_id: n for n in networks}
        self._chainlist = chainlist

    @classmethod
    def from_chain_ids(
        cls,
        chain_ids: Iterable[int],
        chainlist: Optional["ChainlistClient"] = None,
    ) -> "NetworkCatalog":
        """
        Build a catalog from chain ids, using the built-in metadata where known.

        Unknown ids get a bare ``Network`` named ``Chain#<id>``; their explorer
        can later be looked up through Chainlist by ``get_tx_scan``.
        """
        networks = [
            KNOWN_NETWORKS.get(int(cid)) or Network(int(cid), f"Chain#{cid}")
            for cid in chain_ids
        ]
        return cls(networks, chainlist)

    def get(self, chain_id: int) -> Optional[Network]:
        return self._networks.get(int(chain_id))

    def require(self, chain_id: int) -> Network:
        network = self.get(chain_id)
        if network is None:
            raise UnknownNetwork(chain_id)
        return network

    def __contains__(self, chain_id: object) -> bool:
        return isinstance(chain_id, int) and chain_id in self._networks

    def __iter__(self) -> Iterator[Network]:
        return iter(self._networks.values())

    def __len__(self) -> int:
        return len(self._networks)

    async def get_tx_scan(self, chain_id: int, tx_hash: Union[str, bytes]) -> Optional[str]:
        """
        Explorer link for a transaction on ``chain_id``.

        Falls back to the EIP-3091 explorer listed on Chainlist when the network
        has no explorer configured and a Chainlist client was given.
        """
        network = self.require(chain_id)
        if network.scan is None and self._chainlist is not None:
            network.scan = await self._chainlist.get_chain_explorer(network.chain_id)
        return network.get_tx_scan(tx_hash)
