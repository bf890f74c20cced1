from .catalog import Network, NetworkCatalog, ETHER, SEPOLIA, BASE_SEPOLIA, BASE, KNOWN_NETWORKS
from .chainlist import ChainlistClient

__all__ = [
    "Network",
    "NetworkCatalog",
    "ETHER",
    "SEPOLIA",
    "BASE_SEPOLIA",
    "BASE",
    "KNOWN_NETWORKS",
    "ChainlistClient",
]
