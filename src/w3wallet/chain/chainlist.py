# pylint: disable=missing-class-docstring,missing-function-docstring
"""
Chainlist-backed chain metadata.

ChainlistClient fetches https://chainlist.org/rpcs.json and caches it in-memory
for 60 seconds. It is only used to look up the EIP-3091 block explorer of a
chain that has none configured; w3wallet never talks to an RPC endpoint itself.

Usage example:
    client = ChainlistClient()
    explorer = await client.get_chain_explorer(10143)
"""
import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Union

import aiohttp

__all__ = ["ChainlistClient", "CHAINLIST_RPCS_URL"]

logger = logging.getLogger(__name__)

CHAINLIST_RPCS_URL = "https://chainlist.org/rpcs.json"
CACHE_TTL = 60.0


class ChainlistClient:
    def __init__(self, url: str = CHAINLIST_RPCS_URL, ttl: float = CACHE_TTL) -> None:
        self._url = url
        self._ttl = ttl
        self._data: Optional[List[Dict[str, Any]]] = None
        self._expires_at: float = 0.0
        self._lock: asyncio.Lock = asyncio.Lock()

    async def _fetch_data(self) -> List[Dict[str, Any]]:
        timeout = aiohttp.ClientTimeout(total=60)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self._url) as resp:
                resp.raise_for_status()
                return await resp.json()

    async def get_data(self) -> List[Dict[str, Any]]:
        if self._data is None or time.monotonic() >= self._expires_at:
            async with self._lock:
                if self._data is None or time.monotonic() >= self._expires_at:
                    self._data = await self._fetch_data()
                    self._expires_at = time.monotonic() + self._ttl
                    logger.debug("Loaded %d chains from %s", len(self._data), self._url)
        return self._data

    async def _get_entry(self, chain_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        cid = int(chain_id)
        for item in await self.get_data():
            if int(item.get("chainId", -1)) == cid:
                return item
        return None

    async def get_chain_explorer(self, chain_id: Union[int, str]) -> Optional[str]:
        entry = await self._get_entry(chain_id)
        for explorer in (entry or {}).get("explorers", []) or []:
            standard = (explorer.get("standard") or "").upper()
            url = explorer.get("url")
            if standard == "EIP3091" and isinstance(url, str) and url:
                return url.rstrip("/")
        return None
