"""
Persisted key-value stores.

A store must survive a full page reload, which for a Python process means a
restart. :class:`JsonFileStore` keeps every key in one JSON document on disk;
:class:`MemoryStore` is the in-process variant used when nothing needs to
outlive the process (and in tests).
"""
import json
import logging
import os
import tempfile
from typing import Dict, Optional, Protocol, Union

from .exceptions import WalletException

__all__ = ["KeyValueStore", "MemoryStore", "JsonFileStore"]

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStore:
    """
    Store backed by a single JSON object file.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a crash never leaves a truncated document.
    A missing file reads as an empty store. Reading an unreadable one raises
    :class:`WalletException`; deleting from it resets the document to empty.

    Example:
        >>> store = JsonFileStore("~/.w3wallet/state.json")
        >>> store.set("w3wallet.pendingHandoff", '{"walletId": "metaMask"}')
    """

    def __init__(self, path: Union[str, "os.PathLike[str]"]) -> None:
        self.path = os.path.expanduser(os.fspath(path))

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise WalletException(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise WalletException(f"Store {self.path} does not hold a JSON object")
        return data

    def _dump(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".w3wallet-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)
        logger.debug("Stored %s in %s", key, self.path)

    def delete(self, key: str) -> None:
        try:
            data = self._load()
        except WalletException as e:
            # an unreadable document can't hold a usable key; start over
            logger.warning("Resetting unreadable store %s: %s", self.path, e)
            self._dump({})
            return
        if data.pop(key, None) is not None:
            self._dump(data)
            logger.debug("Deleted %s from %s", key, self.path)
