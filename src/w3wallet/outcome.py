"""Terminal results of provider requests."""
from typing import Any, NamedTuple, Union

from .exceptions import WalletException

__all__ = ["Success", "Failure", "Outcome"]


class Success(NamedTuple):
    result: Any

    @property
    def ok(self) -> bool:
        return True


class Failure(NamedTuple):
    reason: WalletException

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.reason)


Outcome = Union[Success, Failure]
