"""
Exception classes for w3wallet.

This module defines the exception hierarchy used throughout the w3wallet library.
Provider failures (user rejections and provider faults) are captured by the
orchestrating components and stored as state for the UI to render; only
contract violations such as :class:`InvalidStateTransition` are raised to callers.

Example:
    >>> try:
    ...     await switcher.switch_to(84532)
    ... except InvalidStateTransition as e:
    ...     print(f"Not connected: {e}")
"""
from typing import Any, Mapping, Optional

__all__ = [
    "WalletException",
    "ProviderRejection",
    "ProviderFault",
    "InvalidStateTransition",
    "ResolutionFailure",
    "UnknownNetwork",
    "classify_provider_error",
]

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001
_REJECTION_MARKERS = ("user rejected", "user denied", "rejected by user", "request rejected")


class WalletException(Exception):
    """
    Base exception class for wallet-related errors.

    Every w3wallet-specific exception derives from this class, so callers can
    catch it to handle any wallet failure.
    """
    pass


class ProviderRejection(WalletException):
    """
    The user declined the request in the wallet UI.

    Closing a provider's approval dialog is reported the same way; there is no
    separate "cancelled" state.
    """
    pass


class ProviderFault(WalletException):
    """Provider or transport internal failure (RPC error, relay drop, timeout)."""
    pass


class InvalidStateTransition(WalletException):
    """
    An operation was invoked while the connection status forbids it.

    This is a programming-contract violation, e.g. switching network while
    disconnected or calling ``connect`` while another connect is in flight.
    """

    def __init__(self, operation: str, status: Any) -> None:
        super().__init__(f"{operation} is not allowed while {status}")
        self.operation = operation
        self.status = status


class ResolutionFailure(WalletException):
    """No available connector matches the requested wallet id."""

    def __init__(self, wallet_id: str) -> None:
        super().__init__(f"No connector matches wallet '{wallet_id}'")
        self.wallet_id = wallet_id


class UnknownNetwork(WalletException):
    """The chain id is not part of the configured network catalog."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Chain {chain_id} is not supported")
        self.chain_id = chain_id


def _error_code(exc: BaseException) -> Optional[int]:
    code = getattr(exc, "code", None)
    if code is None and exc.args and isinstance(exc.args[0], Mapping):
        code = exc.args[0].get("code")
    try:
        return int(code) if code is not None else None
    except (TypeError, ValueError):
        return None


def classify_provider_error(exc: BaseException) -> WalletException:
    """
    Map an arbitrary provider exception to :class:`ProviderRejection` or
    :class:`ProviderFault`.

    Instances of either class are returned unchanged. Otherwise an EIP-1193
    code 4001 (as ``exc.code`` or a ``{"code": 4001}`` payload) or a message
    mentioning a user rejection yields a :class:`ProviderRejection`; anything
    else becomes a :class:`ProviderFault`. The original exception is chained
    as ``__cause__``.
    """
    if isinstance(exc, (ProviderRejection, ProviderFault)):
        return exc
    message = str(exc) or exc.__class__.__name__
    lowered = message.lower()
    if (_error_code(exc) == USER_REJECTED_CODE
            or any(marker in lowered for marker in _REJECTION_MARKERS)):
        classified: WalletException = ProviderRejection(message)
    else:
        classified = ProviderFault(message)
    classified.__cause__ = exc
    return classified
