"""
Message signing and transaction submission against the active session.

Each request is dispatched once and produces exactly one terminal outcome.
Requests of the same kind may overlap; the gateway reflects the most recently
*completed* one, not the most recently issued. Results that complete after the
session they were issued on has ended are dropped.

Example:
    >>> gateway = SigningGateway(orchestrator)
    >>> await gateway.sign_message("Hello from my app!")
    Success(result='0x...')
    >>> gateway.signature
    '0x...'
"""
import logging
import time
from typing import Any, Awaitable, Callable, NamedTuple, Optional, Union

from web3 import AsyncWeb3

from .exceptions import WalletException, classify_provider_error
from .outcome import Failure, Outcome, Success
from .session import ConnectionOrchestrator, ConnectionSession, ConnectionStatus
from .token import CurrencyAmount
from .types import SignablePayload

__all__ = ["SigningRequest", "TransactionRequest", "SigningGateway"]

logger = logging.getLogger(__name__)


class SigningRequest(NamedTuple):
    payload: SignablePayload
    requested_at: float


class TransactionRequest(NamedTuple):
    to: str
    value: int
    requested_at: float


class SigningGateway:
    """
    Sequences signing and transaction requests and keeps their latest outcomes.

    Attributes:
        signature: Result of the latest successful signing request
        signature_error: Reason of the latest signing request if it failed
        tx_hash: Result of the latest successful transaction request
        tx_error: Reason of the latest transaction request if it failed

    Outcomes are cleared whenever a new session is established or the active
    one is torn down.
    """

    def __init__(
        self,
        orchestrator: ConnectionOrchestrator,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._orchestrator = orchestrator
        self._clock = clock
        self.last_signature_outcome: Optional[Outcome] = None
        self.last_transaction_outcome: Optional[Outcome] = None
        self.signature: Optional[str] = None
        self.tx_hash: Optional[str] = None
        self._session: ConnectionSession = orchestrator.session
        orchestrator.subscribe(self._on_session)

    def _on_session(self, session: ConnectionSession) -> None:
        if session is self._session:
            return
        self._session = session
        if session.status in (ConnectionStatus.CONNECTED, ConnectionStatus.DISCONNECTED):
            self.reset()

    def reset(self) -> None:
        self.last_signature_outcome = None
        self.last_transaction_outcome = None
        self.signature = None
        self.tx_hash = None

    @property
    def signature_error(self) -> Optional[WalletException]:
        outcome = self.last_signature_outcome
        return outcome.reason if isinstance(outcome, Failure) else None

    @property
    def tx_error(self) -> Optional[WalletException]:
        outcome = self.last_transaction_outcome
        return outcome.reason if isinstance(outcome, Failure) else None

    @property
    def error(self) -> Optional[WalletException]:
        """The error the UI shows: signing first, then transaction."""
        return self.signature_error or self.tx_error

    def _active_session(self, operation: str) -> Optional[ConnectionSession]:
        session = self._orchestrator.session
        if session.status is not ConnectionStatus.CONNECTED:
            logger.debug("Ignored %s while %s", operation, session.status)
            return None
        return session

    async def _dispatch(
        self,
        session: ConnectionSession,
        operation: str,
        request: Callable[[], Awaitable[Any]],
    ) -> Optional[Outcome]:
        try:
            outcome: Outcome = Success(await request())
        except Exception as e:  # pylint: disable=broad-except
            error = classify_provider_error(e)
            logger.warning("%s failed: %s", operation, error)
            outcome = Failure(error)
        if session is not self._orchestrator.session:
            logger.debug("Dropped %s outcome of an ended session", operation)
            return None
        return outcome

    async def sign_message(self, payload: SignablePayload) -> Optional[Outcome]:
        """
        Ask the wallet to sign ``payload`` (text, bytes or EIP-712 typed data).

        Returns the outcome, or None when not Connected (nothing is dispatched).
        """
        session = self._active_session("sign message")
        if session is None:
            return None
        request = SigningRequest(payload, self._clock())
        outcome = await self._dispatch(
            session, "Sign message",
            lambda: session.transport.request_signature(request.payload),
        )
        if outcome is None:
            return None
        self.last_signature_outcome = outcome
        if isinstance(outcome, Success):
            self.signature = outcome.result
        return outcome

    async def send_transaction(
        self,
        to: str,
        value: Union[int, CurrencyAmount],
    ) -> Optional[Outcome]:
        """
        Ask the wallet to send ``value`` (wei or a CurrencyAmount) to ``to``.

        An invalid recipient, a negative value, or a value that is neither an
        int nor a CurrencyAmount (e.g. the float 0.001; use ``eth(0.001)``)
        fails without reaching the provider. Returns the outcome, or None when not Connected.
        """
        session = self._active_session("send transaction")
        if session is None:
            return None
        try:
            request = TransactionRequest(
                AsyncWeb3.to_checksum_address(to),
                _to_wei(value),
                self._clock(),
            )
        except (TypeError, ValueError) as e:
            outcome: Optional[Outcome] = Failure(WalletException(f"Invalid transaction: {e}"))
        else:
            outcome = await self._dispatch(
                session, "Send transaction",
                lambda: session.transport.request_transaction(request.to, request.value),
            )
        if outcome is None:
            return None
        self.last_transaction_outcome = outcome
        if isinstance(outcome, Success):
            self.tx_hash = outcome.result
        return outcome


def _to_wei(value: Union[int, CurrencyAmount]) -> int:
    if isinstance(value, CurrencyAmount):
        amount = value.amount
    elif isinstance(value, int) and not isinstance(value, bool):
        amount = value
    else:
        raise TypeError(f"value must be an int in wei or a CurrencyAmount, got {value!r}")
    if amount < 0:
        raise ValueError("value can't be negative")
    return amount
