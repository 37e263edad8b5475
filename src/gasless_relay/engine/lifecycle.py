"""
Transfer Attempt Lifecycle

One gasless transfer attempt moves through:

    BUILT -> SIGNED -> SUBMITTED -> CONFIRMED
                                 -> REJECTED
    (any non-terminal state)     -> EXPIRED

Terminal attempts are never resubmitted. A rejected or expired transfer is
retried by building a new attempt, which re-reads both nonces and picks a
fresh deadline; the signed payloads of an attempt are never edited.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from ..adapters.evm.schemas import MetaTransfer, Permit, PermitData, TransactionResult
from ..schemas.bases import TransferState
from .exceptions import DeadlineExpiredError, InvalidTransition


_TRANSITIONS: Dict[TransferState, FrozenSet[TransferState]] = {
    TransferState.BUILT: frozenset({TransferState.SIGNED, TransferState.EXPIRED}),
    TransferState.SIGNED: frozenset({TransferState.SUBMITTED, TransferState.EXPIRED}),
    TransferState.SUBMITTED: frozenset({
        TransferState.CONFIRMED,
        TransferState.REJECTED,
        TransferState.EXPIRED,
    }),
    TransferState.CONFIRMED: frozenset(),
    TransferState.REJECTED: frozenset(),
    TransferState.EXPIRED: frozenset(),
}


@dataclass
class TransferAttempt:
    """
    A single, single-use transfer attempt and its state.

    Attributes:
        meta_transfer: The relayer authorization (relayer nonce inside).
        permit: The token approval (token nonce inside).
        state: Current lifecycle state.
        permit_data: Signed permit, set when the attempt becomes SIGNED.
        signature: MetaTransfer signature, set when the attempt becomes SIGNED.
        result: Relayer result, set when the attempt becomes CONFIRMED.
        history: Every state the attempt has been in, oldest first.
    """
    meta_transfer: MetaTransfer
    permit: Permit
    state: TransferState = TransferState.BUILT
    permit_data: Optional[PermitData] = None
    signature: Optional[str] = None
    result: Optional[TransactionResult] = None
    error: Optional[str] = None
    history: List[TransferState] = field(default_factory=list)

    def __post_init__(self):
        if not self.history:
            self.history.append(self.state)

    @property
    def deadline(self) -> int:
        return self.meta_transfer.deadline

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def transition(self, target: TransferState) -> None:
        """
        Move to ``target``.

        Raises:
            InvalidTransition: If ``target`` is not reachable from the current state.
        """
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(
                f"Cannot move transfer from {self.state.value} to {target.value}",
                current_state=self.state,
                target_state=target,
            )
        self.state = target
        self.history.append(target)

    def mark_signed(self, permit_data: PermitData, signature: str) -> None:
        self.transition(TransferState.SIGNED)
        self.permit_data = permit_data
        self.signature = signature

    def mark_submitted(self) -> None:
        self.transition(TransferState.SUBMITTED)

    def mark_confirmed(self, result: TransactionResult) -> None:
        self.transition(TransferState.CONFIRMED)
        self.result = result

    def mark_rejected(self, error: str) -> None:
        self.transition(TransferState.REJECTED)
        self.error = error

    def ensure_not_expired(self, now: Optional[int] = None) -> None:
        """
        Expire the attempt if its deadline has passed.

        Raises:
            DeadlineExpiredError: When ``deadline < now``; the attempt is
                                  moved to EXPIRED first unless already terminal.
        """
        if now is None:
            now = int(time.time())
        if self.deadline < now:
            if not self.is_terminal:
                self.transition(TransferState.EXPIRED)
            raise DeadlineExpiredError(
                f"Transfer deadline {self.deadline} passed at {now}; rebuild with a fresh deadline and nonces",
                deadline=self.deadline,
                now=now,
            )
