"""
Transfer Lifecycle Test Suite

Tests: 1) allowed transitions 2) rejected transitions 3) deadline expiry
"""

import pytest

from test_mocks import (
    MOCK_AMOUNT_1_TOKEN,
    MOCK_FIXED_DEADLINE,
    MOCK_OWNER_ADDRESS,
    MOCK_RECIPIENT_ADDRESS,
    MOCK_RELAYER_ADDRESS,
    MOCK_TOKEN_ADDRESS,
    MOCK_TX_HASH,
)

from gasless_relay.adapters.evm.schemas import MetaTransfer, Permit, PermitData, TransactionResult
from gasless_relay.engine.exceptions import DeadlineExpiredError, InvalidTransition
from gasless_relay.engine.lifecycle import TransferAttempt
from gasless_relay.schemas.bases import TransferState


def create_attempt(deadline: int = MOCK_FIXED_DEADLINE) -> TransferAttempt:
    meta_transfer = MetaTransfer(
        owner=MOCK_OWNER_ADDRESS,
        token=MOCK_TOKEN_ADDRESS,
        recipient=MOCK_RECIPIENT_ADDRESS,
        amount=MOCK_AMOUNT_1_TOKEN,
        relayer_nonce=0,
        deadline=deadline,
    )
    permit = Permit(
        token=MOCK_TOKEN_ADDRESS,
        owner=MOCK_OWNER_ADDRESS,
        spender=MOCK_RELAYER_ADDRESS,
        value=MOCK_AMOUNT_1_TOKEN,
        token_nonce=0,
        deadline=deadline,
    )
    return TransferAttempt(meta_transfer=meta_transfer, permit=permit)


def create_permit_data(deadline: int = MOCK_FIXED_DEADLINE) -> PermitData:
    return PermitData(value=MOCK_AMOUNT_1_TOKEN, deadline=deadline, v=27, r="0x" + "11" * 32, s="0x" + "22" * 32)


def test_happy_path():
    """Built -> Signed -> Submitted -> Confirmed."""
    attempt = create_attempt()
    assert attempt.state is TransferState.BUILT

    attempt.mark_signed(create_permit_data(), "0x" + "ab" * 65)
    attempt.mark_submitted()
    attempt.mark_confirmed(TransactionResult(hash=MOCK_TX_HASH, success=True))

    assert attempt.state is TransferState.CONFIRMED
    assert attempt.is_terminal
    assert attempt.result.hash == MOCK_TX_HASH
    assert attempt.history == [
        TransferState.BUILT,
        TransferState.SIGNED,
        TransferState.SUBMITTED,
        TransferState.CONFIRMED,
    ]


def test_rejection_records_error():
    attempt = create_attempt()
    attempt.mark_signed(create_permit_data(), "0x" + "ab" * 65)
    attempt.mark_submitted()
    attempt.mark_rejected("Relayer service error: nonce too low")
    assert attempt.state is TransferState.REJECTED
    assert "nonce" in attempt.error


@pytest.mark.parametrize("target", [TransferState.SUBMITTED, TransferState.CONFIRMED, TransferState.REJECTED])
def test_cannot_skip_signing(target):
    attempt = create_attempt()
    with pytest.raises(InvalidTransition) as exc_info:
        attempt.transition(target)
    assert exc_info.value.current_state is TransferState.BUILT
    assert exc_info.value.target_state is target
    assert attempt.state is TransferState.BUILT


@pytest.mark.parametrize("terminal", [TransferState.CONFIRMED, TransferState.REJECTED])
def test_terminal_attempts_are_never_resubmitted(terminal):
    attempt = create_attempt()
    attempt.mark_signed(create_permit_data(), "0x" + "ab" * 65)
    attempt.mark_submitted()
    attempt.transition(terminal)
    with pytest.raises(InvalidTransition):
        attempt.mark_submitted()


def test_expired_attempt_is_final():
    attempt = create_attempt()
    attempt.transition(TransferState.EXPIRED)
    for target in TransferState:
        with pytest.raises(InvalidTransition):
            attempt.transition(target)


class TestDeadlineExpiry:
    """``ensure_not_expired`` moves a stale attempt to EXPIRED."""

    def test_not_expired(self):
        attempt = create_attempt(deadline=1000)
        attempt.ensure_not_expired(now=1000)
        assert attempt.state is TransferState.BUILT

    @pytest.mark.parametrize("signed", [False, True])
    def test_expired(self, signed):
        attempt = create_attempt(deadline=1000)
        if signed:
            attempt.mark_signed(create_permit_data(deadline=1000), "0x" + "ab" * 65)
        with pytest.raises(DeadlineExpiredError) as exc_info:
            attempt.ensure_not_expired(now=1001)
        assert attempt.state is TransferState.EXPIRED
        assert exc_info.value.deadline == 1000
        assert exc_info.value.now == 1001

    def test_expired_after_confirmation_keeps_state(self):
        attempt = create_attempt(deadline=1000)
        attempt.mark_signed(create_permit_data(deadline=1000), "0x" + "ab" * 65)
        attempt.mark_submitted()
        attempt.mark_confirmed(TransactionResult(hash=MOCK_TX_HASH, success=True))
        with pytest.raises(DeadlineExpiredError):
            attempt.ensure_not_expired(now=2000)
        assert attempt.state is TransferState.CONFIRMED
