"""
Exception Hierarchy Test Suite

Tests the error taxonomy and the mapping of relayer/contract error messages.
"""

import pytest

from gasless_relay.engine.exceptions import (
    BlockchainInteractionError,
    ConfigurationError,
    DeadlineExpiredError,
    GaslessError,
    InvalidSignatureLength,
    InvalidTransition,
    RelayerServiceError,
    SignatureError,
    SignatureVerificationError,
    SignerUnavailable,
    StaleNonceError,
    TransferValidationError,
    WalletNotConnected,
    format_gasless_error,
    raise_for_revert,
)


@pytest.mark.parametrize("error_class", [
    ConfigurationError,
    TransferValidationError,
    SignatureError,
    InvalidSignatureLength,
    SignatureVerificationError,
    SignerUnavailable,
    WalletNotConnected,
    BlockchainInteractionError,
    DeadlineExpiredError,
    RelayerServiceError,
    StaleNonceError,
    InvalidTransition,
])
def test_all_errors_share_a_root(error_class):
    assert issubclass(error_class, GaslessError)


def test_signature_family():
    assert issubclass(InvalidSignatureLength, SignatureError)
    assert issubclass(WalletNotConnected, SignerUnavailable)
    assert issubclass(StaleNonceError, RelayerServiceError)


@pytest.mark.parametrize("reason,readable", [
    ("execution reverted: TokenNotWhitelisted()", "Token is not whitelisted for gasless transfers"),
    ("AmountExceedsMax", "Transfer amount exceeds maximum limit"),
    ("FeeExceedsMax", "Fee amount exceeds maximum limit"),
    ("DeadlineExpired", "Transaction deadline has expired"),
    ("InvalidSignature", "Invalid signature provided"),
    ("RecipientNotAllowed", "Recipient address is not allowed"),
])
def test_format_known_reverts(reason, readable):
    assert format_gasless_error(reason, "transfer") == f"Gasless transfer failed: {readable}"


def test_format_unknown_error_keeps_message():
    assert format_gasless_error(ValueError("boom"), "transfer") == "Gasless transfer failed: boom"


def test_raise_for_revert_stale_nonce():
    with pytest.raises(StaleNonceError) as exc_info:
        raise_for_revert("execution reverted: InvalidNonce", status_code=400, operation="relay-transaction")
    assert exc_info.value.status_code == 400
    assert exc_info.value.operation == "relay-transaction"


def test_raise_for_revert_generic():
    with pytest.raises(RelayerServiceError) as exc_info:
        raise_for_revert("FeeExceedsMax", status_code=400)
    assert not isinstance(exc_info.value, StaleNonceError)
    assert str(exc_info.value) == "Relayer service error: Gasless relay failed: Fee amount exceeds maximum limit"
