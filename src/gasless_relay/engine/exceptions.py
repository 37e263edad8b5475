"""
Exception and Error Definitions Module

Defines the exception hierarchy for typed-data signing, chain reads and
relayer submission. All exceptions inherit from GaslessError so callers can
catch every package failure in one place.

Exception Hierarchy:
    GaslessError (root)
    ├── ConfigurationError
    ├── TransferValidationError
    ├── SignatureError
    │   ├── InvalidSignatureLength
    │   ├── SignatureVerificationError
    │   └── SignerUnavailable
    │       └── WalletNotConnected
    ├── BlockchainInteractionError
    ├── DeadlineExpiredError
    ├── RelayerServiceError
    │   └── StaleNonceError
    └── InvalidTransition

Also provides ``format_gasless_error`` which turns known contract revert
names into readable messages, and ``raise_for_revert`` which picks the
relayer exception type for an error message.
"""

from typing import Dict, Optional


class GaslessError(Exception):
    """
    Root exception class for all project-specific exceptions.

    All custom exceptions inherit from this class to enable unified
    exception handling at the call site.
    """
    pass


class ConfigurationError(GaslessError):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Unknown chain preset or environment
    - Missing relayer service URL when submitting
    - Type-hash constants failing the import-time self-check
    """
    pass


class TransferValidationError(GaslessError):
    """
    Raised when transfer parameters fail local validation.

    This includes scenarios such as:
    - Malformed or zero address
    - Non-positive amount or negative fee
    - Amount or fee above the relayer contract limits
    - Invalid chain id
    """
    pass


class SignatureError(GaslessError):
    """
    Base exception for signature handling failures.

    Parent class for codec, recovery and signer availability errors.
    """
    pass


class InvalidSignatureLength(SignatureError):
    """
    Raised when a signature blob is not exactly 65 bytes.

    Hex input must be 132 characters with the ``0x`` prefix (130 without).
    Never retried.
    """
    pass


class SignatureVerificationError(SignatureError):
    """
    Raised when a signature does not recover to the expected signer.

    A signer that re-derives the typed-data hash with a different field order
    than the local hasher ends up here instead of at the contract.

    Attributes:
        expected: Expected signer address
        recovered: Address actually recovered from the signature
    """

    def __init__(self, message: str, expected: Optional[str] = None, recovered: Optional[str] = None):
        super().__init__(message)
        self.expected = expected
        self.recovered = recovered


class SignerUnavailable(SignatureError):
    """
    Raised when no signing capability is configured.

    Always raised before any network I/O takes place.
    """
    pass


class WalletNotConnected(SignerUnavailable):
    """Raised when the orchestrator has no signer attached."""
    pass


class BlockchainInteractionError(GaslessError):
    """
    Raised when a chain read (RPC call) fails.

    The message carries the operation name and the underlying error.

    Attributes:
        operation: Read that failed (e.g. ``"read token nonce"``)
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class DeadlineExpiredError(GaslessError):
    """
    Raised when a transfer's deadline has already passed.

    Recovery is to rebuild the transfer with a fresh deadline and
    freshly read nonces.

    Attributes:
        deadline: The expired deadline (unix seconds)
        now: Timestamp the check was performed at
    """

    def __init__(self, message: str, deadline: Optional[int] = None, now: Optional[int] = None):
        super().__init__(message)
        self.deadline = deadline
        self.now = now


class RelayerServiceError(GaslessError):
    """
    Raised for any relayer service failure.

    Covers transport errors, timeouts, non-2xx responses and JSON bodies that
    report ``success: false`` or carry an ``error`` field.

    Attributes:
        status_code: HTTP status code when a response was received
        operation: Relayer call that failed (e.g. ``"relay-transaction"``)
    """

    def __init__(self, message: str, status_code: Optional[int] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.operation = operation


class StaleNonceError(RelayerServiceError):
    """
    Raised when the relayer reports that a signed nonce was already used.

    Recovery is to re-read both nonces and rebuild from scratch.
    """
    pass


class InvalidTransition(GaslessError):
    """
    Raised when a transfer attempt is moved to a state it cannot reach.

    Attributes:
        current_state: State the attempt is in
        target_state: State that was requested
    """

    def __init__(self, message: str, current_state=None, target_state=None):
        super().__init__(message)
        self.current_state = current_state
        self.target_state = target_state


# ---------------------------------------------------------------------------
# Contract revert formatting
# ---------------------------------------------------------------------------

_REVERT_MESSAGES: Dict[str, str] = {
    "TokenNotWhitelisted": "Token is not whitelisted for gasless transfers",
    "AmountExceedsMax": "Transfer amount exceeds maximum limit",
    "FeeExceedsMax": "Fee amount exceeds maximum limit",
    "DeadlineExpired": "Transaction deadline has expired",
    "InvalidSignature": "Invalid signature provided",
    "RecipientNotAllowed": "Recipient address is not allowed",
}

_STALE_NONCE_MARKERS = ("InvalidNonce", "invalid nonce", "nonce too low")


def format_gasless_error(error, operation: str) -> str:
    """
    Build a readable message for a failed gasless operation.

    Args:
        error: Exception or message string from the relayer or contract.
        operation: Short name of the operation (e.g. ``"transfer"``).

    Returns:
        ``"Gasless <operation> failed: <reason>"``.

    Example::

        format_gasless_error(RelayerServiceError("execution reverted: FeeExceedsMax"), "transfer")
        # 'Gasless transfer failed: Fee amount exceeds maximum limit'
    """
    message = str(error)
    for marker, readable in _REVERT_MESSAGES.items():
        if marker in message:
            return f"Gasless {operation} failed: {readable}"
    return f"Gasless {operation} failed: {message}"


def raise_for_revert(message: str, status_code: Optional[int] = None, operation: Optional[str] = None) -> None:
    """
    Raise the relayer exception matching an error message.

    A reused nonce becomes ``StaleNonceError`` so callers can tell that a
    rebuild with fresh nonces is needed; everything else is a plain
    ``RelayerServiceError``. Both carry the readable revert reason.

    Raises:
        StaleNonceError or RelayerServiceError, always.
    """
    readable = format_gasless_error(message, operation or "relay")
    if any(marker in message for marker in _STALE_NONCE_MARKERS):
        raise StaleNonceError(readable, status_code=status_code, operation=operation)
    raise RelayerServiceError(
        f"Relayer service error: {readable}",
        status_code=status_code,
        operation=operation,
    )
