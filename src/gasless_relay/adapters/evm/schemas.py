"""
EVM Schema Models

Pydantic models for the two signed payloads and their surrounding data.
All classes inherit from ``CanonicalModel`` in ``schemas.bases``.

Signed payloads (frozen, single-use):
    - Permit: ERC-2612 approval of ``amount + fee`` to the relayer contract.
      Carries the token's nonce as ``token_nonce``.
    - MetaTransfer: the relayer contract's transfer authorization. Carries
      the relayer's nonce as ``relayer_nonce``.

Signature classes:
    - SignatureData: (v, r, s) triple of a 65-byte ECDSA signature.
    - PermitData: signed permit as consumed by ``executeMetaTransfer``.

Read / result classes:
    - TokenInfo, ContractLimits, TransactionResult, GaslessTransferParams.

uint256 fields are ``DecimalStr``: python ints in memory, decimal strings
when dumped, which is the relayer wire format.
"""

from typing import Optional

from eth_utils import is_address, to_checksum_address
from pydantic import ConfigDict, Field, field_validator

from ...schemas.bases import CanonicalModel, DecimalStr
from .standards import PermitMessage, MetaTransferMessage


def _checksum(value: str) -> str:
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid address: {value}")
    return to_checksum_address(value)


def _bytes32_hex(value: str) -> str:
    hex_str = value[2:] if value.startswith(("0x", "0X")) else value
    if len(hex_str) != 64:
        raise ValueError(f"expected 64 hex chars, got {len(hex_str)}")
    try:
        word = bytes.fromhex(hex_str)
    except ValueError:
        raise ValueError("not valid hexadecimal")
    if len(word) != 32:
        raise ValueError(f"expected 32 bytes, got {len(word)}")
    return "0x" + word.hex()


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------

class SignatureData(CanonicalModel):
    """
    ECDSA signature components (v, r, s).

    ``v`` is kept exactly as decoded so that encoding is lossless; use
    ``signatures.normalize_v`` before handing ``v`` to a contract, which
    expects 27 or 28.

    Attributes:
        v: Recovery id byte.
        r: r component, 0x-prefixed 64-char hex.
        s: s component, 0x-prefixed 64-char hex.

    Example::

        sig = SignatureData(v=27, r="0x" + "a" * 64, s="0x" + "b" * 64)
    """

    v: int = Field(..., ge=0, le=255, description="ECDSA recovery id byte")
    r: str = Field(..., description="Signature r component (32 bytes, 0x-prefixed hex)")
    s: str = Field(..., description="Signature s component (32 bytes, 0x-prefixed hex)")

    @field_validator("r", "s")
    @classmethod
    def _check_word(cls, value: str) -> str:
        return _bytes32_hex(value)


class PermitData(CanonicalModel):
    """
    Signed ERC-2612 permit in the shape ``executeMetaTransfer`` takes.

    ``v`` is always 27 or 28.
    """

    value: DecimalStr = Field(..., description="Approved amount (amount + fee)")
    deadline: DecimalStr = Field(..., description="Permit deadline (unix seconds)")
    v: int = Field(..., ge=27, le=28, description="ECDSA recovery id (27 or 28)")
    r: str = Field(..., description="Signature r component")
    s: str = Field(..., description="Signature s component")

    @field_validator("r", "s")
    @classmethod
    def _check_word(cls, value: str) -> str:
        return _bytes32_hex(value)


# ---------------------------------------------------------------------------
# Signed payloads
# ---------------------------------------------------------------------------

class Permit(CanonicalModel):
    """
    ERC-2612 ``Permit`` for one token.

    Immutable: a permit whose nonce went stale or whose deadline passed is
    discarded and rebuilt, never edited.

    Attributes:
        token: Token contract (the permit's ``verifyingContract``; not part of the struct).
        owner: Token holder.
        spender: Relayer contract allowed to pull the tokens.
        value: Allowance (transfer amount plus relayer fee).
        token_nonce: ``nonces(owner)`` on the token, serialized as ``nonce``.
        deadline: Unix timestamp after which the permit is invalid.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    token: str = Field(..., description="ERC-20 token contract address")
    owner: str = Field(..., description="Token owner's wallet address")
    spender: str = Field(..., description="Authorized spender (relayer contract)")
    value: DecimalStr = Field(..., description="Approved amount in the token's smallest unit")
    token_nonce: DecimalStr = Field(..., alias="nonce", description="Token contract nonce for owner")
    deadline: DecimalStr = Field(..., description="Unix timestamp after which the permit expires")

    @field_validator("token", "owner", "spender")
    @classmethod
    def _check_address(cls, value: str) -> str:
        return _checksum(value)

    def to_message(self) -> PermitMessage:
        return PermitMessage(
            owner=self.owner,
            spender=self.spender,
            value=self.value,
            nonce=self.token_nonce,
            deadline=self.deadline,
        )


class MetaTransfer(CanonicalModel):
    """
    Relayer ``MetaTransfer`` authorization.

    Dumped with aliases it is exactly the relayer's ``metaTx`` object:
    ``{owner, token, recipient, amount, fee, nonce, deadline}`` with the
    numeric fields as decimal strings.

    Attributes:
        owner: Token holder authorizing the transfer.
        token: ERC-20 token contract.
        recipient: Receiver of ``amount``.
        amount: Tokens delivered to the recipient.
        fee: Tokens paid to the relayer (defaults to zero).
        relayer_nonce: ``getNonce(owner)`` on the relayer, serialized as ``nonce``.
        deadline: Unix timestamp after which the authorization is invalid.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    owner: str = Field(..., description="Token owner's wallet address")
    token: str = Field(..., description="ERC-20 token contract address")
    recipient: str = Field(..., description="Transfer recipient")
    amount: DecimalStr = Field(..., description="Transfer amount in the token's smallest unit")
    fee: DecimalStr = Field(default=0, description="Relayer fee in the token's smallest unit")
    relayer_nonce: DecimalStr = Field(..., alias="nonce", description="Relayer contract nonce for owner")
    deadline: DecimalStr = Field(..., description="Unix timestamp after which the transfer expires")

    @field_validator("owner", "token", "recipient")
    @classmethod
    def _check_address(cls, value: str) -> str:
        return _checksum(value)

    @property
    def total_value(self) -> int:
        """Amount plus fee: what the permit must allow the relayer to pull."""
        return self.amount + self.fee

    def to_message(self) -> MetaTransferMessage:
        return MetaTransferMessage(
            owner=self.owner,
            token=self.token,
            recipient=self.recipient,
            amount=self.amount,
            fee=self.fee,
            nonce=self.relayer_nonce,
            deadline=self.deadline,
        )


# ---------------------------------------------------------------------------
# Reads and results
# ---------------------------------------------------------------------------

class TokenInfo(CanonicalModel):
    """Token metadata plus the relayer's whitelist flag for it."""

    address: str = Field(..., description="Token contract address")
    name: str = Field(..., description="Token name as reported by name()")
    symbol: str = Field(..., description="Token symbol")
    decimals: int = Field(..., ge=0, le=255, description="Token decimals")
    is_whitelisted: bool = Field(default=False, alias="isWhitelisted", description="Accepted by the relayer contract")


class ContractLimits(CanonicalModel):
    """Per-transfer limits enforced by the relayer contract."""

    max_transfer_amount: DecimalStr = Field(..., alias="maxTransferAmount")
    max_fee_amount: DecimalStr = Field(..., alias="maxFeeAmount")


class TransactionResult(CanonicalModel):
    """
    Outcome reported by the relayer service for a submitted transfer.

    Attributes:
        hash: On-chain transaction hash.
        success: Relayer's success flag.
        gas_used: Gas consumed, when reported.
        meta_tx_hash: Relayer-side hash of the meta transaction, when reported.
    """

    hash: str = Field(..., description="Transaction hash")
    success: bool = Field(..., description="Whether the relayer executed the transfer")
    gas_used: Optional[int] = Field(default=None, alias="gasUsed")
    meta_tx_hash: Optional[str] = Field(default=None, alias="metaTxHash")


class GaslessTransferParams(CanonicalModel):
    """
    Caller input for ``GaslessClient.transfer_gasless``.

    Attributes:
        token: ERC-20 token contract.
        to: Recipient address.
        amount: Amount in the token's smallest unit.
        fee: Optional relayer fee, zero when omitted.
        deadline: Optional unix deadline; ``now + default_deadline_seconds`` when omitted.
    """

    token: str
    to: str
    amount: int
    fee: int = 0
    deadline: Optional[int] = None
