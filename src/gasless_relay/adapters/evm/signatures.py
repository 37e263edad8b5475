"""
EVM Signature Codec

Lossless conversion between a 65-byte ECDSA signature and its (v, r, s)
components, plus local signer recovery.

Layout
------
    bytes [0, 32)   r
    bytes [32, 64)  s
    byte  64        v

Convention
----------
Contracts recover with v in {27, 28}. Some signers return a bare recovery id
(0 or 1); ``normalize_v`` / ``normalize_signature`` add 27 to those. Decoding
never normalizes, so ``encode_signature(decode_signature(x)) == x`` holds for
every 65-byte ``x``.

Exported helpers
----------------
to_signature_bytes
    Accept bytes or hex (with or without ``0x``) and enforce the 65-byte length.
decode_signature / encode_signature / signature_to_hex
    Split and join the three components.
normalize_v / normalize_signature
    Map recovery ids 0/1 to 27/28.
recover_signer
    Recover the checksum address that signed a raw 32-byte digest.
"""

from typing import Union

from eth_account import Account
from eth_utils import to_checksum_address
from hexbytes import HexBytes

from ...engine.exceptions import InvalidSignatureLength, SignatureError
from .schemas import SignatureData

SIGNATURE_LENGTH = 65
SIGNATURE_HEX_LENGTH = 2 * SIGNATURE_LENGTH

SignatureLike = Union[bytes, bytearray, str]


def to_signature_bytes(signature: SignatureLike) -> bytes:
    """
    Convert a signature to raw bytes and enforce its length.

    Args:
        signature: 65 raw bytes, or 130 hex chars optionally prefixed with ``0x``.

    Returns:
        The 65 signature bytes.

    Raises:
        InvalidSignatureLength: If the input is not exactly 65 bytes long.
        SignatureError: If a string input is not valid hex.
    """
    if isinstance(signature, str):
        hex_str = signature[2:] if signature.startswith(("0x", "0X")) else signature
        if len(hex_str) != SIGNATURE_HEX_LENGTH:
            raise InvalidSignatureLength(
                f"Invalid signature length: expected {SIGNATURE_HEX_LENGTH} hex chars, got {len(hex_str)}"
            )
        try:
            raw = bytes.fromhex(hex_str)
        except ValueError as e:
            raise SignatureError(f"Signature is not valid hex: {e}") from e
    else:
        raw = bytes(signature)

    # bytes.fromhex skips whitespace, so the decoded length is checked too
    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidSignatureLength(
            f"Invalid signature length: expected {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )
    return raw


def decode_signature(signature: SignatureLike) -> SignatureData:
    """
    Split a 65-byte signature into (v, r, s).

    ``v`` is returned exactly as stored in byte 64.

    Raises:
        InvalidSignatureLength: If the input is not 65 bytes.

    Example::

        sig = decode_signature("0x" + "11" * 32 + "22" * 32 + "1b")
        sig.v  # 27
    """
    raw = to_signature_bytes(signature)
    return SignatureData(
        v=raw[64],
        r="0x" + raw[0:32].hex(),
        s="0x" + raw[32:64].hex(),
    )


def encode_signature(signature: SignatureData) -> bytes:
    """Join (v, r, s) back into 65 bytes: ``r || s || v``."""
    return (
        bytes.fromhex(signature.r[2:])
        + bytes.fromhex(signature.s[2:])
        + bytes([signature.v])
    )


def signature_to_hex(signature: Union[SignatureData, SignatureLike]) -> str:
    """Return the 0x-prefixed, 132-character hex form of a signature."""
    if isinstance(signature, SignatureData):
        raw = encode_signature(signature)
    else:
        raw = to_signature_bytes(signature)
    return "0x" + raw.hex()


def normalize_v(v: int) -> int:
    """
    Map a recovery id to the 27/28 convention.

    Raises:
        SignatureError: If ``v`` is neither 0/1 nor 27/28.
    """
    if v in (0, 1):
        return v + 27
    if v in (27, 28):
        return v
    raise SignatureError(f"Unsupported recovery id v={v}; expected 0, 1, 27 or 28")


def normalize_signature(signature: SignatureLike) -> bytes:
    """Return the 65 signature bytes with ``v`` normalized to 27/28."""
    raw = to_signature_bytes(signature)
    return raw[:64] + bytes([normalize_v(raw[64])])


def recover_signer(digest: bytes, signature: Union[SignatureData, SignatureLike]) -> str:
    """
    Recover the address that signed a raw 32-byte digest.

    The digest is used as-is (no EIP-191 prefix), which is how the relayer
    and token contracts verify EIP-712 signatures.

    Args:
        digest: 32-byte message hash, typically an EIP-712 final hash.
        signature: Signature as bytes, hex, or ``SignatureData``.

    Returns:
        Checksummed signer address.

    Raises:
        ValueError: If ``digest`` is not 32 bytes.
        InvalidSignatureLength / SignatureError: For malformed signatures.
    """
    if len(digest) != 32:
        raise ValueError(f"digest must be 32 bytes, got {len(digest)}")
    if isinstance(signature, SignatureData):
        signature = encode_signature(signature)
    raw = normalize_signature(signature)
    # Private eth-account API (no public raw-digest recovery); the eth-account
    # requirement is bounded to <1 in pyproject.toml for it.
    try:
        recovered = Account._recover_hash(digest, signature=HexBytes(raw))
    except Exception as e:
        raise SignatureError(f"Failed to recover signer: {e}") from e
    return to_checksum_address(recovered)
