"""
EIP-712 Typed-Data Hasher

Computes the digests a wallet signs and the verifying contract rebuilds:

    domain_separator(domain)            keccak256(abi.encode(DOMAIN_TYPEHASH, keccak(name), keccak(version), chainId, verifyingContract))
    struct_hash(type_hash, fields)      keccak256(abi.encode(type_hash, field1, field2, ...))
    final_hash(domain_sep, struct_hash) keccak256(0x19 || 0x01 || domain_sep || struct_hash)

Every field goes through ``eth_abi.encode`` so addresses are left-padded
32-byte words and integers are 32-byte big-endian words, exactly as the
contract's ``abi.encode`` produces them.

Type strings are module constants; their hashes are computed once at import
and checked against known vectors by ``verify_type_hashes()``. A changed
character in a type string therefore fails at import instead of producing
signatures that recover to the wrong address.

No function here performs I/O.
"""

from typing import Any, Dict, Sequence, Tuple

from eth_abi import encode
from eth_utils import keccak, to_checksum_address

from ...engine.exceptions import ConfigurationError
from .standards import EIP712Domain
from .schemas import Permit, MetaTransfer

# ---------------------------------------------------------------------------
# Type strings and type hashes
# ---------------------------------------------------------------------------

EIP712_DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
PERMIT_TYPE = "Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)"
META_TRANSFER_TYPE = (
    "MetaTransfer(address owner,address token,address recipient,"
    "uint256 amount,uint256 fee,uint256 nonce,uint256 deadline)"
)

DOMAIN_TYPEHASH: bytes = keccak(text=EIP712_DOMAIN_TYPE)
PERMIT_TYPEHASH: bytes = keccak(text=PERMIT_TYPE)
META_TRANSFER_TYPEHASH: bytes = keccak(text=META_TRANSFER_TYPE)

#: Known-good vectors for the type hashes above.
KNOWN_TYPEHASHES: Dict[str, str] = {
    EIP712_DOMAIN_TYPE: "8b73c3c69bb8fe3d512ecc4cf759cc79239f7b179b0ffacaa9a75d522b39400f",
    PERMIT_TYPE: "6e71edae12b1b97f4d1f60370fef10105fa2faae0126114a169c64845d6126c9",
    META_TRANSFER_TYPE: "8b436c7775e2274289e4f861bfaf6077769278390db8f179a143d7401bc40b6c",
}

EIP712_PREFIX = b"\x19\x01"


def verify_type_hashes() -> None:
    """
    Check the module's type hashes against ``KNOWN_TYPEHASHES``.

    Runs once at import.

    Raises:
        ConfigurationError: If any computed type hash differs from its vector.
    """
    computed = {
        EIP712_DOMAIN_TYPE: DOMAIN_TYPEHASH,
        PERMIT_TYPE: PERMIT_TYPEHASH,
        META_TRANSFER_TYPE: META_TRANSFER_TYPEHASH,
    }
    for type_string, type_hash in computed.items():
        expected = KNOWN_TYPEHASHES[type_string]
        if type_hash.hex() != expected:
            raise ConfigurationError(
                f"Type hash self-check failed for {type_string!r}: "
                f"computed 0x{type_hash.hex()}, expected 0x{expected}"
            )


verify_type_hashes()


# ---------------------------------------------------------------------------
# Core hashing
# ---------------------------------------------------------------------------

def domain_separator(domain: EIP712Domain) -> bytes:
    """
    Compute the EIP-712 domain separator.

    Args:
        domain: Domain whose ``name`` and ``version`` are the exact strings the
                verifying contract uses (read them from chain where possible).

    Returns:
        32-byte domain separator.

    Example::

        sep = domain_separator(EIP712Domain("GaslessRelayer", "1", 5003, relayer))
    """
    return keccak(
        encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [
                DOMAIN_TYPEHASH,
                keccak(text=domain.name),
                keccak(text=domain.version),
                domain.chainId,
                to_checksum_address(domain.verifyingContract),
            ],
        )
    )


def struct_hash(type_hash: bytes, ordered_fields: Sequence[Tuple[str, Any]]) -> bytes:
    """
    Compute ``keccak256(abi.encode(type_hash, field1, field2, ...))``.

    Args:
        type_hash: 32-byte type hash of the struct.
        ordered_fields: ``(abi_type, value)`` pairs in struct declaration order,
                        e.g. ``[("address", owner), ("uint256", value)]``.

    Returns:
        32-byte struct hash.

    Raises:
        ValueError: If ``type_hash`` is not 32 bytes.
    """
    if len(type_hash) != 32:
        raise ValueError(f"type_hash must be 32 bytes, got {len(type_hash)}")
    abi_types = ["bytes32"] + [abi_type for abi_type, _ in ordered_fields]
    values = [type_hash] + [value for _, value in ordered_fields]
    return keccak(encode(abi_types, values))


def final_hash(domain_sep: bytes, struct_digest: bytes) -> bytes:
    """
    Combine domain separator and struct hash into the signed digest.

    Returns:
        ``keccak256(0x19 || 0x01 || domain_sep || struct_digest)``.

    Raises:
        ValueError: If either input is not 32 bytes.
    """
    if len(domain_sep) != 32 or len(struct_digest) != 32:
        raise ValueError("domain separator and struct hash must both be 32 bytes")
    return keccak(EIP712_PREFIX + domain_sep + struct_digest)


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------

def permit_struct_hash(permit: Permit) -> bytes:
    return struct_hash(
        PERMIT_TYPEHASH,
        [
            ("address", permit.owner),
            ("address", permit.spender),
            ("uint256", permit.value),
            ("uint256", permit.token_nonce),
            ("uint256", permit.deadline),
        ],
    )


def meta_transfer_struct_hash(meta_transfer: MetaTransfer) -> bytes:
    return struct_hash(
        META_TRANSFER_TYPEHASH,
        [
            ("address", meta_transfer.owner),
            ("address", meta_transfer.token),
            ("address", meta_transfer.recipient),
            ("uint256", meta_transfer.amount),
            ("uint256", meta_transfer.fee),
            ("uint256", meta_transfer.relayer_nonce),
            ("uint256", meta_transfer.deadline),
        ],
    )


def hash_permit(permit: Permit, domain: EIP712Domain) -> bytes:
    """Digest the token contract checks in ``permit()``."""
    return final_hash(domain_separator(domain), permit_struct_hash(permit))


def hash_meta_transfer(meta_transfer: MetaTransfer, domain: EIP712Domain) -> bytes:
    """Digest the relayer contract checks in ``executeMetaTransfer()``."""
    return final_hash(domain_separator(domain), meta_transfer_struct_hash(meta_transfer))
