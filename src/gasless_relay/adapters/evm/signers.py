"""
Signer Capability

The toolkit never holds key material itself. Builders and the orchestrator
depend only on ``BaseSigner``, which any key-management backend (local key,
hardware wallet, remote signer, MPC service) can implement.

Core Classes:
    - BaseSigner: Abstract signing capability
    - LocalAccountSigner: In-process implementation backed by ``eth_account``

All signatures are returned as 65 raw bytes (``r || s || v``). Callers
normalize ``v`` themselves, so implementations may return 0/1 or 27/28.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from eth_account import Account
from eth_account.messages import encode_defunct

from ...engine.exceptions import SignerUnavailable, SignatureError
from .constants import get_private_key_from_env
from .standards import EIP712_DOMAIN_FIELDS


class BaseSigner(ABC):
    """
    Abstract Base Class for signing backends.

    Key Responsibilities:
    1. address: Expose the checksummed address that signatures recover to
    2. sign_digest: Sign a raw 32-byte digest with no prefix
    3. sign_typed_data: Sign EIP-712 typed data, deriving the digest itself
    4. sign_message: EIP-191 personal-sign of a text message

    Example Implementation:
        class LedgerSigner(BaseSigner):
            # Hardware-wallet backed implementation
            pass
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed address of the signing key."""
        pass

    @abstractmethod
    async def sign_digest(self, digest: bytes) -> bytes:
        """
        Sign a 32-byte digest as-is.

        Args:
            digest: Final EIP-712 hash (or any 32-byte message hash).

        Returns:
            65-byte signature.
        """
        pass

    @abstractmethod
    async def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: Dict[str, List[Dict[str, str]]],
        message: Dict[str, Any],
    ) -> bytes:
        """
        Sign EIP-712 typed data.

        Implementations derive the digest from ``types`` in declared field
        order. The primary type is the one struct in ``types`` (besides
        ``EIP712Domain``) that no other struct references.

        Args:
            domain: ``{name, version, chainId, verifyingContract}``.
            types: Struct definitions; ``EIP712Domain`` may be included.
            message: Field values of the primary struct.

        Returns:
            65-byte signature.
        """
        pass

    @abstractmethod
    async def sign_message(self, text: str) -> bytes:
        """
        Personal-sign (EIP-191 version ``0x45``) a UTF-8 text message.

        Returns:
            65-byte signature.
        """
        pass


def primary_type_of(types: Dict[str, List[Dict[str, str]]]) -> str:
    """
    Find the primary struct of an EIP-712 ``types`` mapping.

    Raises:
        SignatureError: If zero or several candidates remain.
    """
    structs = {name for name in types if name != "EIP712Domain"}
    referenced = {
        field["type"].rstrip("[]")
        for name in structs
        for field in types[name]
    }
    candidates = sorted(structs - referenced)
    if len(candidates) != 1:
        raise SignatureError(f"Unable to determine primary type from {sorted(structs)}")
    return candidates[0]


class LocalAccountSigner(BaseSigner):
    """
    In-process signer backed by an ``eth_account`` local account.

    Usage:
        signer = LocalAccountSigner("0x" + "11" * 32)
        signature = await signer.sign_digest(digest)
    """

    def __init__(self, private_key: str):
        if not private_key:
            raise SignerUnavailable("Private key required for signing")
        try:
            self._account = Account.from_key(private_key)
        except Exception as e:
            raise SignerUnavailable(f"Invalid private key: {e}") from e

    @classmethod
    def from_env(cls) -> "LocalAccountSigner":
        """
        Build a signer from the ``EVM_PRIVATE_KEY`` environment variable.

        Raises:
            SignerUnavailable: If the variable is unset or empty.
        """
        private_key: Optional[str] = get_private_key_from_env()
        if not private_key:
            raise SignerUnavailable("EVM_PRIVATE_KEY is not set")
        return cls(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_digest(self, digest: bytes) -> bytes:
        if len(digest) != 32:
            raise SignatureError(f"digest must be 32 bytes, got {len(digest)}")
        signed = self._account.unsafe_sign_hash(digest)
        return bytes(signed.signature)

    async def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: Dict[str, List[Dict[str, str]]],
        message: Dict[str, Any],
    ) -> bytes:
        full_types = dict(types)
        full_types.setdefault("EIP712Domain", list(EIP712_DOMAIN_FIELDS))
        full_message = {
            "types": full_types,
            "primaryType": primary_type_of(full_types),
            "domain": domain,
            "message": message,
        }
        signed = self._account.sign_typed_data(full_message=full_message)
        return bytes(signed.signature)

    async def sign_message(self, text: str) -> bytes:
        signed = self._account.sign_message(encode_defunct(text=text))
        return bytes(signed.signature)

    def __repr__(self) -> str:
        return f"LocalAccountSigner(address={self.address})"
