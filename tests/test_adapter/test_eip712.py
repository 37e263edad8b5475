"""
EIP-712 Hashing Test Suite

Checks the typed-data hasher against literal vectors, including the
field-order regression where ``deadline`` was declared before ``nonce``.

Usage:
    pytest tests/test_adapter/test_eip712.py -v
"""

import pytest
from eth_utils import keccak

from test_mocks import (
    MOCK_CHAIN_ID,
    MOCK_FIXED_DEADLINE,
    MOCK_OWNER_ADDRESS,
    MOCK_OWNER_PRIVATE_KEY,
    MOCK_RECIPIENT_ADDRESS,
    MOCK_RELAYER_ADDRESS,
    MOCK_TOKEN_ADDRESS,
    MOCK_VECTOR_OWNER,
    VECTOR_META_TRANSFER_FINAL_HASH,
    VECTOR_META_TRANSFER_STRUCT_HASH,
    VECTOR_PERMIT_FINAL_HASH,
    VECTOR_PERMIT_STRUCT_HASH,
    VECTOR_RELAYER_DOMAIN_SEPARATOR,
    VECTOR_RELAYER_DOMAIN_SEPARATOR_V2,
    VECTOR_TOKEN_DOMAIN_SEPARATOR,
    VECTOR_WRONG_ORDER_FINAL_HASH,
    VECTOR_WRONG_ORDER_TYPEHASH,
    create_relayer_domain,
    create_token_domain,
)

from gasless_relay.adapters.evm.eip712 import (
    DOMAIN_TYPEHASH,
    META_TRANSFER_TYPEHASH,
    PERMIT_TYPEHASH,
    domain_separator,
    final_hash,
    hash_meta_transfer,
    hash_permit,
    meta_transfer_struct_hash,
    permit_struct_hash,
    struct_hash,
    verify_type_hashes,
)
from gasless_relay.adapters.evm.schemas import MetaTransfer, Permit
from gasless_relay.adapters.evm.signatures import recover_signer
from gasless_relay.adapters.evm.signers import LocalAccountSigner
from gasless_relay.adapters.evm.standards import EIP712Domain, MetaTransferTypedData


def _hex(digest: bytes) -> str:
    return "0x" + digest.hex()


@pytest.fixture
def vector_meta_transfer():
    """MetaTransfer used by the literal vectors."""
    return MetaTransfer(
        owner=MOCK_VECTOR_OWNER,
        token=MOCK_TOKEN_ADDRESS,
        recipient=MOCK_RECIPIENT_ADDRESS,
        amount=1_000_000,
        fee=0,
        relayer_nonce=0,
        deadline=MOCK_FIXED_DEADLINE,
    )


@pytest.fixture
def vector_permit():
    """Permit used by the literal vectors."""
    return Permit(
        token=MOCK_TOKEN_ADDRESS,
        owner=MOCK_VECTOR_OWNER,
        spender=MOCK_RELAYER_ADDRESS,
        value=1_000_000,
        token_nonce=0,
        deadline=MOCK_FIXED_DEADLINE,
    )


class TestTypeHashes:
    """Test type-hash constants."""

    def test_domain_typehash(self):
        assert _hex(DOMAIN_TYPEHASH) == "0x8b73c3c69bb8fe3d512ecc4cf759cc79239f7b179b0ffacaa9a75d522b39400f"

    def test_permit_typehash(self):
        assert _hex(PERMIT_TYPEHASH) == "0x6e71edae12b1b97f4d1f60370fef10105fa2faae0126114a169c64845d6126c9"

    def test_meta_transfer_typehash(self):
        assert _hex(META_TRANSFER_TYPEHASH) == "0x8b436c7775e2274289e4f861bfaf6077769278390db8f179a143d7401bc40b6c"

    def test_self_check_passes(self):
        """The import-time self-check succeeds when run again."""
        verify_type_hashes()


class TestDomainSeparator:
    """Test domain separator computation."""

    def test_relayer_domain_vector(self):
        assert _hex(domain_separator(create_relayer_domain())) == VECTOR_RELAYER_DOMAIN_SEPARATOR

    def test_token_domain_vector(self):
        assert _hex(domain_separator(create_token_domain())) == VECTOR_TOKEN_DOMAIN_SEPARATOR

    def test_deterministic(self):
        assert domain_separator(create_relayer_domain()) == domain_separator(create_relayer_domain())

    def test_version_changes_separator(self):
        """A token whose version is "2" must not hash like version "1"."""
        assert _hex(domain_separator(create_relayer_domain("2"))) == VECTOR_RELAYER_DOMAIN_SEPARATOR_V2

    @pytest.mark.parametrize("field_name,value", [
        ("name", "GaslessRelayer2"),
        ("version", "1.0"),
        ("chainId", 5000),
        ("verifyingContract", "0x" + "de" * 20),
    ])
    def test_any_field_changes_separator(self, field_name, value):
        base = create_relayer_domain()
        changed = EIP712Domain(**{**base.to_dict(), field_name: value})
        assert domain_separator(changed) != domain_separator(base)

    def test_lowercase_contract_address_hashes_the_same(self):
        lower = EIP712Domain("GaslessRelayer", "1", MOCK_CHAIN_ID, MOCK_RELAYER_ADDRESS.lower())
        assert _hex(domain_separator(lower)) == VECTOR_RELAYER_DOMAIN_SEPARATOR


class TestStructAndFinalHash:
    """Test struct hashes and the final EIP-712 digest."""

    def test_meta_transfer_struct_vector(self, vector_meta_transfer):
        assert _hex(meta_transfer_struct_hash(vector_meta_transfer)) == VECTOR_META_TRANSFER_STRUCT_HASH

    def test_meta_transfer_final_vector(self, vector_meta_transfer):
        digest = hash_meta_transfer(vector_meta_transfer, create_relayer_domain())
        assert _hex(digest) == VECTOR_META_TRANSFER_FINAL_HASH

    def test_permit_struct_vector(self, vector_permit):
        assert _hex(permit_struct_hash(vector_permit)) == VECTOR_PERMIT_STRUCT_HASH

    def test_permit_final_vector(self, vector_permit):
        assert _hex(hash_permit(vector_permit, create_token_domain())) == VECTOR_PERMIT_FINAL_HASH

    def test_generic_struct_hash_matches_helper(self, vector_meta_transfer):
        generic = struct_hash(META_TRANSFER_TYPEHASH, [
            ("address", MOCK_VECTOR_OWNER),
            ("address", MOCK_TOKEN_ADDRESS),
            ("address", MOCK_RECIPIENT_ADDRESS),
            ("uint256", 1_000_000),
            ("uint256", 0),
            ("uint256", 0),
            ("uint256", MOCK_FIXED_DEADLINE),
        ])
        assert generic == meta_transfer_struct_hash(vector_meta_transfer)

    def test_final_hash_layout(self):
        sep = b"\x01" * 32
        digest = b"\x02" * 32
        assert final_hash(sep, digest) == keccak(b"\x19\x01" + sep + digest)

    def test_final_hash_rejects_short_input(self):
        with pytest.raises(ValueError):
            final_hash(b"\x01" * 31, b"\x02" * 32)

    def test_struct_hash_rejects_short_typehash(self):
        with pytest.raises(ValueError):
            struct_hash(b"\x00" * 20, [("uint256", 1)])

    def test_fee_defaults_to_zero(self, vector_meta_transfer):
        without_fee = MetaTransfer(
            owner=MOCK_VECTOR_OWNER,
            token=MOCK_TOKEN_ADDRESS,
            recipient=MOCK_RECIPIENT_ADDRESS,
            amount=1_000_000,
            relayer_nonce=0,
            deadline=MOCK_FIXED_DEADLINE,
        )
        assert meta_transfer_struct_hash(without_fee) == meta_transfer_struct_hash(vector_meta_transfer)


class TestFieldOrderRegression:
    """Hashing with ``deadline`` declared before ``nonce`` must not match the contract."""

    def _wrong_order_digest(self) -> bytes:
        wrong_type = (
            "MetaTransfer(address owner,address token,address recipient,"
            "uint256 amount,uint256 fee,uint256 deadline,uint256 nonce)"
        )
        wrong_typehash = keccak(text=wrong_type)
        assert _hex(wrong_typehash) == VECTOR_WRONG_ORDER_TYPEHASH
        wrong_struct = struct_hash(wrong_typehash, [
            ("address", MOCK_VECTOR_OWNER),
            ("address", MOCK_TOKEN_ADDRESS),
            ("address", MOCK_RECIPIENT_ADDRESS),
            ("uint256", 1_000_000),
            ("uint256", 0),
            ("uint256", MOCK_FIXED_DEADLINE),
            ("uint256", 0),
        ])
        return final_hash(domain_separator(create_relayer_domain()), wrong_struct)

    def test_wrong_order_vector(self):
        digest = self._wrong_order_digest()
        assert _hex(digest) == VECTOR_WRONG_ORDER_FINAL_HASH
        assert _hex(digest) != VECTOR_META_TRANSFER_FINAL_HASH

    @pytest.mark.asyncio
    async def test_recovery_from_wrong_order_hash_fails(self, vector_meta_transfer):
        signer = LocalAccountSigner(MOCK_OWNER_PRIVATE_KEY)
        correct = hash_meta_transfer(vector_meta_transfer, create_relayer_domain())
        signature = await signer.sign_digest(correct)

        assert recover_signer(correct, signature) == MOCK_OWNER_ADDRESS
        assert recover_signer(self._wrong_order_digest(), signature) != MOCK_OWNER_ADDRESS


class TestSigningAgreement:
    """The local hash and the signer's typed-data path agree."""

    @pytest.mark.asyncio
    async def test_signature_over_vector_recovers(self, vector_meta_transfer):
        signer = LocalAccountSigner(MOCK_OWNER_PRIVATE_KEY)
        signature = await signer.sign_digest(bytes.fromhex(VECTOR_META_TRANSFER_FINAL_HASH[2:]))
        assert recover_signer(bytes.fromhex(VECTOR_META_TRANSFER_FINAL_HASH[2:]), signature) == MOCK_OWNER_ADDRESS

    @pytest.mark.asyncio
    async def test_sign_typed_data_equals_sign_digest(self, vector_meta_transfer):
        """Deterministic ECDSA: both paths sign the same digest, so the bytes match."""
        signer = LocalAccountSigner(MOCK_OWNER_PRIVATE_KEY)
        domain = create_relayer_domain()
        payload = MetaTransferTypedData(domain=domain, message=vector_meta_transfer.to_message()).to_dict()

        typed = await signer.sign_typed_data(payload["domain"], payload["types"], payload["message"])
        raw = await signer.sign_digest(hash_meta_transfer(vector_meta_transfer, domain))
        assert typed == raw
