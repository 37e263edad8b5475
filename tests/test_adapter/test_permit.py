"""
Permit Builder Test Suite

Tests building, domain resolution and signing of ERC-2612 permits against a
mock chain.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from test_mocks import (
    MOCK_AMOUNT_1_TOKEN,
    MOCK_CHAIN_ID,
    MOCK_DEADLINE_FUTURE,
    MOCK_OTHER_PRIVATE_KEY,
    MOCK_OWNER_ADDRESS,
    MOCK_OWNER_PRIVATE_KEY,
    MOCK_RELAYER_ADDRESS,
    MOCK_TOKEN_ADDRESS,
    MOCK_TOKEN_NAME,
    MockChainState,
    MockWeb3Provider,
    create_token_domain,
)

from gasless_relay.adapters.evm.eip712 import hash_permit
from gasless_relay.adapters.evm.permit import PermitBuilder
from gasless_relay.adapters.evm.readers import ChainReader
from gasless_relay.adapters.evm.signatures import encode_signature, recover_signer
from gasless_relay.adapters.evm.schemas import SignatureData
from gasless_relay.adapters.evm.signers import LocalAccountSigner
from gasless_relay.adapters.evm.verifies import verify_permit_signature
from gasless_relay.engine.exceptions import SignatureVerificationError


@pytest.fixture
def chain_state():
    return MockChainState(token_nonces={MOCK_OWNER_ADDRESS: 3})


@pytest.fixture
def builder(chain_state):
    reader = ChainReader(MockWeb3Provider(chain_state), MOCK_RELAYER_ADDRESS)
    return PermitBuilder(reader, MOCK_CHAIN_ID)


@pytest.fixture
def signer():
    return LocalAccountSigner(MOCK_OWNER_PRIVATE_KEY)


class TestPermitBuild:
    """Test permit assembly."""

    @pytest.mark.asyncio
    async def test_reads_token_nonce(self, builder):
        permit = await builder.build(
            MOCK_TOKEN_ADDRESS, MOCK_OWNER_ADDRESS, MOCK_RELAYER_ADDRESS, MOCK_AMOUNT_1_TOKEN, MOCK_DEADLINE_FUTURE
        )
        assert permit.token_nonce == 3
        assert permit.spender == MOCK_RELAYER_ADDRESS
        assert permit.value == MOCK_AMOUNT_1_TOKEN
        assert permit.deadline == MOCK_DEADLINE_FUTURE

    @pytest.mark.asyncio
    async def test_permit_is_immutable(self, builder):
        permit = await builder.build(
            MOCK_TOKEN_ADDRESS, MOCK_OWNER_ADDRESS, MOCK_RELAYER_ADDRESS, MOCK_AMOUNT_1_TOKEN, MOCK_DEADLINE_FUTURE
        )
        with pytest.raises(Exception):
            permit.token_nonce = 4

    @pytest.mark.asyncio
    async def test_wire_form_uses_nonce_key_and_decimal_strings(self, builder):
        permit = await builder.build(
            MOCK_TOKEN_ADDRESS, MOCK_OWNER_ADDRESS, MOCK_RELAYER_ADDRESS, MOCK_AMOUNT_1_TOKEN, MOCK_DEADLINE_FUTURE
        )
        wire = permit.model_dump(mode="json", by_alias=True)
        assert wire["nonce"] == "3"
        assert wire["value"] == str(MOCK_AMOUNT_1_TOKEN)
        assert "token_nonce" not in wire


class TestPermitDomain:
    """Test token domain resolution."""

    def test_create_domain(self):
        domain = PermitBuilder.create_domain(MOCK_TOKEN_ADDRESS, MOCK_CHAIN_ID, MOCK_TOKEN_NAME)
        assert domain == create_token_domain()

    @pytest.mark.asyncio
    async def test_domain_reads_name_and_version(self, chain_state, builder):
        chain_state.token_version = "2"
        domain = await builder.domain(MOCK_TOKEN_ADDRESS)
        assert domain.name == MOCK_TOKEN_NAME
        assert domain.version == "2"
        assert domain.chainId == MOCK_CHAIN_ID
        assert domain.verifyingContract == MOCK_TOKEN_ADDRESS

    @pytest.mark.asyncio
    async def test_supplied_values_skip_reads(self, chain_state):
        web3 = MockWeb3Provider(chain_state)
        builder = PermitBuilder(ChainReader(web3, MOCK_RELAYER_ADDRESS), MOCK_CHAIN_ID)
        domain = await builder.domain(MOCK_TOKEN_ADDRESS, name="Given", version="7")
        assert (domain.name, domain.version) == ("Given", "7")
        assert web3.eth.contract.call_count == 0


class TestPermitSign:
    """Test permit signing and the recovery cross-check."""

    @pytest.mark.asyncio
    async def test_sign_produces_verifiable_permit_data(self, builder, signer):
        permit = await builder.build(
            MOCK_TOKEN_ADDRESS, MOCK_OWNER_ADDRESS, MOCK_RELAYER_ADDRESS, MOCK_AMOUNT_1_TOKEN, MOCK_DEADLINE_FUTURE
        )
        domain = create_token_domain()
        permit_data = await builder.sign(permit, domain, signer)

        assert permit_data.v in (27, 28)
        assert permit_data.value == permit.value
        assert permit_data.deadline == permit.deadline

        raw = encode_signature(SignatureData(v=permit_data.v, r=permit_data.r, s=permit_data.s))
        assert recover_signer(hash_permit(permit, domain), raw) == MOCK_OWNER_ADDRESS
        assert await verify_permit_signature(permit, domain, permit_data)

    @pytest.mark.asyncio
    async def test_signature_bound_to_version(self, builder, signer):
        permit = await builder.build(
            MOCK_TOKEN_ADDRESS, MOCK_OWNER_ADDRESS, MOCK_RELAYER_ADDRESS, MOCK_AMOUNT_1_TOKEN, MOCK_DEADLINE_FUTURE
        )
        permit_data = await builder.sign(permit, create_token_domain("1"), signer)
        assert not await verify_permit_signature(permit, create_token_domain("2"), permit_data)

    @pytest.mark.asyncio
    async def test_signer_with_wrong_key_is_rejected(self, builder):
        permit = await builder.build(
            MOCK_TOKEN_ADDRESS, MOCK_OWNER_ADDRESS, MOCK_RELAYER_ADDRESS, MOCK_AMOUNT_1_TOKEN, MOCK_DEADLINE_FUTURE
        )
        with pytest.raises(SignatureVerificationError) as exc_info:
            await builder.sign(permit, create_token_domain(), LocalAccountSigner(MOCK_OTHER_PRIVATE_KEY))
        assert exc_info.value.expected == MOCK_OWNER_ADDRESS

    @pytest.mark.asyncio
    async def test_bare_recovery_id_is_normalized(self, builder):
        """A signer returning v in {0, 1} still yields v in {27, 28}."""
        permit = await builder.build(
            MOCK_TOKEN_ADDRESS, MOCK_OWNER_ADDRESS, MOCK_RELAYER_ADDRESS, MOCK_AMOUNT_1_TOKEN, MOCK_DEADLINE_FUTURE
        )
        domain = create_token_domain()
        real = LocalAccountSigner(MOCK_OWNER_PRIVATE_KEY)
        raw = await real.sign_digest(hash_permit(permit, domain))

        bare_signer = Mock()
        bare_signer.sign_typed_data = AsyncMock(return_value=raw[:64] + bytes([raw[64] - 27]))

        permit_data = await builder.sign(permit, domain, bare_signer)
        assert permit_data.v == raw[64]
