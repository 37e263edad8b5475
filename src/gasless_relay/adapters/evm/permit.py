"""
ERC-2612 Permit Builder

Assembles and signs the token approval that lets the relayer contract pull
``amount + fee`` from the owner.

    build   -> Permit        (token nonce read live from ``nonces(owner)``)
    domain  -> EIP712Domain  (token name and version read live)
    sign    -> PermitData    (v normalized to 27/28, recovery cross-checked)

The builder holds no key material; signing goes through a ``BaseSigner``.
"""

from typing import Optional

from ...engine.exceptions import SignatureVerificationError
from ...utils import logger
from .constants import DEFAULT_PERMIT_VERSION
from .eip712 import hash_permit
from .readers import ChainReader
from .schemas import Permit, PermitData
from .signatures import decode_signature, normalize_signature, recover_signer
from .signers import BaseSigner
from .standards import EIP712Domain, PermitTypedData


class PermitBuilder:
    """
    Build and sign ERC-2612 permits for one chain.

    Usage:
        builder = PermitBuilder(reader, chain_id=5003)
        permit = await builder.build(token, owner, spender, value, deadline)
        domain = await builder.domain(token)
        permit_data = await builder.sign(permit, domain, signer)
    """

    def __init__(self, reader: ChainReader, chain_id: int):
        self._reader = reader
        self.chain_id = chain_id

    async def build(
        self,
        token: str,
        owner: str,
        spender: str,
        value: int,
        deadline: int,
    ) -> Permit:
        """
        Assemble a permit with the token's current nonce for ``owner``.

        Raises:
            BlockchainInteractionError: If the nonce cannot be read.
        """
        token_nonce = await self._reader.token_nonce(token, owner)
        return Permit(
            token=token,
            owner=owner,
            spender=spender,
            value=value,
            token_nonce=token_nonce,
            deadline=deadline,
        )

    @staticmethod
    def create_domain(
        token: str,
        chain_id: int,
        name: str,
        version: str = DEFAULT_PERMIT_VERSION,
    ) -> EIP712Domain:
        """Domain for a token whose name and version are already known."""
        return EIP712Domain(
            name=name,
            version=version,
            chainId=chain_id,
            verifyingContract=token,
        )

    async def domain(
        self,
        token: str,
        name: Optional[str] = None,
        version: Optional[str] = None,
    ) -> EIP712Domain:
        """
        Domain for ``token``, reading whatever is not supplied from chain.

        The version is never assumed: it comes from ``version()`` or
        ``eip712Domain()`` unless the caller passes one.
        """
        if name is None:
            name = await self._reader.token_name(token)
        if version is None:
            version = await self._reader.token_version(token)
        return self.create_domain(token, self.chain_id, name, version)

    async def sign(self, permit: Permit, domain: EIP712Domain, signer: BaseSigner) -> PermitData:
        """
        Sign ``permit`` and return it in ``executeMetaTransfer`` form.

        Raises:
            SignatureVerificationError: If the signature does not recover to
                                        ``permit.owner`` from the local hash.
        """
        typed_data = PermitTypedData(domain=domain, message=permit.to_message())
        payload = typed_data.to_dict()
        raw = await signer.sign_typed_data(payload["domain"], payload["types"], payload["message"])
        signature = normalize_signature(raw)

        digest = hash_permit(permit, domain)
        recovered = recover_signer(digest, signature)
        if recovered != permit.owner:
            raise SignatureVerificationError(
                f"Permit signature recovers to {recovered}, expected {permit.owner}",
                expected=permit.owner,
                recovered=recovered,
            )

        components = decode_signature(signature)
        logger.debug(f"signed permit for {permit.owner} (token nonce {permit.token_nonce})")
        return PermitData(
            value=permit.value,
            deadline=permit.deadline,
            v=components.v,
            r=components.r,
            s=components.s,
        )
