"""
Meta-Transfer Builder

Assembles and signs the relayer contract's ``MetaTransfer`` authorization.

The nonce comes from the relayer contract's ``getNonce(owner)``, never from
the token, and the EIP-712 domain is the relayer contract's own
(``"GaslessRelayer"`` / ``"1"`` by default), never the token's.
"""

import time
from typing import Optional

from ...engine.exceptions import SignatureVerificationError
from ...utils import logger
from .constants import DEFAULT_DEADLINE_SECONDS, RELAYER_DOMAIN_NAME, RELAYER_DOMAIN_VERSION
from .eip712 import hash_meta_transfer
from .readers import ChainReader
from .schemas import MetaTransfer
from .signatures import normalize_signature, recover_signer, signature_to_hex
from .signers import BaseSigner
from .standards import EIP712Domain, MetaTransferTypedData


class MetaTransferBuilder:
    """
    Build and sign MetaTransfer authorizations for one relayer contract.

    Usage:
        builder = MetaTransferBuilder(reader, chain_id=5003, relayer_address=relayer)
        meta_transfer = await builder.build(owner, token, recipient, amount)
        signature = await builder.sign(meta_transfer, signer)
    """

    def __init__(
        self,
        reader: ChainReader,
        chain_id: int,
        relayer_address: str,
        domain_name: str = RELAYER_DOMAIN_NAME,
        domain_version: str = RELAYER_DOMAIN_VERSION,
        default_deadline_seconds: int = DEFAULT_DEADLINE_SECONDS,
    ):
        self._reader = reader
        self.chain_id = chain_id
        self.relayer_address = relayer_address
        self.domain_name = domain_name
        self.domain_version = domain_version
        self.default_deadline_seconds = default_deadline_seconds

    def domain(self) -> EIP712Domain:
        return EIP712Domain(
            name=self.domain_name,
            version=self.domain_version,
            chainId=self.chain_id,
            verifyingContract=self.relayer_address,
        )

    async def build(
        self,
        owner: str,
        token: str,
        recipient: str,
        amount: int,
        fee: int = 0,
        deadline: Optional[int] = None,
    ) -> MetaTransfer:
        """
        Assemble a MetaTransfer with the relayer's current nonce for ``owner``.

        Args:
            deadline: Unix timestamp; ``now + default_deadline_seconds`` when omitted.

        Raises:
            BlockchainInteractionError: If the nonce cannot be read.
        """
        if deadline is None:
            deadline = int(time.time()) + self.default_deadline_seconds
        relayer_nonce = await self._reader.relayer_nonce(owner)
        return MetaTransfer(
            owner=owner,
            token=token,
            recipient=recipient,
            amount=amount,
            fee=fee,
            relayer_nonce=relayer_nonce,
            deadline=deadline,
        )

    async def sign(
        self,
        meta_transfer: MetaTransfer,
        signer: BaseSigner,
        domain: Optional[EIP712Domain] = None,
    ) -> str:
        """
        Sign ``meta_transfer`` with the signer's typed-data capability.

        The typed data declares fields in the contract's struct order, so a
        signer that re-derives the digest arrives at the same hash as
        ``hash_meta_transfer``. The result is checked by recovering it
        against that hash.

        Returns:
            0x-prefixed 65-byte signature with v in {27, 28}.

        Raises:
            SignatureVerificationError: If the signature does not recover to
                                        ``meta_transfer.owner``.
        """
        domain = domain or self.domain()
        typed_data = MetaTransferTypedData(domain=domain, message=meta_transfer.to_message())
        payload = typed_data.to_dict()
        raw = await signer.sign_typed_data(payload["domain"], payload["types"], payload["message"])
        signature = normalize_signature(raw)

        digest = hash_meta_transfer(meta_transfer, domain)
        recovered = recover_signer(digest, signature)
        if recovered != meta_transfer.owner:
            raise SignatureVerificationError(
                f"MetaTransfer signature recovers to {recovered}, expected {meta_transfer.owner}",
                expected=meta_transfer.owner,
                recovered=recovered,
            )

        logger.debug(f"signed meta transfer for {meta_transfer.owner} (relayer nonce {meta_transfer.relayer_nonce})")
        return signature_to_hex(signature)
