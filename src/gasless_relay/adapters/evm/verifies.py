"""
EVM Pre-Flight Verification Helpers

Local checks run before anything is sent to the relayer, so that a transfer
doomed to revert fails fast with a descriptive error instead.

Current coverage
----------------
validate_address / validate_amount / validate_chain_id
    Input validation raising ``TransferValidationError``.
is_gasless_transfer_valid / calculate_total_cost
    Compare a transfer against the relayer contract's limits.
is_deadline_expired
    ``deadline < now``.
verify_permit_signature / verify_meta_transfer_signature
    Rebuild the EIP-712 digest from the payload, recover the signer and
    compare with the owner. When a Web3 provider is supplied and recovery does
    not match, fall back to an ERC-1271 ``isValidSignature`` call so that
    smart-contract wallets are also supported.
"""

import time
from typing import Optional, Union

from eth_utils import is_address, to_checksum_address
from web3 import AsyncWeb3

from ...engine.exceptions import SignatureError, TransferValidationError
from ...utils import logger
from .eip712 import hash_meta_transfer, hash_permit
from .schemas import ContractLimits, MetaTransfer, Permit, PermitData, SignatureData
from .signatures import SignatureLike, encode_signature, recover_signer, to_signature_bytes
from .standards import EIP712Domain, ERC1271ABI

#: Magic value returned by a valid ERC-1271 ``isValidSignature`` call.
ERC1271_MAGIC_VALUE: bytes = b"\x16\x26\xba\x7e"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def validate_address(address: str, field_name: str = "address") -> str:
    """
    Check and checksum an EVM address.

    Raises:
        TransferValidationError: If ``address`` is malformed or the zero address.
    """
    if not isinstance(address, str) or not is_address(address):
        raise TransferValidationError(f"Invalid {field_name}: {address}")
    if address.lower() == ZERO_ADDRESS:
        raise TransferValidationError(f"Invalid {field_name}: zero address")
    return to_checksum_address(address)


def validate_amount(amount: int) -> None:
    if not isinstance(amount, int) or amount <= 0:
        raise TransferValidationError("Amount must be greater than 0")


def validate_chain_id(chain_id: int) -> None:
    if not isinstance(chain_id, int) or isinstance(chain_id, bool) or chain_id <= 0:
        raise TransferValidationError("Invalid chain ID")


def calculate_total_cost(amount: int, fee: int = 0) -> int:
    """Tokens leaving the owner's balance: amount plus relayer fee."""
    return amount + (fee or 0)


def is_gasless_transfer_valid(amount: int, fee: int, limits: ContractLimits) -> bool:
    """Whether ``amount`` and ``fee`` are within the relayer contract's limits."""
    if amount > limits.max_transfer_amount:
        return False
    if (fee or 0) > limits.max_fee_amount:
        return False
    return True


def is_deadline_expired(deadline: int, now: Optional[int] = None) -> bool:
    if now is None:
        now = int(time.time())
    return deadline < now


# ---------------------------------------------------------------------------
# Signature verification
# ---------------------------------------------------------------------------

async def _verify_digest(
    digest: bytes,
    signature: bytes,
    owner: str,
    w3: Optional[AsyncWeb3] = None,
) -> bool:
    """
    Verify ``signature`` over ``digest`` against ``owner``.

    Tries EOA ECDSA recovery first, then ERC-1271 when ``w3`` is given.
    """
    # ---- EOA: ECDSA recovery ----
    try:
        if recover_signer(digest, signature) == to_checksum_address(owner):
            return True
    except SignatureError as e:
        logger.debug(f"ECDSA recovery failed for {owner}: {e}")

    # ---- ERC-1271: smart-contract wallet ----
    if w3 is not None:
        try:
            contract = w3.eth.contract(address=to_checksum_address(owner), abi=ERC1271ABI().to_list())
            result: bytes = await contract.functions.isValidSignature(digest, signature).call()
            return bytes(result) == ERC1271_MAGIC_VALUE
        except Exception as e:
            logger.debug(f"ERC-1271 check failed for {owner}: {e}")
            return False

    return False


async def verify_permit_signature(
    permit: Permit,
    domain: EIP712Domain,
    signature: Union[PermitData, SignatureData, SignatureLike],
    w3: Optional[AsyncWeb3] = None,
) -> bool:
    """
    Check that ``signature`` authorizes ``permit`` under ``domain``.

    Args:
        permit: The unsigned permit fields.
        domain: The token's EIP-712 domain.
        signature: ``PermitData``, ``SignatureData`` or a raw 65-byte signature.
        w3: Optional provider for the ERC-1271 fallback.

    Returns:
        ``True`` if valid for ``permit.owner``, ``False`` otherwise.
    """
    if isinstance(signature, PermitData):
        signature = SignatureData(v=signature.v, r=signature.r, s=signature.s)
    raw = encode_signature(signature) if isinstance(signature, SignatureData) else to_signature_bytes(signature)
    return await _verify_digest(hash_permit(permit, domain), raw, permit.owner, w3)


async def verify_meta_transfer_signature(
    meta_transfer: MetaTransfer,
    domain: EIP712Domain,
    signature: Union[SignatureData, SignatureLike],
    w3: Optional[AsyncWeb3] = None,
) -> bool:
    """
    Check that ``signature`` authorizes ``meta_transfer`` under the relayer domain.

    Returns:
        ``True`` if valid for ``meta_transfer.owner``, ``False`` otherwise.
    """
    raw = encode_signature(signature) if isinstance(signature, SignatureData) else to_signature_bytes(signature)
    return await _verify_digest(hash_meta_transfer(meta_transfer, domain), raw, meta_transfer.owner, w3)
