from .constants import (
    GaslessConfig,
    CHAIN_PRESETS,
    get_chain_config,
    format_token_amount,
    parse_token_amount,
    create_deadline,
)
from .standards import EIP712Domain, PermitTypedData, MetaTransferTypedData
from .schemas import (
    SignatureData,
    PermitData,
    Permit,
    MetaTransfer,
    TokenInfo,
    ContractLimits,
    TransactionResult,
    GaslessTransferParams,
)
from .eip712 import (
    DOMAIN_TYPEHASH,
    PERMIT_TYPEHASH,
    META_TRANSFER_TYPEHASH,
    domain_separator,
    struct_hash,
    final_hash,
    hash_permit,
    hash_meta_transfer,
)
from .signatures import (
    decode_signature,
    encode_signature,
    signature_to_hex,
    normalize_v,
    normalize_signature,
    recover_signer,
)
from .signers import BaseSigner, LocalAccountSigner
from .readers import ChainReader
from .permit import PermitBuilder
from .meta_transfer import MetaTransferBuilder
from .verifies import (
    is_gasless_transfer_valid,
    calculate_total_cost,
    verify_permit_signature,
    verify_meta_transfer_signature,
)

__all__ = [
    "GaslessConfig",
    "CHAIN_PRESETS",
    "get_chain_config",
    "format_token_amount",
    "parse_token_amount",
    "create_deadline",
    "EIP712Domain",
    "PermitTypedData",
    "MetaTransferTypedData",
    "SignatureData",
    "PermitData",
    "Permit",
    "MetaTransfer",
    "TokenInfo",
    "ContractLimits",
    "TransactionResult",
    "GaslessTransferParams",
    "DOMAIN_TYPEHASH",
    "PERMIT_TYPEHASH",
    "META_TRANSFER_TYPEHASH",
    "domain_separator",
    "struct_hash",
    "final_hash",
    "hash_permit",
    "hash_meta_transfer",
    "decode_signature",
    "encode_signature",
    "signature_to_hex",
    "normalize_v",
    "normalize_signature",
    "recover_signer",
    "BaseSigner",
    "LocalAccountSigner",
    "ChainReader",
    "PermitBuilder",
    "MetaTransferBuilder",
    "is_gasless_transfer_valid",
    "calculate_total_cost",
    "verify_permit_signature",
    "verify_meta_transfer_signature",
]
