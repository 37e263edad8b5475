from .evm import (
    GaslessConfig,
    EIP712Domain,
    Permit,
    MetaTransfer,
    PermitData,
    SignatureData,
    BaseSigner,
    LocalAccountSigner,
    ChainReader,
    PermitBuilder,
    MetaTransferBuilder,
)

__all__ = [
    "GaslessConfig",
    "EIP712Domain",
    "Permit",
    "MetaTransfer",
    "PermitData",
    "SignatureData",
    "BaseSigner",
    "LocalAccountSigner",
    "ChainReader",
    "PermitBuilder",
    "MetaTransferBuilder",
]
