"""
gasless-relay: client toolkit for relayed, gas-free ERC-20 transfers.

The owner signs an ERC-2612 ``Permit`` and a relayer ``MetaTransfer`` off
chain; a relayer service submits both and pays the gas.
"""

from .adapters.evm import (
    GaslessConfig,
    get_chain_config,
    EIP712Domain,
    Permit,
    MetaTransfer,
    PermitData,
    SignatureData,
    TokenInfo,
    ContractLimits,
    TransactionResult,
    GaslessTransferParams,
    BaseSigner,
    LocalAccountSigner,
    ChainReader,
    PermitBuilder,
    MetaTransferBuilder,
    format_token_amount,
    parse_token_amount,
)
from .clients import GaslessClient, RelayerClient
from .utils import logger, setup_logger

__version__ = "0.1.0"

__all__ = [
    "GaslessConfig",
    "get_chain_config",
    "EIP712Domain",
    "Permit",
    "MetaTransfer",
    "PermitData",
    "SignatureData",
    "TokenInfo",
    "ContractLimits",
    "TransactionResult",
    "GaslessTransferParams",
    "BaseSigner",
    "LocalAccountSigner",
    "ChainReader",
    "PermitBuilder",
    "MetaTransferBuilder",
    "format_token_amount",
    "parse_token_amount",
    "GaslessClient",
    "RelayerClient",
    "logger",
    "setup_logger",
]
