from .bases import CanonicalModel, DecimalStr, UINT256_MAX, TransferState

__all__ = [
    "CanonicalModel",
    "DecimalStr",
    "UINT256_MAX",
    "TransferState",
]
