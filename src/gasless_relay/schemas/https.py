"""
HTTP Request/Response Schema Models for the Relayer Service

Pydantic models for the JSON exchanged with the relayer HTTP service:

1. Client POSTs ``RelayTransactionRequest`` to ``/relay-transaction``
2. Service answers 200 with ``RelayerResponse`` or 4xx/5xx with ``{"error": ...}``
3. ``GET /health`` answers with ``HealthResponse``

uint256 values travel as decimal strings (JSON has no 256-bit integer) and
are parsed back to ints on read.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..adapters.evm.schemas import MetaTransfer, PermitData, TransactionResult
from .bases import CanonicalModel, DecimalStr


# ============================================================================
# Request Headers
# ============================================================================

class ClientRequestHeader(BaseModel):
    """HTTP request headers sent to the relayer service.

    Attributes:
        content_type: MIME type of request body (default: application/json).
        api_key: Optional relayer API key.
    """
    model_config = ConfigDict(populate_by_name=True)
    content_type: str = Field(default="application/json", alias="Content-Type")
    api_key: Optional[str] = Field(default=None, alias="X-API-Key")

    def to_headers(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# POST /relay-transaction
# ============================================================================

class RelayTransactionRequest(CanonicalModel):
    """Envelope submitted to the relayer service.

    Attributes:
        meta_tx: Signed-over MetaTransfer fields (``metaTx``).
        permit_data: Signed permit (``permitData``).
        signature: MetaTransfer signature, 0x-prefixed 65 bytes.
        chain_id: Chain the transfer targets (``chainId``).
        user_address: Owner address (``userAddress``).
        timestamp: Unix seconds the auth message was signed at.
        user_signature: Personal-sign of the auth message (``userSignature``).
    """
    meta_tx: MetaTransfer = Field(..., alias="metaTx")
    permit_data: PermitData = Field(..., alias="permitData")
    signature: str = Field(..., description="MetaTransfer signature")
    chain_id: int = Field(..., alias="chainId")
    user_address: str = Field(..., alias="userAddress")
    timestamp: int = Field(..., description="Unix seconds the auth message was signed at")
    user_signature: str = Field(..., alias="userSignature")

    def to_wire(self) -> dict:
        """JSON-ready dict with wire field names and decimal-string integers."""
        return self.model_dump(mode="json", by_alias=True)


def build_auth_message(timestamp: int, user_address: str) -> str:
    """Text the owner personal-signs so the service can authenticate the request."""
    return f"Gasless transfer request\nTimestamp: {timestamp}\nUser: {user_address}"


# ============================================================================
# Responses
# ============================================================================

class RelayerResponse(BaseModel):
    """Successful ``/relay-transaction`` body."""
    model_config = ConfigDict(populate_by_name=True)
    success: bool
    hash: Optional[str] = None
    gas_used: Optional[DecimalStr] = Field(default=None, alias="gasUsed")
    meta_tx_hash: Optional[str] = Field(default=None, alias="metaTxHash")
    error: Optional[str] = None

    def to_result(self) -> TransactionResult:
        return TransactionResult(
            hash=self.hash,
            success=self.success,
            gas_used=self.gas_used,
            meta_tx_hash=self.meta_tx_hash,
        )


class HealthResponse(BaseModel):
    """``GET /health`` body; extra fields reported by the service are kept."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")
    status: str
    chain_id: Optional[int] = Field(default=None, alias="chainId")

    @property
    def is_healthy(self) -> bool:
        return self.status == "healthy"
