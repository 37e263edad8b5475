"""
Base Schema Models for the Gasless Relay Toolkit

Fundamental base classes shared by every schema module.

Core Classes:
    - CanonicalModel: Pydantic base model with deterministic JSON serialization
    - TransferState: Lifecycle states of a single transfer attempt
    - DecimalStr: uint256 integer type carried as a decimal string on the wire

Dependencies:
    - pydantic: For data validation and serialization
"""

import json
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer


UINT256_MAX = 2 ** 256 - 1

#: Unsigned 256-bit integer that serializes as a decimal string.
#: JSON has no 256-bit integer type, so the relayer wire format carries
#: these as strings; validation accepts either form and yields an int.
DecimalStr = Annotated[
    int,
    Field(ge=0, le=UINT256_MAX),
    PlainSerializer(lambda value: str(value), return_type=str),
]


class CanonicalModel(BaseModel):
    """
    Pydantic base model with canonical JSON serialization.

    Produces a deterministic, whitespace-free JSON representation with
    sorted keys, so the same model always serializes to the same bytes.

    Example:
        class MyModel(CanonicalModel):
            name: str
            value: int

        model = MyModel(name="test", value=123)
        model.to_canonical_json()  # '{"name":"test","value":123}'
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_canonical_json(self) -> str:
        """
        Convert model to canonical JSON string.

        Uses field aliases, so the output matches the wire names.

        Returns:
            str: JSON string with sorted keys and no extra whitespace.
        """
        data = self.model_dump(mode="json", by_alias=True)
        return json.dumps(
            data,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False
        )


class TransferState(str, Enum):
    """
    Lifecycle states of one transfer attempt.

    Attributes:
        BUILT: Permit and MetaTransfer assembled with freshly read nonces
        SIGNED: Both payloads signed by the owner
        SUBMITTED: Envelope posted to the relayer service
        CONFIRMED: Relayer reported success (terminal)
        REJECTED: Relayer or transport failure (terminal)
        EXPIRED: Deadline passed before confirmation (terminal)
    """
    BUILT = "built"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferState.CONFIRMED, TransferState.REJECTED, TransferState.EXPIRED)
