from dataclasses import dataclass, field
from typing import Dict, Any, List


# -----------------------------
# EIP-712 Domain
# -----------------------------

EIP712_DOMAIN_FIELDS: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]


@dataclass(frozen=True)
class EIP712Domain:
    """
    EIP-712 domain separator inputs.
    Used to prevent signature replay across contracts, chains and versions.

    ``name`` and ``version`` must be the exact strings the verifying contract
    hashes internally.
    """
    name: str
    version: str
    chainId: int
    verifyingContract: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chainId,
            "verifyingContract": self.verifyingContract,
        }


# -----------------------------
# ERC-2612: Permit
# -----------------------------

PERMIT_FIELDS: List[Dict[str, str]] = [
    {"name": "owner", "type": "address"},
    {"name": "spender", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
]


@dataclass
class PermitMessage:
    """
    Message payload for the ERC-2612 ``Permit`` struct.

    Attributes:
        owner: Token holder granting the allowance.
        spender: Address allowed to spend (the relayer contract).
        value: Allowance in the token's smallest unit.
        nonce: The token contract's ``nonces(owner)`` value.
        deadline: Unix timestamp after which the permit is invalid.
    """
    owner: str
    spender: str
    value: int
    nonce: int
    deadline: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "spender": self.spender,
            "value": self.value,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


@dataclass
class PermitTypedData:
    """
    Container for ERC-2612 typed data usable with EIP-712 signing routines.

    ``to_dict()`` yields ``{types, primaryType, domain, message}``, the layout
    accepted by ``eth_account`` and ``eth_signTypedData_v4``.
    """
    domain: EIP712Domain
    message: PermitMessage

    primary_type: str = "Permit"

    types: Dict[str, List[Dict[str, str]]] = field(
        default_factory=lambda: {
            "EIP712Domain": list(EIP712_DOMAIN_FIELDS),
            "Permit": list(PERMIT_FIELDS),
        }
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": self.types,
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }


# -----------------------------
# Relayer contract: MetaTransfer
# -----------------------------

# Field order is pinned to the deployed contract's struct: nonce before deadline.
META_TRANSFER_FIELDS: List[Dict[str, str]] = [
    {"name": "owner", "type": "address"},
    {"name": "token", "type": "address"},
    {"name": "recipient", "type": "address"},
    {"name": "amount", "type": "uint256"},
    {"name": "fee", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
]


@dataclass
class MetaTransferMessage:
    """
    Message payload for the relayer contract's ``MetaTransfer`` struct.

    ``to_dict()`` emits keys in struct order. Signers that re-derive the
    hash from the declared field list rely on ``META_TRANSFER_FIELDS``,
    not on this dict's key order.

    Attributes:
        owner: Token holder authorizing the transfer.
        token: ERC-20 token being moved.
        recipient: Receiver of ``amount``.
        amount: Tokens delivered to ``recipient``.
        fee: Tokens paid to the relayer on top of ``amount``.
        nonce: The relayer contract's ``getNonce(owner)`` value.
        deadline: Unix timestamp after which the authorization is invalid.
    """
    owner: str
    token: str
    recipient: str
    amount: int
    fee: int
    nonce: int
    deadline: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "token": self.token,
            "recipient": self.recipient,
            "amount": self.amount,
            "fee": self.fee,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


@dataclass
class MetaTransferTypedData:
    """
    Container for MetaTransfer typed data usable with EIP-712 signing routines.
    """
    domain: EIP712Domain
    message: MetaTransferMessage

    primary_type: str = "MetaTransfer"

    types: Dict[str, List[Dict[str, str]]] = field(
        default_factory=lambda: {
            "EIP712Domain": list(EIP712_DOMAIN_FIELDS),
            "MetaTransfer": list(META_TRANSFER_FIELDS),
        }
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": self.types,
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }


# -----------------------------
# ERC-1271: Contract-based signature validation
# -----------------------------

@dataclass
class ERC1271ABI:
    """
    ABI definition for the ERC-1271 ``isValidSignature`` function.

    Used when the owner is a smart-contract wallet and ECDSA recovery
    cannot prove the signature.
    """

    def to_dict(self) -> Dict[str, Any]:
        """Return the ``isValidSignature`` ABI entry as a dict."""
        return {
            "inputs": [
                {"name": "_hash", "type": "bytes32"},
                {"name": "_signature", "type": "bytes"},
            ],
            "name": "isValidSignature",
            "outputs": [{"name": "", "type": "bytes4"}],
            "stateMutability": "view",
            "type": "function",
        }

    def to_list(self) -> List[Dict[str, Any]]:
        """Return the full ABI as a list compatible with ``web3.eth.contract``."""
        return [self.to_dict()]
