
"""
GaslessRelayer Contract ABI Module

ABI fragments for the relayer contract: the read-only views the client
queries, and the `executeMetaTransfer` entry point whose argument shape the
signed payloads must match exactly.

Usage:
    from RELAYER_ABI import get_relayer_abi

    contract = web3.eth.contract(address=relayer_address, abi=get_relayer_abi())
    nonce = await contract.functions.getNonce(owner).call()
"""

from typing import Dict, Any, List


def _view(name: str, inputs: List[Dict[str, str]], output_type: str) -> Dict[str, Any]:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": [{"name": "", "type": output_type}],
    }


def get_relayer_views_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the relayer contract's read-only functions.

    Returns:
        List[Dict[str, Any]]: getNonce, isTokenWhitelisted, paused,
        maxTransferAmount and maxFeeAmount.
    """
    return [
        _view("getNonce", [{"name": "user", "type": "address"}], "uint256"),
        _view("isTokenWhitelisted", [{"name": "token", "type": "address"}], "bool"),
        _view("paused", [], "bool"),
        _view("maxTransferAmount", [], "uint256"),
        _view("maxFeeAmount", [], "uint256"),
    ]


def get_execute_meta_transfer_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for `executeMetaTransfer(MetaTransfer, PermitData, bytes)`.

    Tuple component order is the contract's struct order; the MetaTransfer
    tuple has `nonce` before `deadline`.

    Returns:
        List[Dict[str, Any]]: ABI for `executeMetaTransfer`.
    """
    return [
        {
            "name": "executeMetaTransfer",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {
                    "name": "metaTx",
                    "type": "tuple",
                    "components": [
                        {"name": "owner", "type": "address"},
                        {"name": "token", "type": "address"},
                        {"name": "recipient", "type": "address"},
                        {"name": "amount", "type": "uint256"},
                        {"name": "fee", "type": "uint256"},
                        {"name": "nonce", "type": "uint256"},
                        {"name": "deadline", "type": "uint256"},
                    ],
                },
                {
                    "name": "permitData",
                    "type": "tuple",
                    "components": [
                        {"name": "value", "type": "uint256"},
                        {"name": "deadline", "type": "uint256"},
                        {"name": "v", "type": "uint8"},
                        {"name": "r", "type": "bytes32"},
                        {"name": "s", "type": "bytes32"},
                    ],
                },
                {"name": "signature", "type": "bytes"},
            ],
            "outputs": [],
        }
    ]


def get_relayer_abi() -> List[Dict[str, Any]]:
    """
    Get the combined relayer ABI.

    Returns:
        List[Dict[str, Any]]: view functions plus `executeMetaTransfer`.
    """
    return get_relayer_views_abi() + get_execute_meta_transfer_abi()
