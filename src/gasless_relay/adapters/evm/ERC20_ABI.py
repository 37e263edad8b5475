
"""
ERC-20 + ERC-2612 Token ABI Module

Minimal ABI fragments for the token reads a gasless transfer needs: the
permit nonce, token metadata and the EIP-712 version accessors.

Usage:
    from ERC20_ABI import get_token_abi

    contract = web3.eth.contract(address=token_address, abi=get_token_abi())
    nonce = await contract.functions.nonces(owner).call()
"""

from typing import Dict, Any, List


def get_balance_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for querying a token balance.

    Returns:
        List[Dict[str, Any]]: ABI for balanceOf function
    """
    return [
        {
            "name": "balanceOf",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "account", "type": "address"}],
            "outputs": [{"name": "", "type": "uint256"}],
        }
    ]


def get_nonces_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ERC-2612 `nonces(owner)`.

    The returned nonce is the one a Permit must be signed with. It is a
    different counter from the relayer contract's `getNonce(owner)`.

    Returns:
        List[Dict[str, Any]]: ABI for the `nonces` function.
    """
    return [
        {
            "name": "nonces",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "owner", "type": "address"}],
            "outputs": [{"name": "", "type": "uint256"}],
        }
    ]


def get_metadata_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for `name()`, `symbol()` and `decimals()`.

    Returns:
        List[Dict[str, Any]]: ABI for the three metadata getters.
    """
    return [
        {
            "name": "name",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "string"}],
        },
        {
            "name": "symbol",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "string"}],
        },
        {
            "name": "decimals",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "uint8"}],
        },
    ]


def get_version_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the two ways a token reports its EIP-712 version.

    `version()` is the common OpenZeppelin getter; `eip712Domain()` is the
    ERC-5267 accessor whose third field is the version string.

    Returns:
        List[Dict[str, Any]]: ABI for `version` and `eip712Domain`.
    """
    return [
        {
            "name": "version",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "string"}],
        },
        {
            "name": "eip712Domain",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [
                {"name": "fields", "type": "bytes1"},
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
                {"name": "salt", "type": "bytes32"},
                {"name": "extensions", "type": "uint256[]"},
            ],
        },
    ]


def get_token_abi() -> List[Dict[str, Any]]:
    """
    Get the combined token ABI used by ``ChainReader``.

    Returns:
        List[Dict[str, Any]]: balance, nonce, metadata and version entries.
    """
    return get_balance_abi() + get_nonces_abi() + get_metadata_abi() + get_version_abi()
