"""
Client module for gasless ERC-20 transfers.

Provides the transfer orchestrator and the HTTP client for the relayer
service it submits to.
"""

from .gasless_client import GaslessClient
from .http_client import RelayerClient

__all__ = ["GaslessClient", "RelayerClient"]
