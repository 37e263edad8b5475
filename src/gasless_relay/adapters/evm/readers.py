"""
On-Chain Reads

``ChainReader`` wraps an ``AsyncWeb3`` instance and performs every chain read
the toolkit needs: the two independent nonces, token metadata and the relayer
contract's whitelist, pause flag and limits. It can also dry-run
``executeMetaTransfer`` so a signed envelope is checked against the
contract before it is relayed.

Each failed read is re-raised as ``BlockchainInteractionError`` naming the
operation and the underlying error. Nothing is cached: nonces in particular
must be read fresh for every build.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict

from hexbytes import HexBytes
from web3 import AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ...engine.exceptions import BlockchainInteractionError, format_gasless_error
from ...utils import logger
from .constants import DEFAULT_PERMIT_VERSION
from .ERC20_ABI import get_token_abi
from .RELAYER_ABI import get_relayer_abi
from .schemas import ContractLimits, MetaTransfer, PermitData
from .signatures import SignatureLike, to_signature_bytes
from .standards import META_TRANSFER_FIELDS

# Errors meaning "the contract does not implement this view".
_MISSING_FUNCTION_ERRORS = (ContractLogicError, BadFunctionCallOutput)


class ChainReader:
    """
    Read-only access to the token and relayer contracts.

    Usage:
        reader = ChainReader.from_rpc_url(config.rpc_url, config.relayer_address)
        relayer_nonce = await reader.relayer_nonce(owner)
        token_nonce = await reader.token_nonce(token, owner)
    """

    def __init__(self, web3: AsyncWeb3, relayer_address: str):
        self._web3 = web3
        self.relayer_address = AsyncWeb3.to_checksum_address(relayer_address)

    @classmethod
    def from_rpc_url(cls, rpc_url: str, relayer_address: str) -> "ChainReader":
        return cls(AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url)), relayer_address)

    # =========================================================================
    # Contract handles
    # =========================================================================

    def _token(self, token: str):
        return self._web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token),
            abi=get_token_abi(),
        )

    def _relayer(self):
        return self._web3.eth.contract(address=self.relayer_address, abi=get_relayer_abi())

    @staticmethod
    async def _read(operation: str, make_call: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await make_call()
        except Exception as e:
            raise BlockchainInteractionError(f"Failed to {operation}: {e}", operation=operation) from e

    # =========================================================================
    # Nonces
    # =========================================================================

    async def token_nonce(self, token: str, owner: str) -> int:
        """ERC-2612 ``nonces(owner)`` on the token: the nonce a Permit is signed with."""
        owner = AsyncWeb3.to_checksum_address(owner)
        nonce = await self._read("read token nonce", lambda: self._token(token).functions.nonces(owner).call())
        logger.debug(f"token nonce for {owner} on {token}: {nonce}")
        return int(nonce)

    async def relayer_nonce(self, owner: str) -> int:
        """``getNonce(owner)`` on the relayer contract: the nonce a MetaTransfer is signed with."""
        owner = AsyncWeb3.to_checksum_address(owner)
        nonce = await self._read("read relayer nonce", lambda: self._relayer().functions.getNonce(owner).call())
        logger.debug(f"relayer nonce for {owner}: {nonce}")
        return int(nonce)

    # =========================================================================
    # Token metadata
    # =========================================================================

    async def token_name(self, token: str) -> str:
        return await self._read("read token name", lambda: self._token(token).functions.name().call())

    async def token_symbol(self, token: str) -> str:
        return await self._read("read token symbol", lambda: self._token(token).functions.symbol().call())

    async def token_decimals(self, token: str) -> int:
        decimals = await self._read("read token decimals", lambda: self._token(token).functions.decimals().call())
        return int(decimals)

    async def token_version(self, token: str) -> str:
        """
        Read the token's EIP-712 version string.

        Tries ``version()``, then the version field of ``eip712Domain()``.
        Falls back to ``"1"`` only when the token implements neither (both
        calls revert), and logs a warning because a wrong version breaks
        every permit signature. Transport failures are not masked.
        """
        contract = self._token(token)
        try:
            return await contract.functions.version().call()
        except _MISSING_FUNCTION_ERRORS as version_error:
            logger.debug(f"version() unavailable on {token}: {version_error}")
        except Exception as e:
            raise BlockchainInteractionError(f"Failed to read token version: {e}", operation="read token version") from e

        try:
            domain = await contract.functions.eip712Domain().call()
            return domain[2]
        except _MISSING_FUNCTION_ERRORS as domain_error:
            logger.warning(
                f"Token {token} implements neither version() nor eip712Domain() ({domain_error}); "
                f"assuming permit version {DEFAULT_PERMIT_VERSION!r}"
            )
        except Exception as e:
            raise BlockchainInteractionError(f"Failed to read token eip712Domain: {e}", operation="read token version") from e
        return DEFAULT_PERMIT_VERSION

    async def token_metadata(self, token: str) -> Dict[str, Any]:
        """Concurrently read ``name``, ``symbol`` and ``decimals``."""
        name, symbol, decimals = await asyncio.gather(
            self.token_name(token),
            self.token_symbol(token),
            self.token_decimals(token),
        )
        return {"name": name, "symbol": symbol, "decimals": decimals}

    async def token_balance(self, token: str, owner: str) -> int:
        owner = AsyncWeb3.to_checksum_address(owner)
        balance = await self._read("read token balance", lambda: self._token(token).functions.balanceOf(owner).call())
        return int(balance)

    # =========================================================================
    # Relayer contract state
    # =========================================================================

    async def is_token_whitelisted(self, token: str) -> bool:
        token = AsyncWeb3.to_checksum_address(token)
        return bool(await self._read(
            "check token whitelist",
            lambda: self._relayer().functions.isTokenWhitelisted(token).call(),
        ))

    async def is_paused(self) -> bool:
        return bool(await self._read("check contract pause status", lambda: self._relayer().functions.paused().call()))

    async def contract_limits(self) -> ContractLimits:
        relayer = self._relayer()
        max_transfer, max_fee = await asyncio.gather(
            self._read("read max transfer amount", lambda: relayer.functions.maxTransferAmount().call()),
            self._read("read max fee amount", lambda: relayer.functions.maxFeeAmount().call()),
        )
        return ContractLimits(max_transfer_amount=max_transfer, max_fee_amount=max_fee)

    # =========================================================================
    # Simulation
    # =========================================================================

    async def simulate_meta_transfer(
        self,
        meta_transfer: MetaTransfer,
        permit_data: PermitData,
        signature: SignatureLike,
    ) -> None:
        """
        Dry-run ``executeMetaTransfer`` with ``eth_call``.

        Nothing is broadcast. A revert (bad signature, stale nonce, limits,
        whitelist) is raised as ``BlockchainInteractionError`` with the
        readable revert reason.
        """
        operation = "simulate meta transfer"
        message = meta_transfer.to_message().to_dict()
        meta_tuple = tuple(message[field["name"]] for field in META_TRANSFER_FIELDS)
        permit_tuple = (
            permit_data.value,
            permit_data.deadline,
            permit_data.v,
            HexBytes(permit_data.r),
            HexBytes(permit_data.s),
        )
        call = self._relayer().functions.executeMetaTransfer(
            meta_tuple, permit_tuple, to_signature_bytes(signature)
        )
        try:
            await call.call()
        except ContractLogicError as e:
            raise BlockchainInteractionError(format_gasless_error(e, "simulation"), operation=operation) from e
        except Exception as e:
            raise BlockchainInteractionError(f"Failed to {operation}: {e}", operation=operation) from e
        logger.debug(f"simulated meta transfer for {meta_transfer.owner} nonce {meta_transfer.relayer_nonce}")

    @property
    def web3(self) -> AsyncWeb3:
        return self._web3
