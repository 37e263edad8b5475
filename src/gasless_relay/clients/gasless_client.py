"""
Gasless Transfer Orchestrator

``GaslessClient`` ties the pieces together for one relayer deployment:

    1. prepare_transfer  validate input, read both nonces and the token's
                         EIP-712 metadata, build and sign Permit + MetaTransfer
    2. submit            re-check the deadline, sign the auth message, POST
                         the envelope to the relayer service
    simulate             optional eth_call dry run of a signed attempt
    transfer_gasless     both steps in one call

Nothing is retried automatically. A rejected or expired transfer is retried
by calling ``transfer_gasless`` again, which reads fresh nonces.
"""

import asyncio
import time
from typing import Optional

from ..adapters.evm.constants import GaslessConfig
from ..adapters.evm.meta_transfer import MetaTransferBuilder
from ..adapters.evm.permit import PermitBuilder
from ..adapters.evm.readers import ChainReader
from ..adapters.evm.schemas import ContractLimits, GaslessTransferParams, TokenInfo, TransactionResult
from ..adapters.evm.signatures import signature_to_hex
from ..adapters.evm.signers import BaseSigner
from ..adapters.evm.verifies import (
    calculate_total_cost,
    is_deadline_expired,
    validate_address,
    validate_amount,
)
from ..engine.exceptions import (
    ConfigurationError,
    DeadlineExpiredError,
    InvalidTransition,
    RelayerServiceError,
    TransferValidationError,
    WalletNotConnected,
)
from ..engine.lifecycle import TransferAttempt
from ..schemas.bases import TransferState
from ..schemas.https import HealthResponse, RelayTransactionRequest, build_auth_message
from ..utils import error_context, logger
from .http_client import RelayerClient


class GaslessClient:
    """
    Client for gasless ERC-20 transfers through one relayer deployment.

    Usage:
        ```python
        config = GaslessConfig.from_preset("mantle-sepolia")
        async with GaslessClient(config, signer=LocalAccountSigner.from_env()) as client:
            result = await client.transfer_gasless(
                GaslessTransferParams(token=token, to=recipient, amount=1_000_000)
            )
            print(result.hash)
        ```

    ``reader`` and ``relayer`` default to instances built from ``config``;
    pass your own to share a provider or to substitute test doubles.
    """

    def __init__(
        self,
        config: GaslessConfig,
        signer: Optional[BaseSigner] = None,
        reader: Optional[ChainReader] = None,
        relayer: Optional[RelayerClient] = None,
    ):
        self.config = config
        self._signer = signer
        self._reader = reader or ChainReader.from_rpc_url(config.rpc_url, config.relayer_address)

        if relayer is None and config.relayer_service_url:
            relayer = RelayerClient(
                config.relayer_service_url,
                api_key=config.api_key,
                timeout=config.request_timeout,
            )
        self._relayer = relayer

        self.permits = PermitBuilder(self._reader, config.chain_id)
        self.meta_transfers = MetaTransferBuilder(
            self._reader,
            chain_id=config.chain_id,
            relayer_address=config.relayer_address,
            domain_name=config.relayer_domain_name,
            domain_version=config.relayer_domain_version,
            default_deadline_seconds=config.default_deadline_seconds,
        )

    # =========================================================================
    # Signer
    # =========================================================================

    def set_signer(self, signer: Optional[BaseSigner]) -> None:
        """Attach (or detach, with ``None``) the owner's signing backend."""
        self._signer = signer

    @property
    def signer(self) -> BaseSigner:
        if self._signer is None:
            raise WalletNotConnected("Wallet not connected")
        return self._signer

    @property
    def relayer(self) -> RelayerClient:
        if self._relayer is None:
            raise ConfigurationError("Relayer service URL not configured")
        return self._relayer

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_token_info(self, token: str) -> TokenInfo:
        token = validate_address(token, "token address")
        metadata, whitelisted = await asyncio.gather(
            self._reader.token_metadata(token),
            self._reader.is_token_whitelisted(token),
        )
        return TokenInfo(address=token, is_whitelisted=whitelisted, **metadata)

    async def get_user_nonce(self, owner: str) -> int:
        """Relayer-contract nonce of ``owner`` (the one a MetaTransfer is signed with)."""
        return await self._reader.relayer_nonce(validate_address(owner, "user address"))

    async def get_contract_limits(self) -> ContractLimits:
        return await self._reader.contract_limits()

    async def is_contract_paused(self) -> bool:
        return await self._reader.is_paused()

    async def is_token_whitelisted(self, token: str) -> bool:
        return await self._reader.is_token_whitelisted(validate_address(token, "token address"))

    async def health(self) -> HealthResponse:
        return await self.relayer.health()

    # =========================================================================
    # Transfer
    # =========================================================================

    async def prepare_transfer(self, params: GaslessTransferParams) -> TransferAttempt:
        """
        Build and sign a transfer attempt without submitting it.

        Input is validated and the deadline checked before any chain read.
        The relayer nonce, token nonce, token name and token version are then
        read concurrently.

        Returns:
            A ``TransferAttempt`` in the SIGNED state.

        Raises:
            WalletNotConnected: No signer attached.
            TransferValidationError: Bad address or amount.
            DeadlineExpiredError: ``params.deadline`` already passed.
            BlockchainInteractionError: A chain read failed.
            SignatureVerificationError: The signer produced a signature for another key.
        """
        signer = self.signer
        owner = signer.address
        token = validate_address(params.token, "token address")
        recipient = validate_address(params.to, "recipient address")
        validate_amount(params.amount)
        if params.fee < 0:
            raise TransferValidationError("Fee must not be negative")

        now = int(time.time())
        deadline = params.deadline
        if deadline is None:
            deadline = now + self.config.default_deadline_seconds
        elif is_deadline_expired(deadline, now):
            raise DeadlineExpiredError(
                f"Deadline {deadline} is in the past (now {now})",
                deadline=deadline,
                now=now,
            )

        meta_transfer, permit, token_name, token_version = await asyncio.gather(
            self.meta_transfers.build(owner, token, recipient, params.amount, params.fee, deadline),
            self.permits.build(
                token,
                owner,
                self.config.relayer_address,
                calculate_total_cost(params.amount, params.fee),
                deadline,
            ),
            self._reader.token_name(token),
            self._reader.token_version(token),
        )
        attempt = TransferAttempt(meta_transfer=meta_transfer, permit=permit)

        permit_domain = PermitBuilder.create_domain(token, self.config.chain_id, token_name, token_version)
        permit_data = await self.permits.sign(permit, permit_domain, signer)
        signature = await self.meta_transfers.sign(meta_transfer, signer)
        attempt.mark_signed(permit_data, signature)

        logger.debug(
            f"prepared transfer {owner} -> {recipient}: amount={params.amount} fee={params.fee} "
            f"relayer_nonce={meta_transfer.relayer_nonce} token_nonce={permit.token_nonce}"
        )
        return attempt

    async def simulate(self, attempt: TransferAttempt) -> None:
        """
        Dry-run a SIGNED attempt against the relayer contract without relaying it.

        The attempt's state is left unchanged, so it can still be submitted.

        Raises:
            InvalidTransition: ``attempt`` is not in the SIGNED state.
            DeadlineExpiredError: The deadline passed; the attempt is now EXPIRED.
            BlockchainInteractionError: The contract call reverted or failed.
        """
        if attempt.state is not TransferState.SIGNED:
            raise InvalidTransition(
                f"Only signed transfers can be simulated (state: {attempt.state.value})",
                current_state=attempt.state,
                target_state=TransferState.SUBMITTED,
            )
        attempt.ensure_not_expired()
        await self._reader.simulate_meta_transfer(attempt.meta_transfer, attempt.permit_data, attempt.signature)

    async def submit(self, attempt: TransferAttempt) -> TransactionResult:
        """
        Submit a SIGNED attempt to the relayer service.

        Raises:
            ConfigurationError: No relayer service URL configured.
            InvalidTransition: ``attempt`` is not in the SIGNED state.
            DeadlineExpiredError: The deadline passed; the attempt is now EXPIRED.
            RelayerServiceError: The service failed or rejected the transfer;
                                 the attempt is now REJECTED.
        """
        relayer = self.relayer
        if attempt.state is not TransferState.SIGNED:
            raise InvalidTransition(
                f"Only signed transfers can be submitted (state: {attempt.state.value})",
                current_state=attempt.state,
                target_state=TransferState.SUBMITTED,
            )
        attempt.ensure_not_expired()

        owner = attempt.meta_transfer.owner
        timestamp = int(time.time())
        user_signature = await self.signer.sign_message(build_auth_message(timestamp, owner))
        request = RelayTransactionRequest(
            meta_tx=attempt.meta_transfer,
            permit_data=attempt.permit_data,
            signature=attempt.signature,
            chain_id=self.config.chain_id,
            user_address=owner,
            timestamp=timestamp,
            user_signature=signature_to_hex(user_signature),
        )

        attempt.mark_submitted()
        try:
            response = await relayer.relay_transaction(request)
        except RelayerServiceError as e:
            logger.warning(f"relayer rejected transfer for {owner}: {e} ({error_context()})")
            attempt.mark_rejected(str(e))
            raise

        result = response.to_result()
        attempt.mark_confirmed(result)
        return result

    async def transfer_gasless(self, params: GaslessTransferParams) -> TransactionResult:
        """
        Build, sign and relay a gasless transfer of ``params.amount`` tokens.

        The owner pays ``amount + fee`` in tokens and no native gas.
        """
        if self._signer is None:
            raise WalletNotConnected("Wallet not connected")
        if self._relayer is None:
            raise ConfigurationError("Relayer service URL not configured")
        attempt = await self.prepare_transfer(params)
        return await self.submit(attempt)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def aclose(self) -> None:
        if self._relayer is not None:
            await self._relayer.aclose()

    async def __aenter__(self) -> "GaslessClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
