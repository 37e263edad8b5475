"""
Relayer Service HTTP Client

Thin httpx layer over the relayer service's two endpoints:

    POST /relay-transaction   submit a signed transfer envelope
    GET  /health              liveness probe

Every failure (transport error, timeout, non-2xx status, unparsable body, or
a body reporting ``success: false``) is raised as ``RelayerServiceError``
carrying the operation name and underlying message. Nothing is retried here.
Cancellation (``asyncio.CancelledError``) is not intercepted.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from ..engine.exceptions import RelayerServiceError, raise_for_revert
from ..schemas.https import (
    ClientRequestHeader,
    HealthResponse,
    RelayerResponse,
    RelayTransactionRequest,
)
from ..utils import logger

RELAY_TRANSACTION_PATH = "/relay-transaction"
HEALTH_PATH = "/health"


class RelayerClient(httpx.AsyncClient):
    """
    Extended httpx.AsyncClient bound to one relayer service.

    Fully compatible with httpx.AsyncClient and usable as an async context
    manager. ``timeout`` bounds every request, including the submission.

    Usage:
        ```python
        async with RelayerClient("https://relayer.example.com", api_key="...") as relayer:
            result = await relayer.relay_transaction(envelope)
        ```
    """

    def __init__(
        self,
        service_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        **kwargs
    ):
        """
        Initialize client for a relayer service.

        Args:
            service_url: Base URL of the relayer service
            api_key: Optional value for the ``X-API-Key`` header
            timeout: Per-request timeout in seconds
            **kwargs: All standard httpx.AsyncClient arguments (transport, etc.)
        """
        headers = ClientRequestHeader(api_key=api_key).to_headers()
        headers.update(kwargs.pop("headers", None) or {})
        super().__init__(
            base_url=service_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            **kwargs
        )

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def relay_transaction(self, request: RelayTransactionRequest) -> RelayerResponse:
        """
        Submit a signed transfer envelope.

        Returns:
            RelayerResponse with ``success`` true and a transaction hash.

        Raises:
            RelayerServiceError: For any failure, including ``success: false``.
            StaleNonceError: When the service reports a reused nonce.
        """
        operation = "relay-transaction"
        response = await self._send("POST", RELAY_TRANSACTION_PATH, operation, content=request.to_canonical_json())
        payload = self._decode(response, operation)

        try:
            result = RelayerResponse.model_validate(payload)
        except ValidationError as e:
            raise RelayerServiceError(
                f"Relayer service error: malformed response: {e}",
                status_code=response.status_code,
                operation=operation,
            ) from e

        if not result.success or result.error:
            raise_for_revert(
                result.error or "Relayer reported an unsuccessful transfer",
                status_code=response.status_code,
                operation=operation,
            )
        if not result.hash:
            raise RelayerServiceError(
                "Relayer service error: response carries no transaction hash",
                status_code=response.status_code,
                operation=operation,
            )

        logger.info(f"relayer accepted transfer: {result.hash}")
        return result

    async def health(self) -> HealthResponse:
        """
        Query the service's liveness endpoint.

        Raises:
            RelayerServiceError: If the service is unreachable or answers non-2xx.
        """
        operation = "health"
        response = await self._send("GET", HEALTH_PATH, operation)
        payload = self._decode(response, operation)
        try:
            return HealthResponse.model_validate(payload)
        except ValidationError as e:
            raise RelayerServiceError(
                f"Relayer service error: malformed health response: {e}",
                status_code=response.status_code,
                operation=operation,
            ) from e

    # =========================================================================
    # Transport helpers
    # =========================================================================

    async def _send(self, method: str, path: str, operation: str, **kwargs) -> httpx.Response:
        try:
            return await self.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise RelayerServiceError(
                f"Relayer service error: {operation} timed out after {self.timeout.read}s",
                operation=operation,
            ) from e
        except httpx.HTTPError as e:
            raise RelayerServiceError(f"Relayer service error: {e}", operation=operation) from e

    @staticmethod
    def _decode(response: httpx.Response, operation: str) -> dict:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = payload.get("error") if isinstance(payload, dict) else None
            message = str(message or response.text or response.reason_phrase)
            logger.warning(f"relayer {operation} failed with HTTP {response.status_code}: {message}")
            raise_for_revert(message, status_code=response.status_code, operation=operation)

        if not isinstance(payload, dict):
            raise RelayerServiceError(
                "Relayer service error: response body is not a JSON object",
                status_code=response.status_code,
                operation=operation,
            )
        return payload
