"""
Gasless Relay Configuration Management

Explicit configuration for one relayer deployment, resolved once at
construction time and passed to every component:

    - GaslessConfig: chain id, RPC URL, relayer contract, relayer service URL
    - Chain presets with per-environment relayer service URLs
    - Environment-variable loading (``.env`` supported via python-dotenv)
    - Token-amount conversion and deadline helpers
"""

import os
import time
from typing import Dict, Literal, Optional

import dotenv
from pydantic import BaseModel, Field, field_validator
from web3 import Web3

from ...engine.exceptions import ConfigurationError, TransferValidationError

dotenv.load_dotenv()

Environment = Literal["production", "staging", "development", "local", "test"]

#: EIP-712 domain of the relayer contract.
RELAYER_DOMAIN_NAME = "GaslessRelayer"
RELAYER_DOMAIN_VERSION = "1"

#: Fallback permit version when a token exposes neither version() nor eip712Domain().
DEFAULT_PERMIT_VERSION = "1"

DEFAULT_DEADLINE_SECONDS = 3600
DEFAULT_REQUEST_TIMEOUT = 30.0


class GaslessConfig(BaseModel):
    """Relayer deployment configuration."""
    chain_id: int = Field(..., gt=0, description="EVM chain id")
    rpc_url: str = Field(..., description="JSON-RPC endpoint URL")
    relayer_address: str = Field(..., description="GaslessRelayer contract address")
    relayer_service_url: Optional[str] = Field(default=None, description="Base URL of the relayer HTTP service")
    api_key: Optional[str] = Field(default=None, description="Value for the X-API-Key header")
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0, description="Relayer HTTP timeout in seconds")
    default_deadline_seconds: int = Field(default=DEFAULT_DEADLINE_SECONDS, gt=0, description="Deadline used when the caller gives none")
    relayer_domain_name: str = Field(default=RELAYER_DOMAIN_NAME, description="EIP-712 name of the relayer contract")
    relayer_domain_version: str = Field(default=RELAYER_DOMAIN_VERSION, description="EIP-712 version of the relayer contract")

    @field_validator("relayer_address")
    @classmethod
    def _checksum_relayer(cls, value: str) -> str:
        if not Web3.is_address(value):
            raise ValueError(f"Invalid relayer address: {value}")
        return Web3.to_checksum_address(value)

    @field_validator("relayer_service_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value

    @classmethod
    def from_preset(
        cls,
        preset: str,
        environment: Environment = "production",
        **overrides,
    ) -> "GaslessConfig":
        """
        Build a config from a named chain preset.

        Args:
            preset: Key of ``CHAIN_PRESETS`` (e.g. ``"mantle-sepolia"``).
            environment: Selects the relayer service URL.
            **overrides: Field values that replace the preset's.

        Raises:
            ConfigurationError: For an unknown preset or environment.
        """
        return get_chain_config(preset, environment, **overrides)

    @classmethod
    def from_env(cls) -> "GaslessConfig":
        """
        Build a config from ``GASLESS_*`` environment variables.

        ``GASLESS_CHAIN_PRESET`` (default ``mantle-sepolia``) and
        ``GASLESS_ENVIRONMENT`` (default ``production``) pick the base preset;
        ``GASLESS_RPC_URL``, ``GASLESS_RELAYER_ADDRESS``,
        ``GASLESS_RELAYER_URL``, ``GASLESS_API_KEY`` and ``GASLESS_TIMEOUT``
        override individual fields when set.
        """
        overrides = {}
        env_fields = {
            "rpc_url": "GASLESS_RPC_URL",
            "relayer_address": "GASLESS_RELAYER_ADDRESS",
            "relayer_service_url": "GASLESS_RELAYER_URL",
            "api_key": "GASLESS_API_KEY",
            "request_timeout": "GASLESS_TIMEOUT",
        }
        for field_name, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value:
                overrides[field_name] = value

        return get_chain_config(
            os.getenv("GASLESS_CHAIN_PRESET", "mantle-sepolia"),
            os.getenv("GASLESS_ENVIRONMENT", "production"),
            **overrides,
        )


# Raw preset data. Relayer service URLs are resolved per environment.
_CHAIN_PRESETS_DATA: Dict[str, Dict] = {
    "mantle-sepolia": {
        "chain_id": 5003,
        "rpc_url": "https://rpc.sepolia.mantle.xyz",
        "relayer_address": "0xc500592C002a23EeeB4e93CCfBA60B4c2683fDa9",
        "relayer_service_urls": {
            "production": "https://gasless-relayer-sepolia.mantle.com",
            "staging": "https://gasless-relayer-sepolia-staging.mantle.com",
            "development": "https://gasless-relayer-sepolia-dev.mantle.com",
            "local": "http://localhost:3001",
            "test": "http://localhost:3001",
        },
    },
}

CHAIN_PRESETS = tuple(_CHAIN_PRESETS_DATA)


def get_chain_config(
    preset: str,
    environment: str = "production",
    **overrides,
) -> GaslessConfig:
    """
    Resolve a chain preset and environment into a ``GaslessConfig``.

    Raises:
        ConfigurationError: If the preset or environment is unknown, or the
                            resulting config fails validation.
    """
    data = _CHAIN_PRESETS_DATA.get(preset)
    if data is None:
        raise ConfigurationError(f"Unsupported chain preset: {preset}")

    service_urls = data["relayer_service_urls"]
    if environment not in service_urls:
        raise ConfigurationError(
            f"Unsupported environment {environment!r}; expected one of {sorted(service_urls)}"
        )

    values = {
        "chain_id": data["chain_id"],
        "rpc_url": data["rpc_url"],
        "relayer_address": data["relayer_address"],
        "relayer_service_url": service_urls[environment],
    }
    values.update(overrides)
    try:
        return GaslessConfig(**values)
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration for preset {preset}: {e}") from e


def get_private_key_from_env() -> Optional[str]:
    return os.getenv("EVM_PRIVATE_KEY")


# ---------------------------------------------------------------------------
# Token amounts and deadlines
# ---------------------------------------------------------------------------

def format_token_amount(amount: int, decimals: int) -> str:
    """
    Render a smallest-unit amount as a decimal string.

    Trailing fractional zeros are dropped; whole amounts have no point.

    Example::

        format_token_amount(1_500_000, 6)  # '1.5'
        format_token_amount(1_000_000, 6)  # '1'
    """
    if amount < 0:
        raise TransferValidationError("Amount must not be negative")
    quotient, remainder = divmod(amount, 10 ** decimals)
    if remainder == 0:
        return str(quotient)
    fractional = str(remainder).rjust(decimals, "0").rstrip("0")
    return f"{quotient}.{fractional}"


def parse_token_amount(amount: str, decimals: int) -> int:
    """
    Parse a decimal string into the token's smallest unit, exactly.

    Raises:
        TransferValidationError: For malformed input or more fractional
                                 digits than ``decimals``.

    Example::

        parse_token_amount("1.5", 6)  # 1500000
    """
    integer, _, fractional = amount.partition(".")
    if not integer.isdigit() or not integer.isascii():
        raise TransferValidationError("Invalid amount format")
    if fractional and (not fractional.isdigit() or not fractional.isascii()):
        raise TransferValidationError("Invalid amount format")
    if len(fractional) > decimals:
        raise TransferValidationError(f"Too many decimal places (max: {decimals})")
    return int(integer + fractional.ljust(decimals, "0"))


def create_deadline(seconds_from_now: int = DEFAULT_DEADLINE_SECONDS) -> int:
    """Unix timestamp ``seconds_from_now`` seconds in the future."""
    return int(time.time()) + seconds_from_now
