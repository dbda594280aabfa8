"""Configuration management using Pydantic Settings."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nftscan.chain.abi import UINT256_MAX
from nftscan.shared.exceptions import ConfigError

# Singleton instance
_settings: "Settings | None" = None

# IPFS gateways in priority order
DEFAULT_GATEWAYS: tuple[str, ...] = (
    "https://ipfs.io/ipfs/",
    "https://cloudflare-ipfs.com/ipfs/",
    "https://gateway.pinata.cloud/ipfs/",
    "https://dweb.link/ipfs/",
    "https://w3s.link/ipfs/",
)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class ResolverConfig(BaseModel):
    """Gateway and retry policy injected into the URI resolver.

    Attributes:
        gateways: Gateway base URLs in priority order (first is primary)
        max_retries: Maximum metadata download attempts
        backoff_base_seconds: Delay before the second attempt, doubled each retry
        request_timeout: Per-request timeout in seconds
    """

    model_config = ConfigDict(frozen=True)

    gateways: tuple[str, ...] = Field(default=DEFAULT_GATEWAYS, min_length=1)
    max_retries: int = Field(default=3, ge=1)
    backoff_base_seconds: float = Field(default=1.0, ge=0)
    request_timeout: float = Field(default=30.0, gt=0)

    @field_validator("gateways")
    @classmethod
    def normalize_gateways(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure every gateway base URL is http(s) and ends with a slash."""
        normalized = []
        for gateway in v:
            gateway = gateway.strip()
            if not gateway.startswith(("http://", "https://")):
                raise ValueError(f"Gateway must be an http(s) URL: {gateway}")
            normalized.append(gateway if gateway.endswith("/") else f"{gateway}/")
        return tuple(normalized)

    @property
    def primary_gateway(self) -> str:
        """Get the highest-priority gateway."""
        return self.gateways[0]


class ScanConfig(BaseModel):
    """Enumeration and pipeline options for a scan.

    Attributes:
        erc1155_probe_limit: Upper bound (exclusive) of the ERC-1155 id probe range
        pace_every: Number of ERC-721 ids between pacing pauses
        pace_delay_seconds: Length of each pacing pause
        verify_resources: Download each resource to record its size
    """

    model_config = ConfigDict(frozen=True)

    erc1155_probe_limit: int = Field(default=1000, ge=0)
    pace_every: int = Field(default=10, ge=1)
    pace_delay_seconds: float = Field(default=0.1, ge=0)
    verify_resources: bool = False


class Settings(BaseSettings):
    """Scanner settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Chain configuration
    rpc_url: str
    contract_address: str = ""

    # Gateway configuration (comma-separated, priority order)
    ipfs_gateways: str = ",".join(DEFAULT_GATEWAYS)
    request_timeout_seconds: float = 30.0
    metadata_max_retries: int = 3
    metadata_backoff_base_seconds: float = 1.0

    # Enumeration
    erc1155_probe_limit: int = 1000
    pace_every: int = 10
    pace_delay_seconds: float = 0.1
    token_ids: str = ""  # Comma-separated; empty means enumerate

    # Output
    verify_resources: bool = False
    output_path: str = ""
    log_level: str = "INFO"

    # Valid log levels
    VALID_LOG_LEVELS: ClassVar[set[str]] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        v_upper = v.upper()
        if v_upper not in cls.VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {v}. Must be one of {', '.join(cls.VALID_LOG_LEVELS)}"
            )
        return v_upper

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        """Validate the RPC endpoint is an http(s) URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ConfigError(f"RPC URL must start with http:// or https://, got {v!r}")
        return v

    @field_validator("metadata_max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        """Validate metadata retry count (1-10)."""
        if not 1 <= v <= 10:
            raise ConfigError(f"Metadata max retries must be between 1 and 10, got {v}")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate request timeout (0-300 seconds, exclusive of zero)."""
        if not 0 < v <= 300:
            raise ConfigError(f"Request timeout must be between 0 and 300 seconds, got {v}")
        return v

    @field_validator("token_ids")
    @classmethod
    def validate_token_ids(cls, v: str) -> str:
        """Validate explicit token ids are ASCII decimal uint256 values."""
        for item in _split_csv(v):
            if not (item.isascii() and item.isdigit()):
                raise ConfigError(f"Token id must be a non-negative integer, got {item!r}")
            if len(item) > len(str(UINT256_MAX)) or int(item) > UINT256_MAX:
                raise ConfigError(f"Token id exceeds uint256 range, got {item}")
        return v

    @property
    def gateway_list(self) -> list[str]:
        """Parse comma-separated gateways into a list.

        Returns:
            Gateway base URLs in priority order
        """
        return _split_csv(self.ipfs_gateways)

    @property
    def token_id_list(self) -> list[int] | None:
        """Parse explicit token ids.

        Returns:
            List of token ids, or None when the contract should be enumerated
        """
        ids = _split_csv(self.token_ids)
        if not ids:
            return None
        return [int(item) for item in ids]

    def resolver_config(self) -> ResolverConfig:
        """Build the resolver policy from these settings.

        Raises:
            ConfigError: If the gateway list is empty or malformed
        """
        try:
            return ResolverConfig(
                gateways=tuple(self.gateway_list),
                max_retries=self.metadata_max_retries,
                backoff_base_seconds=self.metadata_backoff_base_seconds,
                request_timeout=self.request_timeout_seconds,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid gateway configuration: {e}") from e

    def scan_config(self) -> ScanConfig:
        """Build the scan options from these settings.

        Raises:
            ConfigError: If an enumeration option is out of range
        """
        try:
            return ScanConfig(
                erc1155_probe_limit=self.erc1155_probe_limit,
                pace_every=self.pace_every,
                pace_delay_seconds=self.pace_delay_seconds,
                verify_resources=self.verify_resources,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid scan configuration: {e}") from e


def get_settings() -> Settings:
    """Get or create the global Settings instance (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
