"""
Shared configuration management for the Casbin Redis adapter.
"""

from typing import Any, Dict, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from redis import ConnectionPool

from .errors import ConfigError

DEFAULT_KEY = "casbin_rules"
SUPPORTED_NETWORKS = ("tcp", "unix")


class AdapterConfig(BaseSettings):
    """Adapter configuration.

    Values come from keyword arguments first, then ``CASBIN_REDIS_*``
    environment variables, then a local ``.env`` file. When ``pool`` is
    set every dial setting (network, address, credentials, TLS) is ignored
    and connections are checked out of the pool instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="CASBIN_REDIS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        arbitrary_types_allowed=True,
    )

    # Connection
    network: str = Field(default="tcp", description="tcp or unix")
    address: Optional[str] = Field(default=None, description="host:port, or socket path for unix")
    key: str = Field(default=DEFAULT_KEY, description="Redis list holding the rules")
    username: Optional[str] = None
    password: Optional[str] = None
    db: int = 0

    # TLS
    tls_enabled: bool = False
    tls_ca_certs: Optional[str] = None
    tls_certfile: Optional[str] = None
    tls_keyfile: Optional[str] = None
    tls_cert_reqs: str = Field(default="required", description="required, optional or none")

    # Timeouts (seconds)
    socket_timeout: Optional[float] = None
    socket_connect_timeout: Optional[float] = None

    # Observability
    log_level: str = "info"

    # Existing pool, never read from the environment
    pool: Optional[ConnectionPool] = Field(default=None, exclude=True)

    def storage_key(self) -> str:
        """Return the list key, falling back to the default for empty values."""
        return self.key or DEFAULT_KEY

    def validate_connection(self) -> None:
        """Check that a connection can be dialed from this configuration."""
        if self.pool is not None:
            return
        if not self.network:
            raise ConfigError("network is required when not using a pool")
        if self.network not in SUPPORTED_NETWORKS:
            raise ConfigError(
                f"unsupported network: {self.network}",
                {"supported": list(SUPPORTED_NETWORKS)},
            )
        if not self.address:
            raise ConfigError("address is required when not using a pool")
        if self.tls_cert_reqs not in ("required", "optional", "none"):
            raise ConfigError(f"invalid tls_cert_reqs: {self.tls_cert_reqs}")

    def connection_kwargs(self) -> Dict[str, Any]:
        """Build ``redis.Redis`` keyword arguments for a dialed connection."""
        self.validate_connection()

        kwargs: Dict[str, Any] = {
            "db": self.db,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.socket_connect_timeout,
        }
        # Redis 6 ACL login needs both; password-only uses legacy AUTH
        if self.username:
            kwargs["username"] = self.username
        if self.password:
            kwargs["password"] = self.password

        if self.network == "unix":
            kwargs["unix_socket_path"] = self.address
            return kwargs

        host, port = parse_address(self.address)
        kwargs["host"] = host
        kwargs["port"] = port
        if self.tls_enabled:
            kwargs.update(
                ssl=True,
                ssl_ca_certs=self.tls_ca_certs,
                ssl_certfile=self.tls_certfile,
                ssl_keyfile=self.tls_keyfile,
                ssl_cert_reqs=self.tls_cert_reqs,
            )
        return kwargs


def parse_address(address: str) -> tuple:
    """Split ``host:port`` (or ``[ipv6]:port``) into host and integer port."""
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ConfigError(f"address must be host:port, got {address!r}")
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"invalid port in address {address!r}")
    if not 0 < port_number < 65536:
        raise ConfigError(f"port out of range in address {address!r}")
    return host.strip("[]"), port_number


def load_config(**overrides: Any) -> AdapterConfig:
    """Build an AdapterConfig, reporting invalid values as ConfigError."""
    try:
        return AdapterConfig(**overrides)
    except ValidationError as e:
        raise ConfigError(
            "invalid adapter configuration",
            {"errors": [err["msg"] for err in e.errors()]},
        ) from e
