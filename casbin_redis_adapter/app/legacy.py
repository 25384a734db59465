"""
Deprecated constructors kept for callers of the older adapter API.

Each one only translates its arguments into an AdapterConfig and calls
RedisAdapter. New code should build the config directly.
"""

import warnings
from typing import Any, Callable, Dict, Optional

from redis import ConnectionPool

from shared.config import load_config

from .adapter import RedisAdapter

Option = Callable[[Dict[str, Any]], None]


def _deprecated(name: str) -> None:
    warnings.warn(
        f"{name} is deprecated, use RedisAdapter(AdapterConfig(...)) instead",
        DeprecationWarning,
        stacklevel=3,
    )


def new_adapter_basic(network: str, address: str) -> RedisAdapter:
    _deprecated("new_adapter_basic")
    return RedisAdapter(load_config(network=network, address=address))


def new_adapter_with_user(network: str, address: str, username: str, password: str) -> RedisAdapter:
    _deprecated("new_adapter_with_user")
    return RedisAdapter(load_config(network=network, address=address, username=username, password=password))


def new_adapter_with_password(network: str, address: str, password: str) -> RedisAdapter:
    _deprecated("new_adapter_with_password")
    return RedisAdapter(load_config(network=network, address=address, password=password))


def new_adapter_with_key(network: str, address: str, key: str) -> RedisAdapter:
    _deprecated("new_adapter_with_key")
    return RedisAdapter(load_config(network=network, address=address, key=key))


def new_adapter_with_pool(pool: ConnectionPool) -> RedisAdapter:
    _deprecated("new_adapter_with_pool")
    return RedisAdapter(load_config(pool=pool))


def new_adapter_with_pool_and_options(pool: ConnectionPool, *options: Option) -> RedisAdapter:
    """Pool-backed adapter; only the key option has an effect next to a pool."""
    _deprecated("new_adapter_with_pool_and_options")
    settings = _apply(options)
    settings["pool"] = pool
    return RedisAdapter(load_config(**settings))


def new_adapter_with_option(*options: Option) -> RedisAdapter:
    _deprecated("new_adapter_with_option")
    return RedisAdapter(load_config(**_apply(options)))


def _apply(options) -> Dict[str, Any]:
    settings: Dict[str, Any] = {}
    for option in options:
        option(settings)
    return settings


def _setting(name: str, value: Any) -> Option:
    def option(settings: Dict[str, Any]) -> None:
        settings[name] = value
    return option


def with_network(network: str) -> Option:
    return _setting("network", network)


def with_address(address: str) -> Option:
    return _setting("address", address)


def with_username(username: str) -> Option:
    return _setting("username", username)


def with_password(password: str) -> Option:
    return _setting("password", password)


def with_key(key: str) -> Option:
    return _setting("key", key)


def with_tls(
    ca_certs: Optional[str] = None,
    certfile: Optional[str] = None,
    keyfile: Optional[str] = None,
    cert_reqs: str = "required",
) -> Option:
    def option(settings: Dict[str, Any]) -> None:
        settings.update(
            tls_enabled=True,
            tls_ca_certs=ca_certs,
            tls_certfile=certfile,
            tls_keyfile=keyfile,
            tls_cert_reqs=cert_reqs,
        )
    return option
