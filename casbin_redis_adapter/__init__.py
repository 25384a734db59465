"""
Casbin policy adapter backed by a Redis list.

Usage::

    from casbin_redis_adapter import AdapterConfig, RedisAdapter

    with RedisAdapter(AdapterConfig(address="127.0.0.1:6379")) as adapter:
        adapter.load_policy(model)
"""

from shared.config import AdapterConfig, load_config
from shared.errors import (
    AdapterException, ArityError, ConfigError, DecodeError, FilterTypeError, TransportError
)

from .app.adapter import RedisAdapter
from .app.rules.models import CasbinRule, Filter

__all__ = [
    "AdapterConfig",
    "AdapterException",
    "ArityError",
    "CasbinRule",
    "ConfigError",
    "DecodeError",
    "Filter",
    "FilterTypeError",
    "RedisAdapter",
    "TransportError",
    "load_config",
]
