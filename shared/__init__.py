"""
Shared utilities for the Casbin Redis adapter.

This package aggregates common building blocks consumed by the adapter:

- config: Adapter configuration via pydantic-settings
- logging: Structured logging with structlog
- metrics: Prometheus metrics helpers
- errors: Canonical error types

Do not import from casbin_redis_adapter into shared/.
"""
