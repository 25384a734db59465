"""
Shared pytest fixtures for the Casbin Redis adapter.
"""

import fakeredis
import pytest
import redis

from shared.config import AdapterConfig
from shared.test_helpers import TestDataFactory
from casbin_redis_adapter.app.adapter import RedisAdapter
from casbin_redis_adapter.app.storage import connection


@pytest.fixture
def redis_server():
    """In-process Redis server with Lua scripting."""
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server):
    """Direct client for inspecting the stored list."""
    client = fakeredis.FakeRedis(server=redis_server)
    yield client
    client.close()


@pytest.fixture
def redis_pool(redis_server):
    """Connection pool bound to the fake server."""
    pool = redis.ConnectionPool(server=redis_server, connection_class=fakeredis.FakeConnection)
    yield pool
    pool.disconnect()


@pytest.fixture
def adapter(redis_pool):
    """Pool-backed adapter on the default key."""
    a = RedisAdapter(AdapterConfig(pool=redis_pool))
    yield a
    a.close()


@pytest.fixture
def dialed(monkeypatch, redis_server):
    """Route dialed connections to the fake server and record dial kwargs."""
    calls = []

    def fake_redis(**kwargs):
        calls.append(kwargs)
        return fakeredis.FakeRedis(server=redis_server)

    monkeypatch.setattr(connection, "Redis", fake_redis)
    return calls


@pytest.fixture
def single_adapter(dialed):
    """Adapter holding one dialed connection."""
    a = RedisAdapter(AdapterConfig(network="tcp", address="127.0.0.1:6379", key="single_rules"))
    yield a
    a.close()


@pytest.fixture
def rbac_model():
    """Model holding the sample RBAC policy."""
    return TestDataFactory.create_rbac_model()
