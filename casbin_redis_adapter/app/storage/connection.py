"""
Connection providers for the Redis adapter.

An adapter either dials one long-lived connection and reuses it for every
operation, or checks one connection out of a caller-supplied pool per
operation. Both close exactly once.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from redis import ConnectionPool, Redis
from redis.exceptions import RedisError

from shared.errors import TransportError
from shared.logging import get_logger


class ConnectionProvider:
    """Hands out Redis clients to adapter operations."""

    def __init__(self):
        self.logger = get_logger("casbin_redis_adapter.storage.connection")
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self) -> Redis:
        raise NotImplementedError

    def release(self, conn: Redis) -> None:
        raise NotImplementedError

    def _shutdown(self) -> None:
        raise NotImplementedError

    def close(self) -> bool:
        """Release underlying resources. Returns False if already closed."""
        with self._lock:
            if self._closed:
                return False
            self._closed = True
        self._shutdown()
        return True

    @contextmanager
    def connection(self) -> Iterator[Redis]:
        """Hold one connection for the duration of an operation.

        Redis failures raised inside the block surface as TransportError.
        """
        if self._closed:
            raise TransportError("adapter is closed")

        try:
            conn = self.acquire()
        except RedisError as e:
            raise TransportError(str(e), {"stage": "acquire"}) from e

        try:
            yield conn
        except RedisError as e:
            raise TransportError(str(e)) from e
        finally:
            self.release(conn)


class SingleConnectionProvider(ConnectionProvider):
    """One dialed connection shared by every operation."""

    def __init__(self, client: Redis):
        super().__init__()
        self.client = client

    @classmethod
    def dial(cls, connection_kwargs: Dict[str, Any]) -> "SingleConnectionProvider":
        """Dial Redis and check the connection before handing it out."""
        client = Redis(single_connection_client=True, **connection_kwargs)
        try:
            client.ping()
        except RedisError as e:
            client.close()
            raise TransportError(f"failed to connect to Redis: {e}", {"stage": "dial"}) from e
        return cls(client)

    def acquire(self) -> Redis:
        return self.client

    def release(self, conn: Redis) -> None:
        # The shared connection stays open until close()
        return None

    def _shutdown(self) -> None:
        self.client.close()
        self.logger.info("Redis connection closed")


class PoolConnectionProvider(ConnectionProvider):
    """One pooled connection per operation."""

    def __init__(self, pool: ConnectionPool):
        super().__init__()
        self.pool = pool

    def acquire(self) -> Redis:
        # Checks a connection out of the pool until close()
        return Redis(connection_pool=self.pool, single_connection_client=True)

    def release(self, conn: Optional[Redis]) -> None:
        if conn is not None:
            conn.close()

    def _shutdown(self) -> None:
        self.pool.disconnect()
        self.logger.info("Redis connection pool closed")
