from __future__ import annotations

# todo_backend/db.py
import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import yaml

from .errors import (
    ConfigError,
    ConnectionLostError,
    ConnectionRefusedStoreError,
    StoreConnectionError,
    TooManyConnectionsError,
)

logger = logging.getLogger(__name__)

# Store config resolution order:
# 1) env TODO_DB_PATH (+ TODO_DB_POOL_SIZE / TODO_DB_TIMEOUT)
# 2) config.yaml `database.test_path` when running under tests
# 3) config.yaml `database.path`
# 4) nothing -> None; startup refuses to create a pool
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))


@dataclass
class StoreConfig:
    path: str
    pool_size: int = 10
    timeout: float = 5.0


def _read_config_yaml() -> dict:
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    section = cfg.get("database") or {}
    if not isinstance(section, dict):
        raise ConfigError("config.yaml: `database` must be a mapping")
    out = {}
    for k in ("path", "test_path"):
        v = section.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    for k in ("pool_size", "timeout"):
        if section.get(k) is not None:
            out[k] = section[k]
    return out


def load_store_config() -> StoreConfig | None:
    env_path = os.environ.get("TODO_DB_PATH")
    cfg = _read_config_yaml()
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg.get("test_path"):
        path = cfg["test_path"]
    elif cfg.get("path"):
        path = cfg["path"]
    else:
        return None

    try:
        pool_size = int(os.environ.get("TODO_DB_POOL_SIZE") or cfg.get("pool_size") or 10)
        timeout = float(os.environ.get("TODO_DB_TIMEOUT") or cfg.get("timeout") or 5.0)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid pool settings: {e}") from e
    if pool_size < 1:
        raise ConfigError("pool_size must be >= 1")

    # make sure the directory exists
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return StoreConfig(path=path, pool_size=pool_size, timeout=timeout)


def _connect(path: str, timeout: float = 5.0) -> sqlite3.Connection:
    """
    Open a SQLite connection in autocommit mode (transactions are explicit),
    with foreign_keys on and sqlite3.Row as row factory.
    """
    conn = sqlite3.connect(
        path,
        detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        check_same_thread=False,
        isolation_level=None,
        timeout=timeout,
    )
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
    except sqlite3.Error:
        conn.close()
        raise
    conn.row_factory = sqlite3.Row
    return conn


class ConnectionPool:
    """
    Bounded source of store connections.

    At most ``pool_size`` connections are leased at any time; a lease waits up
    to ``timeout`` seconds for a free slot. Released connections are closed,
    not parked for reuse.

    Usage:
        pool = ConnectionPool(StoreConfig("/path/to/todo.db"))

        with pool.connection() as conn:
            rows = conn.execute("SELECT * FROM todos").fetchall()
    """

    def __init__(self, config: StoreConfig):
        self.config = config
        self._slots = threading.BoundedSemaphore(config.pool_size)
        self._lock = threading.Lock()
        self._leased: set[sqlite3.Connection] = set()
        self._closed = False
        logger.info(f"ConnectionPool created: {config.path} (max={config.pool_size})")

    @property
    def closed(self) -> bool:
        return self._closed

    def get_connection(self) -> sqlite3.Connection:
        """
        Lease a fresh connection.

        Raises:
            ConnectionLostError: the pool is closed
            TooManyConnectionsError: no free slot within the timeout
            ConnectionRefusedStoreError: the store could not be opened
        """
        if self._closed:
            raise ConnectionLostError("Pool is closed")
        if not self._slots.acquire(timeout=self.config.timeout):
            raise TooManyConnectionsError(
                f"Timed out waiting for a connection (max={self.config.pool_size}, timeout={self.config.timeout}s)"
            )
        try:
            conn = _connect(self.config.path, self.config.timeout)
        except sqlite3.Error as e:
            self._slots.release()
            raise ConnectionRefusedStoreError(f"Unable to open store at {self.config.path}: {e}") from e
        with self._lock:
            self._leased.add(conn)
        return conn

    def is_leased(self, conn: sqlite3.Connection) -> bool:
        with self._lock:
            return conn in self._leased

    def release(self, conn: sqlite3.Connection | None) -> bool:
        """Destroy a leased connection and free its slot. False if it was not leased here."""
        if conn is None:
            return False
        with self._lock:
            if conn not in self._leased:
                return False
            self._leased.discard(conn)
        try:
            conn.close()
        except sqlite3.Error as e:
            logger.warning(f"Error closing connection: {e}")
        finally:
            self._slots.release()
        return True

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_connection()
        try:
            yield conn
        finally:
            self.release(conn)

    def close(self):
        self._closed = True
        logger.info("ConnectionPool closed")

    @property
    def stats(self) -> dict:
        with self._lock:
            leased = len(self._leased)
        return {
            "leased": leased,
            "max_size": self.config.pool_size,
            "closed": self._closed,
        }


def acquire_pool(config: StoreConfig | None) -> ConnectionPool:
    """
    Build a pool and probe it once (lease, SELECT 1, destroy) so that a
    misconfigured or unreachable store fails at startup rather than on the
    first request.
    """
    if config is None:
        raise ConfigError("Store configuration is not set up properly.")

    pool = ConnectionPool(config)
    try:
        with pool.connection() as conn:
            conn.execute("SELECT 1")
    except ConnectionRefusedStoreError:
        logger.error("Store connection was refused.")
        raise
    except TooManyConnectionsError:
        logger.error("Store has too many connections.")
        raise
    except ConnectionLostError:
        logger.error("Store connection was closed.")
        raise
    except sqlite3.Error as e:
        logger.error(f"Store probe failed: {e}")
        raise ConnectionRefusedStoreError(f"Store probe failed: {e}") from e
    return pool


# process-wide pool
_global_pool: ConnectionPool | None = None
_pool_lock = threading.Lock()


def init_pool(config: StoreConfig | None = None) -> ConnectionPool:
    global _global_pool

    with _pool_lock:
        if _global_pool is None:
            _global_pool = acquire_pool(config or load_store_config())
        return _global_pool


def get_pool() -> ConnectionPool:
    with _pool_lock:
        if _global_pool is None:
            raise ConfigError("Connection pool is not initialised; call init_pool() first")
        return _global_pool


def close_pool():
    global _global_pool

    with _pool_lock:
        if _global_pool is not None:
            _global_pool.close()
            _global_pool = None


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Direct SQLite connection outside the pool, for schema setup and tests.
    Uses the explicit db_path, else the configured store path.
    """
    path = db_path
    if path is None:
        cfg = load_store_config()
        if cfg is None:
            raise ConfigError("Store configuration is not set up properly.")
        path = cfg.path
    try:
        conn = _connect(path)
    except sqlite3.Error as e:
        raise StoreConnectionError(f"Unable to open store at {path}: {e}") from e
    try:
        yield conn
    finally:
        conn.close()
