"""
Connection pool and store configuration tests.
"""
from __future__ import annotations

import sqlite3

import pytest

from todo_backend import db as db_mod
from todo_backend.db import ConnectionPool, StoreConfig, acquire_pool, close_pool, get_pool, init_pool, load_store_config
from todo_backend.errors import (
    ConfigError,
    ConnectionLostError,
    ConnectionRefusedStoreError,
    StoreConnectionError,
    TooManyConnectionsError,
)


def test_acquire_pool_without_config_fails():
    with pytest.raises(ConfigError):
        acquire_pool(None)


def test_acquire_pool_probes_and_frees_slot(tmp_db_path):
    pool = acquire_pool(StoreConfig(path=tmp_db_path, pool_size=1, timeout=0.2))
    # the probe connection was destroyed, so the single slot is free again
    assert pool.stats["leased"] == 0
    with pool.connection() as conn:
        assert conn.execute("SELECT 1 AS one").fetchone()["one"] == 1


def test_acquire_pool_refused_when_store_cannot_open(tmp_path):
    missing = tmp_path / "no_such_dir" / "todo.db"
    with pytest.raises(ConnectionRefusedStoreError) as ei:
        acquire_pool(StoreConfig(path=str(missing), pool_size=1, timeout=0.2))
    assert isinstance(ei.value, StoreConnectionError)


def test_pool_exhaustion_raises_too_many_connections(tmp_db_path):
    pool = ConnectionPool(StoreConfig(path=tmp_db_path, pool_size=1, timeout=0.1))
    held = pool.get_connection()
    try:
        with pytest.raises(TooManyConnectionsError):
            pool.get_connection()
    finally:
        pool.release(held)
    # slot is usable again after the release
    with pool.connection():
        assert pool.stats["leased"] == 1
    assert pool.stats["leased"] == 0


def test_release_destroys_connection(tmp_db_path):
    pool = ConnectionPool(StoreConfig(path=tmp_db_path))
    conn = pool.get_connection()
    assert pool.release(conn) is True
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")
    # a second release is a no-op
    assert pool.release(conn) is False
    assert pool.release(None) is False


def test_closed_pool_raises_connection_lost(tmp_db_path):
    pool = ConnectionPool(StoreConfig(path=tmp_db_path))
    pool.close()
    assert pool.closed
    with pytest.raises(ConnectionLostError):
        pool.get_connection()


def test_global_pool_lifecycle(tmp_db_path):
    close_pool()
    with pytest.raises(ConfigError):
        get_pool()
    p = init_pool(StoreConfig(path=tmp_db_path))
    try:
        assert get_pool() is p
        # later calls reuse the same pool
        assert init_pool(StoreConfig(path=tmp_db_path)) is p
    finally:
        close_pool()
    assert p.closed
    with pytest.raises(ConfigError):
        get_pool()


def test_load_store_config_from_env(monkeypatch, tmp_path):
    path = tmp_path / "sub" / "todo.db"
    monkeypatch.setenv("TODO_DB_PATH", str(path))
    monkeypatch.setenv("TODO_DB_POOL_SIZE", "3")
    monkeypatch.setenv("TODO_DB_TIMEOUT", "2.5")
    cfg = load_store_config()
    assert cfg == StoreConfig(path=str(path), pool_size=3, timeout=2.5)
    assert (tmp_path / "sub").is_dir()


def test_load_store_config_missing_returns_none(monkeypatch, tmp_path):
    monkeypatch.delenv("TODO_DB_PATH", raising=False)
    monkeypatch.setattr(db_mod, "_PROJECT_ROOT", str(tmp_path))
    assert load_store_config() is None
    with pytest.raises(ConfigError):
        acquire_pool(load_store_config())


def test_load_store_config_from_yaml(monkeypatch, tmp_path):
    monkeypatch.delenv("TODO_DB_PATH", raising=False)
    monkeypatch.delenv("TODO_DB_POOL_SIZE", raising=False)
    monkeypatch.delenv("TODO_DB_TIMEOUT", raising=False)
    monkeypatch.setattr(db_mod, "_PROJECT_ROOT", str(tmp_path))
    (tmp_path / "config.yaml").write_text(
        "database:\n"
        f"  path: {tmp_path / 'prod.db'}\n"
        f"  test_path: {tmp_path / 'test.db'}\n"
        "  pool_size: 4\n",
        encoding="utf-8",
    )
    # pytest sets PYTEST_CURRENT_TEST, so the test path wins
    cfg = load_store_config()
    assert cfg.path == str(tmp_path / "test.db")
    assert cfg.pool_size == 4
    assert cfg.timeout == 5.0


def test_load_store_config_rejects_bad_pool_size(monkeypatch, tmp_path):
    monkeypatch.setenv("TODO_DB_PATH", str(tmp_path / "todo.db"))
    monkeypatch.setenv("TODO_DB_POOL_SIZE", "lots")
    with pytest.raises(ConfigError):
        load_store_config()
