from __future__ import annotations

# quizbank/db.py
import logging
import os
import sqlite3
import threading
from concurrent.futures import Future
from contextlib import contextmanager
from typing import Iterator

import yaml

from .migrations import apply_migrations

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) env QUIZ_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under test)
# 3) config.yaml db_path
# 4) fallback: quiz.db at the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "quiz.db")

_CONFIG_KEYS = ("db_path", "test_db_path", "default_theme_color", "quiz_default_amount")


def read_config_yaml(path: str | None = None) -> dict:
    cfg_path = path or os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    if not isinstance(cfg, dict):
        return {}
    out = {}
    for k in _CONFIG_KEYS:
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
        elif isinstance(v, int) and not isinstance(v, bool):
            out[k] = v
    return out


def get_db_path() -> str:
    env_path = os.environ.get("QUIZ_DB_PATH")
    cfg = read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


class ConnectionManager:
    """Owns the single shared SQLite handle.

    The first ``acquire()`` opens the connection and runs the migrations.
    Callers arriving while that is in flight wait on the same future, so the
    handle is opened and migrated exactly once. A failed initialization is
    reported to every waiter and cleared, so the next ``acquire()`` starts
    over.
    """

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path
        self._state_lock = threading.Lock()
        self._ready: Future | None = None
        self.lock = threading.RLock()

    def _open(self) -> sqlite3.Connection:
        path = self._db_path or get_db_path()
        conn = sqlite3.connect(
            path,
            check_same_thread=False,
            isolation_level=None,
        )
        try:
            conn.row_factory = sqlite3.Row
            apply_migrations(conn)
        except BaseException:
            conn.close()
            raise
        logger.info("Opened quiz database at %s", path)
        return conn

    def acquire(self) -> sqlite3.Connection:
        with self._state_lock:
            ready = self._ready
            owner = ready is None
            if owner:
                ready = self._ready = Future()
        if owner:
            try:
                conn = self._open()
            except BaseException as e:
                with self._state_lock:
                    if self._ready is ready:
                        self._ready = None
                ready.set_exception(e)
                raise
            ready.set_result(conn)
        return ready.result()

    def release(self) -> None:
        with self._state_lock:
            ready, self._ready = self._ready, None
        if ready is None:
            return
        # an initialization that failed has nothing to close
        if ready.exception() is None:
            with self.lock:
                ready.result().close()
            logger.info("Closed quiz database")

    @property
    def is_open(self) -> bool:
        ready = self._ready
        return ready is not None and ready.done() and ready.exception() is None


_manager = ConnectionManager()


def get_manager() -> ConnectionManager:
    return _manager


def initialize_database() -> None:
    """Open and migrate the shared database. Idempotent."""
    _manager.acquire()


def close_database() -> None:
    _manager.release()


@contextmanager
def get_conn(manager: ConnectionManager | None = None) -> Iterator[sqlite3.Connection]:
    """
    Yield the shared SQLite connection (foreign_keys on, row_factory Row).
    The manager lock is held for the whole block; the connection stays open.
    """
    mgr = manager or _manager
    conn = mgr.acquire()
    with mgr.lock:
        yield conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """BEGIN ... COMMIT; ROLLBACK and re-raise on any exception."""
    conn.execute("BEGIN")
    try:
        yield conn
        conn.execute("COMMIT")
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
            logger.warning("Transaction rolled back")
        raise
