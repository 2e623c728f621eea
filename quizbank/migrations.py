"""Schema bootstrap for the quiz database.

Every statement is idempotent, so the list can be replayed on each new
connection. The first statement is a per-connection pragma and must run
before anything touches the tables, otherwise cascades are not enforced.
"""
from __future__ import annotations

import logging
from sqlite3 import Connection

logger = logging.getLogger(__name__)

STATEMENTS = [
    "PRAGMA foreign_keys = ON;",
    """CREATE TABLE IF NOT EXISTS themes (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      name TEXT NOT NULL UNIQUE COLLATE NOCASE,
      description TEXT,
      color TEXT NOT NULL,
      created_at TEXT NOT NULL DEFAULT (datetime('now'))
    );""",
    """CREATE TABLE IF NOT EXISTS questions (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      theme_id INTEGER NOT NULL,
      statement TEXT NOT NULL,
      explanation TEXT,
      created_at TEXT NOT NULL DEFAULT (datetime('now')),
      FOREIGN KEY(theme_id) REFERENCES themes(id) ON DELETE CASCADE
    );""",
    """CREATE TABLE IF NOT EXISTS alternatives (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      question_id INTEGER NOT NULL,
      text TEXT NOT NULL,
      is_correct INTEGER NOT NULL DEFAULT 0,
      FOREIGN KEY(question_id) REFERENCES questions(id) ON DELETE CASCADE
    );""",
    "CREATE INDEX IF NOT EXISTS idx_question_theme ON questions(theme_id);",
    "CREATE INDEX IF NOT EXISTS idx_alternative_question ON alternatives(question_id);",
    """CREATE TABLE IF NOT EXISTS operation_log (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      ts TEXT NOT NULL,
      user TEXT NOT NULL,
      action TEXT NOT NULL,
      entity_type TEXT,
      entity_id TEXT,
      request_id TEXT,
      before_json TEXT,
      after_json TEXT,
      payload_json TEXT,
      result TEXT,
      err_msg TEXT,
      latency_ms INTEGER
    );""",
    "CREATE INDEX IF NOT EXISTS idx_log_ts ON operation_log(ts);",
    "CREATE INDEX IF NOT EXISTS idx_log_entity ON operation_log(entity_type, entity_id);",
]


def apply_migrations(conn: Connection) -> None:
    """Run STATEMENTS in order. Errors propagate; startup must not continue."""
    for statement in STATEMENTS:
        conn.execute(statement)
    logger.info("Applied %d schema statements", len(STATEMENTS))
