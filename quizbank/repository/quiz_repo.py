from __future__ import annotations

from sqlite3 import Connection
from typing import Any, Dict, List

from .question_repo import hydrate


def count_by_theme(conn: Connection, theme_id: int) -> int:
    row = conn.execute("SELECT COUNT(1) AS c FROM questions WHERE theme_id=?", (theme_id,)).fetchone()
    return int(row["c"]) if row else 0


def pick_random(conn: Connection, theme_id: int, amount: int) -> List[Dict[str, Any]]:
    # LIMIT with a negative value means "no limit" in SQLite
    if amount <= 0:
        return []
    rows = conn.execute(
        "SELECT id, theme_id, statement, explanation, created_at FROM questions "
        "WHERE theme_id=? ORDER BY RANDOM() LIMIT ?",
        (theme_id, int(amount)),
    ).fetchall()
    return hydrate(conn, rows)
