from __future__ import annotations

from sqlite3 import Connection
from typing import Any, Dict, List, Optional

_THEME_COLUMNS = ("name", "description", "color")

_SELECT_WITH_COUNT = """
SELECT t.id, t.name, t.description, t.color, t.created_at,
       IFNULL(q.cnt, 0) AS question_count
FROM themes t
LEFT JOIN (
    SELECT theme_id, COUNT(*) AS cnt FROM questions GROUP BY theme_id
) q ON q.theme_id = t.id
"""


def list_themes(conn: Connection) -> List[Dict[str, Any]]:
    rows = conn.execute(_SELECT_WITH_COUNT + " ORDER BY t.name COLLATE NOCASE, t.id").fetchall()
    return [dict(r) for r in rows]


def get_theme(conn: Connection, theme_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(_SELECT_WITH_COUNT + " WHERE t.id = ?", (theme_id,)).fetchone()
    return dict(row) if row else None


def insert_theme(conn: Connection, name: str, description: str | None, color: str) -> int:
    cur = conn.execute(
        "INSERT INTO themes(name, description, color) VALUES(?,?,?)",
        (name, description, color),
    )
    return int(cur.lastrowid)


def update_theme_fields(conn: Connection, theme_id: int, fields: Dict[str, Any]) -> int:
    """UPDATE only the given columns; returns affected row count."""
    cols = [c for c in _THEME_COLUMNS if c in fields]
    if not cols:
        return 0
    sql = f"UPDATE themes SET {', '.join(c + '=?' for c in cols)} WHERE id=?"
    params = [fields[c] for c in cols] + [theme_id]
    return conn.execute(sql, params).rowcount


def delete_theme(conn: Connection, theme_id: int) -> int:
    return conn.execute("DELETE FROM themes WHERE id=?", (theme_id,)).rowcount
