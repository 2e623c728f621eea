"""
Question / alternative data access.

Rows come back as dicts; ``is_correct`` is converted to bool and hydrated
questions carry their alternatives in insertion order.
"""
from __future__ import annotations

from sqlite3 import Connection, Row
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

_QUESTION_COLUMNS = ("statement", "explanation")


def _alternative_dict(row: Row) -> Dict[str, Any]:
    d = dict(row)
    d["is_correct"] = d["is_correct"] == 1
    return d


def alternatives_for(conn: Connection, question_ids: Sequence[int]) -> Dict[int, List[Dict[str, Any]]]:
    """Alternatives grouped by question id, each bucket ordered by id."""
    ids = list(question_ids)
    if not ids:
        return {}
    q = "SELECT id, question_id, text, is_correct FROM alternatives WHERE question_id IN ({}) ORDER BY question_id, id".format(
        ",".join(["?"] * len(ids))
    )
    out: Dict[int, List[Dict[str, Any]]] = {}
    for r in conn.execute(q, ids).fetchall():
        out.setdefault(r["question_id"], []).append(_alternative_dict(r))
    return out


def hydrate(conn: Connection, rows: Iterable[Row]) -> List[Dict[str, Any]]:
    """Attach alternatives to question rows, keeping the row order."""
    questions = [dict(r) for r in rows]
    bucket = alternatives_for(conn, [q["id"] for q in questions])
    for q in questions:
        q["alternatives"] = bucket.get(q["id"], [])
    return questions


def list_by_theme(conn: Connection, theme_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT id, theme_id, statement, explanation, created_at FROM questions "
        "WHERE theme_id=? ORDER BY created_at DESC, id DESC",
        (theme_id,),
    ).fetchall()
    return hydrate(conn, rows)


def get_question(conn: Connection, question_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT id, theme_id, statement, explanation, created_at FROM questions WHERE id=?",
        (question_id,),
    ).fetchone()
    if row is None:
        return None
    return hydrate(conn, [row])[0]


def get_questions(conn: Connection, question_ids: Sequence[int]) -> List[Dict[str, Any]]:
    ids = list(question_ids)
    if not ids:
        return []
    q = "SELECT id, theme_id, statement, explanation, created_at FROM questions WHERE id IN ({}) ORDER BY id".format(
        ",".join(["?"] * len(ids))
    )
    return hydrate(conn, conn.execute(q, ids).fetchall())


def insert_question(conn: Connection, theme_id: int, statement: str, explanation: str | None) -> int:
    cur = conn.execute(
        "INSERT INTO questions(theme_id, statement, explanation) VALUES(?,?,?)",
        (theme_id, statement, explanation),
    )
    return int(cur.lastrowid)


def insert_alternatives(conn: Connection, question_id: int, alternatives: Iterable[Tuple[str, bool]]) -> None:
    conn.executemany(
        "INSERT INTO alternatives(question_id, text, is_correct) VALUES(?,?,?)",
        [(question_id, text, 1 if is_correct else 0) for text, is_correct in alternatives],
    )


def delete_alternatives(conn: Connection, question_id: int) -> int:
    return conn.execute("DELETE FROM alternatives WHERE question_id=?", (question_id,)).rowcount


def update_question_fields(conn: Connection, question_id: int, fields: Dict[str, Any]) -> int:
    cols = [c for c in _QUESTION_COLUMNS if c in fields]
    if not cols:
        return 0
    sql = f"UPDATE questions SET {', '.join(c + '=?' for c in cols)} WHERE id=?"
    return conn.execute(sql, [fields[c] for c in cols] + [question_id]).rowcount


def delete_question(conn: Connection, question_id: int) -> int:
    return conn.execute("DELETE FROM questions WHERE id=?", (question_id,)).rowcount
