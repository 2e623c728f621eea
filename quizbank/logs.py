"""
Audit trail of theme/question mutations.

Each mutation is wrapped in an ``OperationLogContext``; the service fills in
the entity id and before/after snapshots, and leaving the ``with`` block
writes one ``operation_log`` row (OK, or ERROR with the exception text).
The table is part of the regular schema, see ``migrations.STATEMENTS``.
"""
from __future__ import annotations

import json
import logging
import time
import uuid
import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .db import get_conn

logger = logging.getLogger(__name__)


class EntityType(str, Enum):
    THEME = "THEME"
    QUESTION = "QUESTION"


class OperationAction(str, Enum):
    """Mutations recorded in operation_log."""

    THEME_CREATE = "THEME_CREATE"
    THEME_UPDATE = "THEME_UPDATE"
    THEME_DELETE = "THEME_DELETE"
    QUESTION_CREATE = "QUESTION_CREATE"
    QUESTION_UPDATE = "QUESTION_UPDATE"
    QUESTION_DELETE = "QUESTION_DELETE"

    @property
    def entity_type(self) -> EntityType:
        return EntityType(self.value.split("_", 1)[0])


def _dump(obj) -> Optional[str]:
    return json.dumps(obj, ensure_ascii=False) if obj is not None else None


class OperationLogContext:
    def __init__(self, action: OperationAction | str, payload: Any = None, user: str = "owner"):
        self.action = OperationAction(action)
        self.user = user
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.entity_type = self.action.entity_type.value
        self.entity_id: Optional[str] = None
        self.before = None
        self.after = None
        self.payload = payload
        self.written = False

    def set_entity(self, entity_id) -> None:
        self.entity_id = str(entity_id)

    def set_before(self, obj) -> None:
        self.before = obj

    def set_after(self, obj) -> None:
        self.after = obj

    def write(self, result: str = "OK", err: Optional[str] = None) -> None:
        """Insert the record; a context is written at most once."""
        if self.written:
            return
        rec = {
            "ts": dt.datetime.now(dt.timezone.utc).isoformat(),
            "user": self.user,
            "action": self.action.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "before_json": _dump(self.before),
            "after_json": _dump(self.after),
            "payload_json": _dump(self.payload),
            "result": result,
            "err_msg": err,
            "latency_ms": int((time.perf_counter() - self.start) * 1000),
        }
        with get_conn() as conn:
            conn.execute(
                "INSERT INTO operation_log(ts, user, action, entity_type, entity_id, request_id, "
                "before_json, after_json, payload_json, result, err_msg, latency_ms) "
                "VALUES(:ts, :user, :action, :entity_type, :entity_id, :request_id, "
                ":before_json, :after_json, :payload_json, :result, :err_msg, :latency_ms)",
                rec,
            )
        self.written = True

    def __enter__(self) -> "OperationLogContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            self.write("OK")
        else:
            # HTTPException carries its message in .detail
            self.write("ERROR", str(getattr(exc, "detail", None) or exc))
            logger.info("%s failed: %s", self.action.value, exc)
        return False


def search_operation_logs(
    action: OperationAction | None = None,
    entity_type: EntityType | None = None,
    entity_id: str | None = None,
    q: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    page: int = 1,
    size: int = 20,
) -> Tuple[int, List[Dict[str, Any]]]:
    """Newest first. `q` matches inside the payload and the before/after snapshots."""
    where = []
    params: Dict[str, Any] = {}
    if action is not None:
        where.append("action = :action")
        params["action"] = OperationAction(action).value
    if entity_type is not None:
        where.append("entity_type = :entity_type")
        params["entity_type"] = EntityType(entity_type).value
    if entity_id is not None:
        where.append("entity_id = :entity_id")
        params["entity_id"] = str(entity_id)
    if q:
        where.append("(payload_json LIKE :q OR before_json LIKE :q OR after_json LIKE :q)")
        params["q"] = f"%{q}%"
    if ts_from:
        where.append("ts >= :ts_from")
        params["ts_from"] = ts_from
    if ts_to:
        where.append("ts <= :ts_to")
        params["ts_to"] = ts_to
    wh = " WHERE " + " AND ".join(where) if where else ""
    with get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(1) AS cnt FROM operation_log{wh}", params).fetchone()["cnt"]
        rows = conn.execute(
            f"SELECT * FROM operation_log{wh} ORDER BY ts DESC, id DESC LIMIT :limit OFFSET :offset",
            {**params, "limit": size, "offset": (page - 1) * size},
        ).fetchall()
    return total, [dict(r) for r in rows]
