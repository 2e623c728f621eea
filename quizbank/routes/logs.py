from __future__ import annotations

from fastapi import APIRouter, Query

from ..logs import EntityType, OperationAction, search_operation_logs

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    action: OperationAction | None = None,
    entity_type: EntityType | None = None,
    entity_id: int | None = None,
    query: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
):
    total, items = search_operation_logs(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        q=query,
        ts_from=ts_from,
        ts_to=ts_to,
        page=page,
        size=size,
    )
    return {"total": total, "items": items}
