from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..logs import OperationAction, OperationLogContext
from ..services.question_svc import list_questions_by_theme
from ..services.theme_svc import create_theme, delete_theme, get_theme, list_themes, update_theme

router = APIRouter()


class ThemeCreate(BaseModel):
    name: str
    description: str | None = None
    color: str | None = None


class ThemeUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    color: str | None = None


@router.get("/api/themes")
def api_themes_list():
    return {"items": list_themes()}


@router.post("/api/themes", status_code=201)
def api_theme_create(body: ThemeCreate):
    with OperationLogContext(OperationAction.THEME_CREATE, payload=body.dict()) as log:
        return create_theme(body.name, body.description, body.color, log=log)


@router.get("/api/themes/{theme_id}")
def api_theme_get(theme_id: int):
    theme = get_theme(theme_id)
    if theme is None:
        raise HTTPException(status_code=404, detail="theme_not_found")
    return theme


@router.patch("/api/themes/{theme_id}")
def api_theme_update(theme_id: int, body: ThemeUpdate):
    changes = body.dict(exclude_unset=True)
    with OperationLogContext(OperationAction.THEME_UPDATE, payload={"id": theme_id, **changes}) as log:
        theme = update_theme(theme_id, changes, log=log)
        if theme is None:
            raise HTTPException(status_code=404, detail="theme_not_found")
        return theme


@router.delete("/api/themes/{theme_id}")
def api_theme_delete(theme_id: int):
    with OperationLogContext(OperationAction.THEME_DELETE, payload={"id": theme_id}) as log:
        if not delete_theme(theme_id, log=log):
            raise HTTPException(status_code=404, detail="theme_not_found")
    return {"message": "ok"}


@router.get("/api/themes/{theme_id}/questions")
def api_theme_questions(theme_id: int):
    return {"items": list_questions_by_theme(theme_id)}
