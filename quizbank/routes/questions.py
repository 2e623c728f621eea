from __future__ import annotations

import sqlite3

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..logs import OperationAction, OperationLogContext
from ..services.question_svc import (
    create_question,
    delete_question,
    get_question_with_alternatives,
    update_question,
)

router = APIRouter()


class AlternativeIn(BaseModel):
    text: str
    is_correct: bool = False


class QuestionCreate(BaseModel):
    theme_id: int
    statement: str
    explanation: str | None = None
    alternatives: list[AlternativeIn]


class QuestionUpdate(BaseModel):
    statement: str | None = None
    explanation: str | None = None
    alternatives: list[AlternativeIn] | None = None


@router.post("/api/questions", status_code=201)
def api_question_create(body: QuestionCreate):
    with OperationLogContext(OperationAction.QUESTION_CREATE, payload=body.dict()) as log:
        try:
            return create_question(
                body.theme_id,
                body.statement,
                [a.dict() for a in body.alternatives],
                explanation=body.explanation,
                log=log,
            )
        except sqlite3.IntegrityError:
            # unknown theme_id trips the foreign key
            raise HTTPException(status_code=404, detail="theme_not_found")


@router.get("/api/questions/{question_id}")
def api_question_get(question_id: int):
    question = get_question_with_alternatives(question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="question_not_found")
    return question


@router.patch("/api/questions/{question_id}")
def api_question_update(question_id: int, body: QuestionUpdate):
    changes = body.dict(exclude_unset=True)
    with OperationLogContext(OperationAction.QUESTION_UPDATE, payload={"id": question_id, **changes}) as log:
        question = update_question(question_id, changes, log=log)
        if question is None:
            raise HTTPException(status_code=404, detail="question_not_found")
        return question


@router.delete("/api/questions/{question_id}")
def api_question_delete(question_id: int):
    with OperationLogContext(OperationAction.QUESTION_DELETE, payload={"id": question_id}) as log:
        if not delete_question(question_id, log=log):
            raise HTTPException(status_code=404, detail="question_not_found")
    return {"message": "ok"}
