from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from ..services.config_svc import get_config
from ..services.quiz_svc import get_question_count_by_theme, pick_random_questions, score_answers

router = APIRouter()


class AnswerIn(BaseModel):
    question_id: int
    alternative_id: int


class ScoreBody(BaseModel):
    answers: list[AnswerIn]


@router.get("/api/quiz/{theme_id}/count")
def api_quiz_count(theme_id: int):
    return {"theme_id": theme_id, "count": get_question_count_by_theme(theme_id)}


@router.get("/api/quiz/{theme_id}/random")
def api_quiz_random(theme_id: int, amount: int | None = Query(None, ge=1)):
    if amount is None:
        amount = get_config()["quiz_default_amount"]
    items = pick_random_questions(theme_id, amount)
    # shortfall is reported, not padded
    return {"requested": amount, "available": len(items), "items": items}


@router.post("/api/quiz/{theme_id}/score")
def api_quiz_score(theme_id: int, body: ScoreBody):
    summary = score_answers(theme_id, {a.question_id: a.alternative_id for a in body.answers})
    return summary.to_dict()
