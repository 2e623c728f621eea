"""
Quiz service: question sampling plus the in-memory quiz attempt.

Sampling never pads or fails on a short theme; start_quiz is the place that
turns a shortfall into an error. Sessions and summaries are not persisted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional

from ..db import get_conn
from ..errors import InsufficientQuestionsError, ValidationError
from ..repository import question_repo, quiz_repo, theme_repo
from .config_svc import get_config

logger = logging.getLogger(__name__)


def get_question_count_by_theme(theme_id: int) -> int:
    with get_conn() as conn:
        return quiz_repo.count_by_theme(conn, theme_id)


def pick_random_questions(theme_id: int, amount: int) -> list[dict]:
    """Up to `amount` distinct questions of the theme, in random order, with alternatives."""
    with get_conn() as conn:
        return quiz_repo.pick_random(conn, theme_id, amount)


@dataclass
class QuizQuestionResult:
    question: Dict[str, Any]
    selected_alternative_id: int
    is_correct: bool

    def to_dict(self) -> dict:
        return {
            "question": self.question,
            "selected_alternative_id": self.selected_alternative_id,
            "is_correct": self.is_correct,
        }


@dataclass
class QuizSummary:
    theme: Optional[Dict[str, Any]]
    total_questions: int
    correct_answers: int
    results: List[QuizQuestionResult] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        if self.total_questions == 0:
            return 0
        # half up, so 1/8 scores 13
        pct = Decimal(self.correct_answers * 100) / Decimal(self.total_questions)
        return int(pct.quantize(Decimal(0), rounding=ROUND_HALF_UP))

    def to_dict(self) -> dict:
        return {
            "theme": self.theme,
            "total_questions": self.total_questions,
            "correct_answers": self.correct_answers,
            "percentage": self.percentage,
            "results": [r.to_dict() for r in self.results],
        }


def _grade(question: Mapping[str, Any], alternative_id: int) -> QuizQuestionResult:
    chosen = next((a for a in question["alternatives"] if a["id"] == alternative_id), None)
    if chosen is None:
        raise ValidationError(f"alternative {alternative_id} does not belong to question {question['id']}")
    return QuizQuestionResult(question=dict(question), selected_alternative_id=alternative_id,
                              is_correct=bool(chosen["is_correct"]))


@dataclass
class QuizSession:
    """One quiz attempt: questions are answered in order, each exactly once."""

    theme: Optional[Dict[str, Any]]
    questions: List[Dict[str, Any]]
    index: int = 0
    answers: Dict[int, QuizQuestionResult] = field(default_factory=dict)

    @property
    def finished(self) -> bool:
        return self.index >= len(self.questions)

    @property
    def current(self) -> Optional[Dict[str, Any]]:
        return None if self.finished else self.questions[self.index]

    def answer(self, alternative_id: int) -> QuizQuestionResult:
        question = self.current
        if question is None:
            raise ValidationError("quiz is already finished")
        if question["id"] in self.answers:
            raise ValidationError("question already answered")
        result = _grade(question, alternative_id)
        self.answers[question["id"]] = result
        return result

    def advance(self) -> Optional[Dict[str, Any]]:
        """Move past an answered question; returns the next one or None at the end."""
        question = self.current
        if question is None:
            return None
        if question["id"] not in self.answers:
            raise ValidationError("answer the current question before moving on")
        self.index += 1
        return self.current

    def summary(self) -> QuizSummary:
        results = [self.answers[q["id"]] for q in self.questions if q["id"] in self.answers]
        return QuizSummary(
            theme=self.theme,
            total_questions=len(results),
            correct_answers=sum(1 for r in results if r.is_correct),
            results=results,
        )


def start_quiz(theme_id: int, amount: int | None = None) -> QuizSession:
    if amount is None:
        amount = get_config()["quiz_default_amount"]
    if amount < 1:
        raise ValidationError("a quiz needs at least one question")
    with get_conn() as conn:
        theme = theme_repo.get_theme(conn, theme_id)
        questions = quiz_repo.pick_random(conn, theme_id, amount)
    if len(questions) < amount:
        raise InsufficientQuestionsError(amount, len(questions))
    logger.info("Started quiz on theme %s with %d questions", theme_id, len(questions))
    return QuizSession(theme=theme, questions=questions)


def score_answers(theme_id: int, answers: Mapping[int, int]) -> QuizSummary:
    """Grade question_id -> alternative_id pairs against the stored questions of a theme."""
    pairs = {int(k): int(v) for k, v in answers.items()}
    ids = list(pairs)
    with get_conn() as conn:
        theme = theme_repo.get_theme(conn, theme_id)
        questions = {q["id"]: q for q in question_repo.get_questions(conn, ids)}
    results = []
    for qid in ids:
        question = questions.get(qid)
        if question is None or question["theme_id"] != theme_id:
            raise ValidationError(f"question {qid} is not part of theme {theme_id}")
        results.append(_grade(question, pairs[qid]))
    return QuizSummary(
        theme=theme,
        total_questions=len(results),
        correct_answers=sum(1 for r in results if r.is_correct),
        results=results,
    )
