"""
Question service: questions always travel with exactly four alternatives,
exactly one of them correct. Validation happens before any SQL runs; writes
that touch both tables share one transaction.
"""
from __future__ import annotations

import logging
from collections import abc
from typing import Any, Mapping, Sequence

from ..db import get_conn, transaction
from ..errors import ValidationError
from ..logs import OperationLogContext
from ..repository import question_repo

logger = logging.getLogger(__name__)

ALTERNATIVES_PER_QUESTION = 4

_EDITABLE = ("statement", "explanation", "alternatives")


def ensure_alternatives(alternatives: Sequence[Mapping[str, Any]]) -> list[tuple[str, bool]]:
    """Check the four/one-correct rule and return (text, is_correct) pairs."""
    if isinstance(alternatives, (str, bytes)) or not isinstance(alternatives, abc.Sequence) \
            or len(alternatives) != ALTERNATIVES_PER_QUESTION:
        raise ValidationError(f"a question needs exactly {ALTERNATIVES_PER_QUESTION} alternatives")

    out: list[tuple[str, bool]] = []
    for alt in alternatives:
        if not isinstance(alt, abc.Mapping):
            raise ValidationError("each alternative must be a mapping with text and is_correct")
        text = alt.get("text")
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("alternative text is required")
        out.append((text.strip(), bool(alt.get("is_correct", False))))

    correct = sum(1 for _, is_correct in out if is_correct)
    if correct != 1:
        raise ValidationError("exactly one alternative must be marked correct")
    return out


def _clean_statement(statement) -> str:
    if not isinstance(statement, str) or not statement.strip():
        raise ValidationError("question statement is required")
    return statement.strip()


def _clean_explanation(explanation) -> str | None:
    if explanation is None:
        return None
    if not isinstance(explanation, str):
        raise ValidationError("question explanation must be text")
    return explanation.strip() or None


def list_questions_by_theme(theme_id: int) -> list[dict]:
    with get_conn() as conn:
        return question_repo.list_by_theme(conn, theme_id)


def get_question_with_alternatives(question_id: int) -> dict | None:
    with get_conn() as conn:
        return question_repo.get_question(conn, question_id)


def create_question(theme_id: int, statement: str, alternatives: Sequence[Mapping[str, Any]],
                    explanation: str | None = None, log: OperationLogContext | None = None) -> dict:
    statement = _clean_statement(statement)
    explanation = _clean_explanation(explanation)
    pairs = ensure_alternatives(alternatives)

    with get_conn() as conn:
        with transaction(conn):
            question_id = question_repo.insert_question(conn, theme_id, statement, explanation)
            question_repo.insert_alternatives(conn, question_id, pairs)
        question = question_repo.get_question(conn, question_id)

    logger.info("Created question %s in theme %s", question_id, theme_id)
    if log is not None:
        log.set_entity(question_id)
        log.set_after(question)
    return question


def update_question(question_id: int, changes: Mapping[str, Any],
                    log: OperationLogContext | None = None) -> dict | None:
    """
    Partial update of statement/explanation; alternatives, when given, are
    replaced wholesale (old alternative ids are not kept).
    Returns the hydrated question, or None if it does not exist.
    """
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise ValidationError(f"unsupported question fields: {', '.join(sorted(unknown))}")

    fields: dict[str, Any] = {}
    if "statement" in changes:
        fields["statement"] = _clean_statement(changes["statement"])
    if "explanation" in changes:
        fields["explanation"] = _clean_explanation(changes["explanation"])
    pairs = None
    if "alternatives" in changes:
        pairs = ensure_alternatives(changes["alternatives"])

    with get_conn() as conn:
        before = question_repo.get_question(conn, question_id)
        if before is None:
            return None
        with transaction(conn):
            question_repo.update_question_fields(conn, question_id, fields)
            if pairs is not None:
                question_repo.delete_alternatives(conn, question_id)
                question_repo.insert_alternatives(conn, question_id, pairs)
        after = question_repo.get_question(conn, question_id)

    if log is not None:
        log.set_entity(question_id)
        log.set_before(before)
        log.set_after(after)
    return after


def delete_question(question_id: int, log: OperationLogContext | None = None) -> bool:
    with get_conn() as conn:
        before = question_repo.get_question(conn, question_id)
        removed = question_repo.delete_question(conn, question_id) > 0
    if log is not None:
        log.set_entity(question_id)
        log.set_before(before)
    return removed
