"""
Question service tests: four alternatives, one correct, atomic writes
"""
from __future__ import annotations

import sqlite3

import pytest

from quizbank.db import get_conn
from quizbank.errors import ValidationError
from quizbank.repository import question_repo
from quizbank.services import question_svc, quiz_svc
from quizbank.tests.helpers import make_alternatives


def _row_counts():
    with get_conn() as conn:
        q = conn.execute("SELECT COUNT(1) AS c FROM questions").fetchone()["c"]
        a = conn.execute("SELECT COUNT(1) AS c FROM alternatives").fetchone()["c"]
    return q, a


def test_math_scenario(math_theme):
    created = question_svc.create_question(math_theme["id"], "2+2?", make_alternatives(("3", "4", "5", "6"), 1))
    assert created["statement"] == "2+2?"

    questions = question_svc.list_questions_by_theme(math_theme["id"])
    assert len(questions) == 1
    alts = questions[0]["alternatives"]
    assert [a["text"] for a in alts] == ["3", "4", "5", "6"]
    assert alts[1]["is_correct"] is True
    assert [a["is_correct"] for a in alts] == [False, True, False, False]
    assert quiz_svc.get_question_count_by_theme(math_theme["id"]) == 1


def test_get_with_alternatives_roundtrip(math_theme):
    alternatives = make_alternatives(("a", "b", "c", "d"), 3)
    created = question_svc.create_question(math_theme["id"], " Pick d ", alternatives, explanation=" last ")
    fetched = question_svc.get_question_with_alternatives(created["id"])
    assert fetched == created
    assert fetched["statement"] == "Pick d"
    assert fetched["explanation"] == "last"
    assert [(a["text"], a["is_correct"]) for a in fetched["alternatives"]] == [
        ("a", False), ("b", False), ("c", False), ("d", True)
    ]
    assert all(a["question_id"] == created["id"] for a in fetched["alternatives"])


@pytest.mark.parametrize(
    "alternatives",
    [
        make_alternatives(("1", "2", "3"), 0),
        make_alternatives(("1", "2", "3", "4", "5"), 0),
        make_alternatives(("1", "2", "3", "4"), None),
        [{"text": t, "is_correct": True} if i in (0, 2) else {"text": t, "is_correct": False}
         for i, t in enumerate("wxyz")],
        make_alternatives(("1", " ", "3", "4"), 0),
    ],
)
def test_invalid_alternatives_persist_nothing(math_theme, alternatives):
    with pytest.raises(ValidationError):
        question_svc.create_question(math_theme["id"], "Bad", alternatives)
    assert _row_counts() == (0, 0)


def test_blank_statement_rejected(math_theme):
    with pytest.raises(ValidationError):
        question_svc.create_question(math_theme["id"], "  ", make_alternatives())
    assert _row_counts() == (0, 0)


def test_unknown_theme_rolls_back():
    with pytest.raises(sqlite3.IntegrityError):
        question_svc.create_question(987654, "Orphan", make_alternatives())
    assert _row_counts() == (0, 0)


def test_failure_mid_insert_rolls_back(math_theme, monkeypatch):
    def broken(conn, question_id, alternatives):
        conn.execute(
            "INSERT INTO alternatives(question_id, text, is_correct) VALUES(?,?,?)",
            (question_id, "half", 0),
        )
        raise sqlite3.OperationalError("disk full")

    monkeypatch.setattr(question_repo, "insert_alternatives", broken)
    with pytest.raises(sqlite3.OperationalError):
        question_svc.create_question(math_theme["id"], "Partial", make_alternatives())
    assert _row_counts() == (0, 0)


def test_list_newest_first(math_theme):
    ids = [question_svc.create_question(math_theme["id"], f"Q{i}", make_alternatives())["id"] for i in range(3)]
    listed = question_svc.list_questions_by_theme(math_theme["id"])
    assert [q["id"] for q in listed] == list(reversed(ids))
    assert all(len(q["alternatives"]) == 4 for q in listed)


def test_update_text_fields_only(math_theme):
    q = question_svc.create_question(math_theme["id"], "Old", make_alternatives(), explanation="why")
    updated = question_svc.update_question(q["id"], {"statement": "New"})
    assert updated["statement"] == "New"
    assert updated["explanation"] == "why"
    assert [a["id"] for a in updated["alternatives"]] == [a["id"] for a in q["alternatives"]]


def test_update_replaces_alternatives(math_theme):
    q = question_svc.create_question(math_theme["id"], "Q", make_alternatives())
    updated = question_svc.update_question(
        q["id"], {"explanation": "changed", "alternatives": make_alternatives(("w", "x", "y", "z"), 2)}
    )
    assert updated["explanation"] == "changed"
    assert [a["text"] for a in updated["alternatives"]] == ["w", "x", "y", "z"]
    assert [a["is_correct"] for a in updated["alternatives"]] == [False, False, True, False]
    assert not {a["id"] for a in updated["alternatives"]} & {a["id"] for a in q["alternatives"]}
    assert _row_counts() == (1, 4)


def test_update_with_three_alternatives_keeps_original(math_theme):
    q = question_svc.create_question(math_theme["id"], "2+2?", make_alternatives(("3", "4", "5", "6"), 1))
    with pytest.raises(ValidationError):
        question_svc.update_question(
            q["id"], {"statement": "changed", "alternatives": make_alternatives(("3", "4", "5"), 1)}
        )
    again = question_svc.get_question_with_alternatives(q["id"])
    assert again == q


def test_update_missing_question_returns_none():
    assert question_svc.update_question(424242, {"statement": "x"}) is None


def test_update_rejects_unknown_field(math_theme):
    q = question_svc.create_question(math_theme["id"], "Q", make_alternatives())
    with pytest.raises(ValidationError):
        question_svc.update_question(q["id"], {"theme_id": 1})


def test_delete_question_cascades(math_theme):
    q = question_svc.create_question(math_theme["id"], "Q", make_alternatives())
    assert question_svc.delete_question(q["id"]) is True
    assert question_svc.get_question_with_alternatives(q["id"]) is None
    assert _row_counts() == (0, 0)
    assert question_svc.delete_question(q["id"]) is False


def test_update_failure_after_delete_rolls_back(math_theme, monkeypatch):
    original = question_svc.create_question(
        math_theme["id"], "2+2?", make_alternatives(("3", "4", "5", "6"), 1), explanation="sum"
    )

    def broken(conn, question_id, alternatives):
        # the old alternatives are already gone at this point
        assert conn.execute(
            "SELECT COUNT(1) AS c FROM alternatives WHERE question_id=?", (question_id,)
        ).fetchone()["c"] == 0
        raise sqlite3.OperationalError("disk full")

    monkeypatch.setattr(question_repo, "insert_alternatives", broken)
    with pytest.raises(sqlite3.OperationalError):
        question_svc.update_question(
            original["id"],
            {"statement": "changed", "explanation": None, "alternatives": make_alternatives(("a", "b", "c", "d"), 0)},
        )

    monkeypatch.undo()
    after = question_svc.get_question_with_alternatives(original["id"])
    assert after == original
    assert after["statement"] == "2+2?"
    assert [a["text"] for a in after["alternatives"]] == ["3", "4", "5", "6"]
    assert _row_counts() == (1, 4)


@pytest.mark.parametrize(
    "alternatives",
    [
        ["a", "b", "c", "d"],
        "abcd",
        None,
        {"text": "a", "is_correct": True},
        [("a", True), ("b", False), ("c", False), ("d", False)],
        make_alternatives(("1", "2", "3", 4), 0),
    ],
)
def test_malformed_alternatives_raise_validation_error(math_theme, alternatives):
    with pytest.raises(ValidationError):
        question_svc.create_question(math_theme["id"], "Typed", alternatives)
    assert _row_counts() == (0, 0)


def test_non_text_fields_raise_validation_error(math_theme):
    with pytest.raises(ValidationError):
        question_svc.create_question(math_theme["id"], "Q", make_alternatives(), explanation=42)
    with pytest.raises(ValidationError):
        question_svc.create_question(math_theme["id"], 42, make_alternatives())
    q = question_svc.create_question(math_theme["id"], "Q", make_alternatives())
    with pytest.raises(ValidationError):
        question_svc.update_question(q["id"], {"explanation": ["not", "text"]})
    with pytest.raises(ValidationError):
        question_svc.update_question(q["id"], {"alternatives": [1, 2, 3, 4]})
    assert question_svc.get_question_with_alternatives(q["id"]) == q
