"""Domain errors raised by the quizbank services.

Lookups by id do not raise: a missing theme or question is returned as None.
Storage errors that are not translated below propagate as the original
``sqlite3.Error`` (aliased here as ``StorageFailure``).
"""
from __future__ import annotations

import sqlite3

StorageFailure = sqlite3.Error


class QuizBankError(Exception):
    pass


class ValidationError(QuizBankError, ValueError):
    """A domain invariant was violated; nothing was written."""


class ThemeNameConflictError(QuizBankError):
    def __init__(self, theme_name: str):
        super().__init__(f"Theme name already exists: {theme_name}")
        self.theme_name = theme_name


class InsufficientQuestionsError(QuizBankError):
    def __init__(self, requested: int, available: int):
        super().__init__(f"Requested {requested} questions but only {available} available")
        self.requested = requested
        self.available = available


def is_theme_name_conflict(exc: sqlite3.IntegrityError) -> bool:
    msg = str(exc)
    return "UNIQUE constraint failed" in msg and "themes.name" in msg
