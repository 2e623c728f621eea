"""quizbank: themed question banks and randomized quizzes (SQLite)."""
from __future__ import annotations

__version__ = "0.1.0"
