"""Repository layer: DB access helpers (SQLite).

Keep functions thin and focused, so services avoid SQL strings.
Every function takes an explicit connection; none of them commits.
"""
from __future__ import annotations
