from __future__ import annotations

import logging
import sqlite3
from typing import Any, Mapping

from ..db import get_conn
from ..errors import ThemeNameConflictError, ValidationError, is_theme_name_conflict
from ..logs import OperationLogContext
from ..repository import theme_repo
from .config_svc import get_config

logger = logging.getLogger(__name__)

_EDITABLE = ("name", "description", "color")


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("theme name is required")
    return name.strip()


def _clean_description(description) -> str | None:
    if description is None:
        return None
    if not isinstance(description, str):
        raise ValidationError("theme description must be text")
    return description.strip() or None


def list_themes() -> list[dict]:
    with get_conn() as conn:
        return theme_repo.list_themes(conn)


def get_theme(theme_id: int) -> dict | None:
    with get_conn() as conn:
        return theme_repo.get_theme(conn, theme_id)


def create_theme(name: str, description: str | None = None, color: str | None = None,
                 log: OperationLogContext | None = None) -> dict:
    name = _clean_name(name)
    if color is not None and not isinstance(color, str):
        raise ValidationError("theme color must be text")
    color = (color or "").strip() or get_config()["default_theme_color"]
    description = _clean_description(description)

    with get_conn() as conn:
        try:
            new_id = theme_repo.insert_theme(conn, name, description, color)
        except sqlite3.IntegrityError as e:
            if is_theme_name_conflict(e):
                logger.warning("Theme name conflict on create: %s", name)
                raise ThemeNameConflictError(name) from e
            raise
        theme = theme_repo.get_theme(conn, new_id)
    logger.info("Created theme %s (%s)", new_id, name)
    if log is not None:
        log.set_entity(new_id)
        log.set_after(theme)
    return theme


def update_theme(theme_id: int, changes: Mapping[str, Any],
                 log: OperationLogContext | None = None) -> dict | None:
    """
    Update only the supplied fields of a theme.
    Editable fields: name, description, color. An empty mapping is a no-op.
    Returns the theme as stored afterwards, or None if it does not exist.
    """
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise ValidationError(f"unsupported theme fields: {', '.join(sorted(unknown))}")

    fields: dict[str, Any] = {}
    if "name" in changes:
        fields["name"] = _clean_name(changes["name"])
    if "description" in changes:
        fields["description"] = _clean_description(changes["description"])
    if "color" in changes:
        color = changes["color"]
        if not isinstance(color, str) or not color.strip():
            raise ValidationError("theme color must not be blank")
        fields["color"] = color.strip()

    with get_conn() as conn:
        before = theme_repo.get_theme(conn, theme_id)
        if before is None:
            return None
        if not fields:
            return before
        try:
            theme_repo.update_theme_fields(conn, theme_id, fields)
        except sqlite3.IntegrityError as e:
            if is_theme_name_conflict(e):
                logger.warning("Theme name conflict on update: %s", fields.get("name"))
                raise ThemeNameConflictError(fields["name"]) from e
            raise
        after = theme_repo.get_theme(conn, theme_id)

    if log is not None:
        log.set_entity(theme_id)
        log.set_before(before)
        log.set_after(after)
    return after


def delete_theme(theme_id: int, log: OperationLogContext | None = None) -> bool:
    """Delete a theme; its questions and alternatives go with it (FK cascade)."""
    with get_conn() as conn:
        before = theme_repo.get_theme(conn, theme_id)
        removed = theme_repo.delete_theme(conn, theme_id) > 0
    if removed:
        logger.info("Deleted theme %s with %s questions", theme_id, before["question_count"])
    if log is not None:
        log.set_entity(theme_id)
        log.set_before(before)
    return removed
