# quizbank/services/config_svc.py
from __future__ import annotations

from ..db import read_config_yaml

# Palette offered by the theme editor; the first entry is the default color.
PRESET_COLORS = ["#7C4DFF", "#00D0FF", "#FFB92E", "#FF5252", "#4CAF50", "#FF6F91"]

DEFAULTS = {
    "default_theme_color": PRESET_COLORS[0],
    "quiz_default_amount": "5",
}


def _to_int_safe(x, default: int) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return default


def get_config(path: str | None = None) -> dict:
    """config.yaml values merged over DEFAULTS, converted to their types."""
    cfg = read_config_yaml(path)
    amount = _to_int_safe(cfg.get("quiz_default_amount"), int(DEFAULTS["quiz_default_amount"]))
    out = {
        "default_theme_color": str(cfg.get("default_theme_color") or DEFAULTS["default_theme_color"]),
        "quiz_default_amount": amount if amount > 0 else int(DEFAULTS["quiz_default_amount"]),
        "preset_colors": list(PRESET_COLORS),
    }
    return out
