from __future__ import annotations

from fastapi import APIRouter

from ..services.config_svc import get_config

router = APIRouter()


@router.get("/api/settings/get")
def api_settings_get():
    return get_config()
