"""
Health route - service availability and PDF generation mode.
"""

import time
from pathlib import Path

from fastapi import APIRouter

from db import get_engine
from services.object_storage import s3_configured
from settings import get_settings

router = APIRouter()

STARTED_AT = time.monotonic()


def template_exists(template_path) -> bool:
    return bool(template_path) and Path(template_path).is_file()


@router.get("/api/health")
def health():
    settings = get_settings()
    template_ready = template_exists(settings.pdf_template_path)

    return {
        "ok": True,
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "services": {
            "database": "connected" if get_engine() is not None else "not_configured",
            "s3": "connected" if s3_configured(settings) else "not_configured",
            "smtp": "connected" if settings.smtp_host else "not_configured",
            "crm": "connected" if settings.hubspot_access_token else "not_configured",
            "pdf_template": "ready" if template_ready else "missing_fallback_renderer",
        },
        "pdf_template": {
            "mode": "fillable_template" if template_ready else "renderer_fallback",
            "path": str(settings.pdf_template_path or ""),
            "exists": template_ready,
        },
    }
