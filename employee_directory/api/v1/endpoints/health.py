from __future__ import annotations

from fastapi import APIRouter

from employee_directory.core.config import settings
from employee_directory.services.employee_store import employee_store

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    try:
        if not employee_store.offline:
            ok = await employee_store.check_connection()
            services["employee_api"] = "ok" if ok else "error"
        else:
            services["employee_api"] = "not_configured"
    except Exception:
        services["employee_api"] = "error"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())
    cached = employee_store.cache.load()

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
        "cache": {
            "entries": len(cached),
            "local_only": sum(1 for entry in cached if entry.source == "local"),
        },
    }


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
