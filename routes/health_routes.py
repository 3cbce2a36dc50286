from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI

from config import APP_NAME, APP_VERSION
from services.perf import get_recent_timings, summarize_timings

router = APIRouter()


@router.get("/api/health")
def health() -> dict:
    return {
        "status": "ok",
        "app": APP_NAME,
        "version": APP_VERSION,
        "time": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
        "timings": summarize_timings(),
        "recent": get_recent_timings()[-10:],
    }


def register_health_routes(app: FastAPI) -> None:
    app.include_router(router)
