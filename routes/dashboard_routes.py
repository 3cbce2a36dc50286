from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI
from fastapi.responses import JSONResponse

from config import SapSettings, get_sap_settings
from routes.responses import gateway_error_response, json_ok, unexpected_error_response
from services.perf import time_block
from services.sap_client import SapGatewayError
from services.views import load_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard")


@router.get("/{lifnr}")
async def get_dashboard(lifnr: str, settings: SapSettings = Depends(get_sap_settings)) -> JSONResponse:
    try:
        with time_block("dashboard"):
            payload = await load_dashboard(settings, lifnr)
        return json_ok({"success": True, "data": payload})
    except SapGatewayError as exc:
        return gateway_error_response(exc, "Dashboard")
    except Exception as exc:
        return unexpected_error_response(exc, "Dashboard")


def register_dashboard_routes(app: FastAPI) -> None:
    app.include_router(router)
