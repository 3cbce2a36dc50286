from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query
from fastapi.responses import JSONResponse

from config import SapSettings, get_sap_settings
from routes.responses import gateway_error_response, json_ok, unexpected_error_response
from services.list_view import FilterState
from services.sap_client import SapGatewayError
from services.views import load_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/views")


@router.get("/{resource}/{lifnr}")
def get_view_records(
    resource: str,
    lifnr: str,
    search: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    direction: Optional[str] = Query(None),
    settings: SapSettings = Depends(get_sap_settings),
) -> JSONResponse:
    """Display records of one resource, searched, date-bounded and sorted."""
    filter_state = FilterState.from_params(search, date_from, date_to)
    try:
        records = load_view(settings, resource, lifnr, filter_state, sort, direction)
        return json_ok({"success": True, "resource": resource, "count": len(records), "data": records})
    except SapGatewayError as exc:
        return gateway_error_response(exc, "Views")
    except Exception as exc:
        return unexpected_error_response(exc, "Views")


def register_view_routes(app: FastAPI) -> None:
    app.include_router(router)
