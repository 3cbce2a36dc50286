from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI
from fastapi.responses import JSONResponse

from config import SapSettings, get_sap_settings
from routes.responses import gateway_error_response, json_ok, unexpected_error_response
from services import gateway
from services.sap_client import SapGatewayError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/profile/{vendor_id}")
def get_profile(vendor_id: str, settings: SapSettings = Depends(get_sap_settings)) -> JSONResponse:
    try:
        row = gateway.fetch_profile(settings, vendor_id)
        return json_ok({"success": True, "data": row})
    except SapGatewayError as exc:
        return gateway_error_response(exc, "Profile")
    except Exception as exc:
        return unexpected_error_response(exc, "Profile")


@router.get("/rfq/{lifnr}")
def get_rfqs(lifnr: str, settings: SapSettings = Depends(get_sap_settings)) -> JSONResponse:
    try:
        rows = gateway.fetch_rows(settings, gateway.RFQ, lifnr)
        return json_ok({"success": True, "data": rows})
    except SapGatewayError as exc:
        return gateway_error_response(exc, "RFQ")
    except Exception as exc:
        return unexpected_error_response(exc, "RFQ")


@router.get("/purchase-orders/{lifnr}")
def get_purchase_orders(lifnr: str, settings: SapSettings = Depends(get_sap_settings)) -> JSONResponse:
    try:
        rows = gateway.fetch_rows(settings, gateway.PURCHASE_ORDERS, lifnr)
        vendor = lifnr.strip()
        message = f"PO data for {vendor} retrieved." if rows else f"No PO data found for {vendor}."
        return json_ok({"success": True, "data": rows, "message": message})
    except SapGatewayError as exc:
        return gateway_error_response(exc, "PO")
    except Exception as exc:
        return unexpected_error_response(exc, "PO")


def register_vendor_routes(app: FastAPI) -> None:
    app.include_router(router)
