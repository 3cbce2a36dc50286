from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import SapSettings, get_sap_settings
from routes.responses import gateway_error_response, json_ok, unexpected_error_response
from services import gateway
from services.sap_client import SapGatewayError, SapUpstreamError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

DEFAULT_SUCCESS_MESSAGE = "Login successful."
DEFAULT_FAILURE_MESSAGE = "SAP login failed. Invalid credentials or unknown error."
SAP_ERROR_MESSAGE = "An unexpected error occurred during SAP login."


class LoginRequest(BaseModel):
    # Optional so a missing field yields the portal's own 400 body instead of a 422.
    vendorId: Optional[str] = None
    vendorPassword: Optional[str] = None


@router.post("/login")
def login(
    payload: LoginRequest = Body(default_factory=LoginRequest),
    settings: SapSettings = Depends(get_sap_settings),
) -> JSONResponse:
    vendor_id = (payload.vendorId or "").strip()
    try:
        result = gateway.authenticate_vendor(settings, vendor_id, payload.vendorPassword)
    except SapUpstreamError as exc:
        logger.error("[Login] SAP answered %s for vendor %s: %s", exc.status_code, vendor_id, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": SAP_ERROR_MESSAGE, "error": exc.message, "details": exc.body},
        )
    except SapGatewayError as exc:
        return gateway_error_response(exc, "Login")
    except Exception as exc:
        return unexpected_error_response(exc, "Login")

    if result.success:
        return json_ok(
            {
                "success": True,
                "data": {"vendorId": vendor_id, "message": result.message or DEFAULT_SUCCESS_MESSAGE},
            }
        )
    logger.info("[Login] Rejected vendor %s (status=%s)", vendor_id, result.status or "Not provided")
    return JSONResponse(
        status_code=401,
        content={
            "success": False,
            "message": result.message or DEFAULT_FAILURE_MESSAGE,
            "error": f"SAP Status: {result.status or 'Not provided'}",
            "details": result.properties,
        },
    )


def register_auth_routes(app: FastAPI) -> None:
    app.include_router(router)
