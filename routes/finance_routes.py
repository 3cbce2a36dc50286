from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI
from fastapi.responses import JSONResponse, Response

from config import SapSettings, get_sap_settings
from routes.responses import gateway_error_response, json_ok, unexpected_error_response
from services import gateway
from services.sap_client import SapGatewayError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _list_response(settings: SapSettings, spec: gateway.ResourceSpec, lifnr: str, context: str) -> JSONResponse:
    try:
        return json_ok(gateway.fetch_rows(settings, spec, lifnr))
    except SapGatewayError as exc:
        return gateway_error_response(exc, context)
    except Exception as exc:
        return unexpected_error_response(exc, context)


@router.get("/invoice/{lifnr}")
def get_invoices(lifnr: str, settings: SapSettings = Depends(get_sap_settings)) -> JSONResponse:
    return _list_response(settings, gateway.INVOICES, lifnr, "Invoice")


@router.get("/invoicepdf/{lifnr}/{belnr}")
def get_invoice_pdf(lifnr: str, belnr: str, settings: SapSettings = Depends(get_sap_settings)):
    try:
        filename, pdf_bytes = gateway.fetch_invoice_pdf(settings, lifnr, belnr)
    except SapGatewayError as exc:
        return gateway_error_response(exc, "InvoicePDF")
    except Exception as exc:
        return unexpected_error_response(exc, "InvoicePDF")
    logger.info("[InvoicePDF] Sending %s (%d bytes)", filename, len(pdf_bytes))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/payage/aging/{lifnr}")
def get_payment_aging(lifnr: str, settings: SapSettings = Depends(get_sap_settings)) -> JSONResponse:
    return _list_response(settings, gateway.PAYMENT_AGING, lifnr, "PayAge")


@router.get("/memo/{lifnr}")
def get_memos(lifnr: str, settings: SapSettings = Depends(get_sap_settings)) -> JSONResponse:
    return _list_response(settings, gateway.MEMOS, lifnr, "Memo")


@router.get("/memo/")
def get_all_memos(settings: SapSettings = Depends(get_sap_settings)) -> JSONResponse:
    try:
        return json_ok(gateway.fetch_all_memos(settings))
    except SapGatewayError as exc:
        return gateway_error_response(exc, "Memo")
    except Exception as exc:
        return unexpected_error_response(exc, "Memo")


def register_finance_routes(app: FastAPI) -> None:
    app.include_router(router)
