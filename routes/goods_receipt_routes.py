from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query
from fastapi.responses import JSONResponse

from config import SapSettings, get_sap_settings
from routes.responses import gateway_error_response, json_ok, unexpected_error_response
from services import gateway
from services.sap_client import SapGatewayError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/goods-receipt")


@router.get("")
def get_goods_receipts(
    lifnr: Optional[str] = Query(None),
    settings: SapSettings = Depends(get_sap_settings),
) -> JSONResponse:
    """Goods receipts for one vendor; SAP is queried with the 10-digit key."""
    try:
        rows = gateway.fetch_rows(settings, gateway.GOODS_RECEIPTS, lifnr)
        return json_ok(rows)
    except SapGatewayError as exc:
        return gateway_error_response(exc, "GoodsReceipt")
    except Exception as exc:
        return unexpected_error_response(exc, "GoodsReceipt")


def register_goods_receipt_routes(app: FastAPI) -> None:
    app.include_router(router)
