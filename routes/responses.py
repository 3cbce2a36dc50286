import logging
from typing import Any, Dict

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from services.gateway import InvalidPdfError, MissingIdentifierError
from services.sap_client import SapGatewayError, SapUnreachableError, SapUpstreamError

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "SAP upstream unreachable. No response received from SAP."
INTERNAL_ERROR_MESSAGE = "Internal server error."


def json_ok(payload: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def gateway_error_response(exc: SapGatewayError, context: str) -> JSONResponse:
    """Map a gateway failure to the JSON error body the portal frontend expects."""
    body: Dict[str, Any] = {"success": False}
    if isinstance(exc, InvalidPdfError):
        logger.error("[%s] %s: %s", context, exc, exc.details)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc), "details": exc.details})
    if isinstance(exc, SapUnreachableError):
        logger.error("[%s] %s", context, exc)
        body.update({"message": UNREACHABLE_MESSAGE, "error": str(exc)})
    elif isinstance(exc, SapUpstreamError):
        logger.error("[%s] SAP answered %s: %s", context, exc.status_code, exc.message)
        body.update({"message": f"SAP Error: {exc.message}", "error": exc.message})
    elif isinstance(exc, MissingIdentifierError):
        logger.info("[%s] rejected request: %s", context, exc)
        body["message"] = str(exc)
    else:
        logger.info("[%s] %s", context, exc)
        body["message"] = str(exc)
    return JSONResponse(status_code=exc.status_code, content=body)


def unexpected_error_response(exc: Exception, context: str) -> JSONResponse:
    logger.error("[%s] Unexpected failure: %s", context, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": INTERNAL_ERROR_MESSAGE, "error": str(exc)},
    )
