# ================================================================
#  VENDOR PORTAL GATEWAY
# ================================================================
#
# Thin FastAPI backend in front of the SAP vendor portal OData service
# (ZMM_VENDOR_ODATA_PORTAL_SRV).
#
# Endpoint paths and response envelopes are consumed as-is by the
# portal frontend:
#
#       POST /api/login
#       GET  /api/profile/{vendorId}
#       GET  /api/rfq/{lifnr}
#       GET  /api/purchase-orders/{lifnr}
#       GET  /api/goods-receipt?lifnr=
#       GET  /api/invoice/{lifnr}
#       GET  /api/invoicepdf/{lifnr}/{belnr}
#       GET  /api/payage/aging/{lifnr}
#       GET  /api/memo/{lifnr}
#       GET  /api/memo/
#
# Display helpers built on the same data:
#
#       GET  /api/views/{resource}/{lifnr}
#       GET  /api/dashboard/{lifnr}
#       GET  /api/health
#
# Nothing is persisted; every request makes its own SAP call(s).
# ================================================================

import logging
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config import APP_NAME, APP_VERSION, CORS_ORIGINS, LOG_LEVEL, PORT
from routes import (
    register_auth_routes,
    register_dashboard_routes,
    register_finance_routes,
    register_goods_receipt_routes,
    register_health_routes,
    register_vendor_routes,
    register_view_routes,
)

# --- Logging configuration ---
LOG_DIR = Path(__file__).parent / "logs"
LOG_DIR.mkdir(exist_ok=True)

LOG_FILE_PATH = LOG_DIR / "portal_backend.log"

root_logger = logging.getLogger()
logger = root_logger
if not root_logger.handlers:
    root_logger.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    file_handler = RotatingFileHandler(
        LOG_FILE_PATH,
        maxBytes=5_000_000,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

logging.getLogger("uvicorn").propagate = True
logging.getLogger("uvicorn.error").propagate = True
logging.getLogger("uvicorn.access").propagate = True
# --- End logging configuration ---

app = FastAPI(title=APP_NAME, version=APP_VERSION)


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    path = request.url.path
    if path.startswith("/api/"):
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info("[HTTP] %s %s -> %s (%.1fms)", request.method, path, response.status_code, elapsed_ms)
    return response


register_auth_routes(app)
register_vendor_routes(app)
register_goods_receipt_routes(app)
register_finance_routes(app)
register_view_routes(app)
register_dashboard_routes(app)
register_health_routes(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"message": f"{APP_NAME} is running", "version": APP_VERSION}


if __name__ == "__main__":
    logger.info("[Startup] %s %s listening on port %s", APP_NAME, APP_VERSION, PORT)
    uvicorn.run("main:app", host="0.0.0.0", port=PORT)
