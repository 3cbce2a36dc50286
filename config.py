import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple, Union

# Load .env early so os.getenv picks up local dev secrets.
try:  # pragma: no cover - environment bootstrap
    from dotenv import load_dotenv

    _DOTENV_PATHS = [Path.cwd() / ".env", Path(__file__).resolve().parent / ".env"]
    for _env_path in _DOTENV_PATHS:
        if _env_path.exists():
            load_dotenv(dotenv_path=_env_path, override=False)
except Exception as exc:  # never crash on dotenv load issues
    logging.getLogger(__name__).warning("Failed to load .env: %s", exc)

APP_NAME = "Vendor Portal Gateway"
APP_VERSION = "1.0.0"

DEFAULT_SAP_SERVICE_PATH = "/sap/opu/odata/SAP/ZMM_VENDOR_ODATA_PORTAL_SRV"
DEFAULT_SAP_TIMEOUT_SECONDS = 30.0


# ----------------------------
# Helpers
# ----------------------------
def _req(name: str) -> str:
    v = os.getenv(name)
    if not v:
        raise RuntimeError(f"Missing required env var: {name}")
    return v


def _csv_list(name: str, default: str = "") -> list[str]:
    raw = (os.getenv(name) or default).strip()
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]


def _bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


def _float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name) or default)
    except ValueError:
        logging.getLogger(__name__).warning("Invalid %s; using %s", name, default)
        return default


# ----------------------------
# SAP connection settings
# ----------------------------
@dataclass(frozen=True)
class SapSettings:
    """Immutable SAP OData connection settings, built once per process."""

    base_url: str
    username: str
    password: str
    service_path: str = DEFAULT_SAP_SERVICE_PATH
    verify_tls: bool = True
    ca_bundle: Optional[str] = None
    timeout_seconds: float = DEFAULT_SAP_TIMEOUT_SECONDS
    # Canonical vendor ids allowed to read goods receipts; empty disables the check.
    goods_receipt_allowed_vendors: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def service_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.service_path.strip('/')}"

    @property
    def verify(self) -> Union[bool, str]:
        """Value for the ``verify`` argument of requests."""
        if self.ca_bundle:
            return self.ca_bundle
        return self.verify_tls


def load_sap_settings() -> SapSettings:
    return SapSettings(
        base_url=_req("SAP_BASE_URL"),
        username=_req("AUTH_USER"),
        password=_req("AUTH_PASS"),
        service_path=os.getenv("SAP_SERVICE_PATH") or DEFAULT_SAP_SERVICE_PATH,
        verify_tls=_bool("SAP_VERIFY_TLS", True),
        ca_bundle=(os.getenv("SAP_CA_BUNDLE") or "").strip() or None,
        timeout_seconds=_float("SAP_TIMEOUT_SECONDS", DEFAULT_SAP_TIMEOUT_SECONDS),
        goods_receipt_allowed_vendors=tuple(_csv_list("SAP_GR_ALLOWED_VENDORS")),
    )


@lru_cache(maxsize=1)
def get_sap_settings() -> SapSettings:
    """FastAPI dependency; override via ``app.dependency_overrides`` in tests."""
    return load_sap_settings()


# ----------------------------
# HTTP server
# ----------------------------
CORS_ORIGINS = _csv_list("PORTAL_CORS_ORIGINS", "*")
LOG_LEVEL = os.getenv("PORTAL_LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT") or 5000)
