import logging
from typing import Any, Optional

import requests

from auth.sap_auth import JSON_ACCEPT, XML_ACCEPT, SapAuth
from config import SapSettings
from services.odata import extract_error_message
from services.perf import time_block

logger = logging.getLogger("sap_client")


class SapGatewayError(RuntimeError):
    """Base class for failures talking to the SAP OData service."""

    status_code = 500


class SapUnreachableError(SapGatewayError):
    """Raised when SAP could not be reached (DNS, TLS, refused, timeout)."""

    pass


class SapUpstreamError(SapGatewayError):
    """Raised when SAP answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.body = body


def _mask(path: str) -> str:
    marker = "VendorPwd="
    idx = path.find(marker)
    if idx < 0:
        return path
    end = path.find(")", idx)
    return path[: idx + len(marker)] + "'***'" + (path[end:] if end >= 0 else "")


class SapODataClient:
    """
    Thin GET-only client for the vendor portal OData service.

    ``path`` arguments are relative to the service root, e.g.
    ``VEN_POSet?$filter=Lifnr eq '100000'&$format=json``.
    """

    def __init__(self, settings: SapSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self._session = session
        self._owns_session = False

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = SapAuth(self.settings).new_session()
            self._owns_session = True
        return self._session

    def close(self) -> None:
        """Close the session this client opened itself; injected sessions are left alone."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None
            self._owns_session = False

    def __enter__(self) -> "SapODataClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def url_for(self, path: str) -> str:
        return f"{self.settings.service_url}/{path.lstrip('/')}"

    def get(self, path: str, *, accept: str = JSON_ACCEPT) -> requests.Response:
        url = self.url_for(path)
        label = path.split("?", 1)[0].split("(", 1)[0]
        logger.info("[SAP] GET %s", _mask(url))
        try:
            with time_block(f"sap:{label}"):
                resp = self.session.get(
                    url,
                    headers={"Accept": accept},
                    timeout=self.settings.timeout_seconds,
                    # REQUESTS_CA_BUNDLE overrides session.verify; pass it per call.
                    verify=self.settings.verify,
                )
        except requests.exceptions.Timeout as exc:
            logger.error("[SAP] Timeout after %ss for %s", self.settings.timeout_seconds, label)
            raise SapUnreachableError(f"SAP did not respond within {self.settings.timeout_seconds}s") from exc
        except requests.exceptions.RequestException as exc:
            logger.error("[SAP] No response from SAP for %s: %s", label, exc)
            raise SapUnreachableError(f"No response received from SAP: {exc}") from exc

        if resp.status_code >= 300:
            message = extract_error_message(resp.text, fallback=resp.reason or "SAP returned an error.")
            logger.error("[SAP] %s failed %s: %s", label, resp.status_code, message)
            raise SapUpstreamError(resp.status_code, message, resp.text)
        return resp

    def get_json(self, path: str) -> Any:
        resp = self.get(path, accept=JSON_ACCEPT)
        try:
            return resp.json()
        except ValueError:
            logger.warning("[SAP] Non-JSON body for %s; treating as empty", path.split("?", 1)[0])
            return None

    def get_xml(self, path: str) -> str:
        return self.get(path, accept=XML_ACCEPT).text
