"""
Per-resource gateway calls against the SAP vendor portal OData service.

Vendor-id handling differs per entity set and is kept as SAP expects it:
goods receipts and invoice PDFs need the zero-padded SAP key, every other
entity set is filtered with the id exactly as the caller supplied it.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from config import SapSettings
from services.odata import (
    build_filter_query,
    build_key_path,
    decode_base64_payload,
    first_row,
    unwrap,
)
from services.sap_client import SapGatewayError, SapODataClient
from services.vendor_ids import is_vendor_allowed, pad_document_number, to_canonical, to_sap_key

LOGGER = logging.getLogger(__name__)

LOGIN_SUCCESS_STATUS = "SUCCESS"
PDF_FIELD = "XPdf"


class MissingIdentifierError(SapGatewayError):
    status_code = 400


class ResourceNotFoundError(SapGatewayError):
    status_code = 404


class InvalidPdfError(SapGatewayError):
    status_code = 500

    def __init__(self, details: str):
        super().__init__("Failed to retrieve PDF data")
        self.details = details


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    entity_set: str
    id_label: str
    pad_vendor_id: bool = False
    not_found_on_empty: bool = False
    not_found_message: str = ""
    # Reject vendors outside SapSettings.goods_receipt_allowed_vendors.
    enforce_allow_list: bool = False


PROFILE = ResourceSpec(
    "profile",
    "ZVEN_PROFILESet",
    "vendorId",
    not_found_on_empty=True,
    not_found_message="Vendor profile not found.",
)
RFQ = ResourceSpec("rfq", "VEN_RFQSet", "lifnr")
PURCHASE_ORDERS = ResourceSpec("purchase-orders", "VEN_POSet", "Vendor ID (Lifnr)")
GOODS_RECEIPTS = ResourceSpec(
    "goods-receipt",
    "VEN_GOODSRECSet",
    "lifnr",
    pad_vendor_id=True,
    not_found_on_empty=True,
    not_found_message="Goods receipts not found for the specified vendor ID.",
    enforce_allow_list=True,
)
INVOICES = ResourceSpec("invoice", "VEN_INVOICESet", "Lifnr (Vendor Code)")
PAYMENT_AGING = ResourceSpec("payage", "VEN_PAYAGESet", "Lifnr (Vendor Code)")
MEMOS = ResourceSpec("memo", "ZVEN_CDMEMOSet", "lifnr")
INVOICE_PDF = ResourceSpec("invoicepdf", "ZVEN_INVOICEPDFSet", "Lifnr (Vendor Code)", pad_vendor_id=True)
LOGIN = ResourceSpec("login", "ZLOGIN_AUTHSet", "vendorId")


def _require(value: Any, label: str) -> str:
    candidate = "" if value is None else str(value).strip()
    if not candidate:
        raise MissingIdentifierError(f"{label} is required")
    return candidate


@contextmanager
def _client(settings: SapSettings, client: Optional[SapODataClient]) -> Iterator[SapODataClient]:
    """Yield the caller's client, or a fresh one that is closed afterwards."""
    if client is not None:
        yield client
        return
    with SapODataClient(settings) as owned:
        yield owned


def vendor_id_for(spec: ResourceSpec, vendor_id: str) -> str:
    return to_sap_key(to_canonical(vendor_id)) if spec.pad_vendor_id else vendor_id


def fetch_rows(
    settings: SapSettings,
    spec: ResourceSpec,
    vendor_id: Any,
    *,
    client: Optional[SapODataClient] = None,
) -> List[Any]:
    """
    Fetch the rows of a ``Lifnr``-filtered entity set for one vendor.

    Raises MissingIdentifierError for a blank id and ResourceNotFoundError when
    the resource treats an empty result as not found.
    """
    vendor_id = _require(vendor_id, spec.id_label)
    if spec.enforce_allow_list and not is_vendor_allowed(vendor_id, settings.goods_receipt_allowed_vendors):
        LOGGER.info("[Gateway] goods-receipt access denied for vendor %s", to_canonical(vendor_id))
        raise ResourceNotFoundError("SAP data not found for this vendor ID. Access denied.")

    filter_value = vendor_id_for(spec, vendor_id)
    path = build_filter_query(spec.entity_set, "Lifnr", filter_value)
    with _client(settings, client) as sap:
        rows = unwrap(sap.get_json(path))
    LOGGER.info("[Gateway] %s: %d row(s) for Lifnr %s", spec.name, len(rows), filter_value)
    if not rows and spec.not_found_on_empty:
        raise ResourceNotFoundError(spec.not_found_message)
    return rows


def fetch_all_memos(settings: SapSettings, *, client: Optional[SapODataClient] = None) -> List[Any]:
    with _client(settings, client) as sap:
        rows = unwrap(sap.get_json(f"{MEMOS.entity_set}?$format=json"))
    LOGGER.info("[Gateway] memo: %d row(s) across all vendors", len(rows))
    return rows


def fetch_profile(
    settings: SapSettings, vendor_id: Any, *, client: Optional[SapODataClient] = None
) -> Dict[str, Any]:
    vendor_id = _require(vendor_id, PROFILE.id_label)
    path = build_key_path(PROFILE.entity_set, {"VendorId": vendor_id})
    with _client(settings, client) as sap:
        row = first_row(sap.get_json(path))
    if not row:
        raise ResourceNotFoundError(PROFILE.not_found_message)
    return row


def fetch_invoice_pdf(
    settings: SapSettings,
    lifnr: Any,
    belnr: Any,
    *,
    client: Optional[SapODataClient] = None,
) -> Tuple[str, bytes]:
    """
    Download the Adobe-form PDF of one invoice.

    Returns ``(filename, pdf_bytes)``. Both keys are sent in SAP key form.
    """
    if lifnr is None or not str(lifnr).strip() or belnr is None or not str(belnr).strip():
        raise MissingIdentifierError("Lifnr (Vendor Code) and Belnr (Invoice Number) are required")
    lifnr_key = to_sap_key(str(lifnr).strip())
    belnr_key = pad_document_number(belnr)
    path = build_key_path(INVOICE_PDF.entity_set, {"Lifnr": lifnr_key, "Belnr": belnr_key})
    with _client(settings, client) as sap:
        row = first_row(sap.get_json(path))

    encoded = row.get(PDF_FIELD)
    if not encoded:
        LOGGER.error("[Gateway] PDF response for %s/%s lacks %s; keys=%s", lifnr_key, belnr_key, PDF_FIELD, sorted(row))
        raise InvalidPdfError(f"{PDF_FIELD} field was missing in the SAP response.")
    pdf_bytes = decode_base64_payload(encoded)
    if not pdf_bytes:
        LOGGER.error("[Gateway] PDF payload for %s/%s is not valid base64", lifnr_key, belnr_key)
        raise InvalidPdfError(f"{PDF_FIELD} field could not be decoded.")
    return f"invoice_{belnr_key}.pdf", pdf_bytes


@dataclass
class LoginResult:
    success: bool
    status: Optional[str]
    message: Optional[str]
    properties: Dict[str, Optional[str]] = field(default_factory=dict)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1].split(":")[-1]


def parse_login_properties(xml_text: str) -> Dict[str, Optional[str]]:
    """
    Flatten the ``m:properties`` block of an Atom entry into ``{name: text}``.

    Returns {} when the document cannot be parsed or has no properties.
    """
    if not xml_text or not xml_text.strip():
        return {}
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        LOGGER.warning("[Gateway] Login XML could not be parsed: %s", exc)
        return {}
    for element in root.iter():
        if _local_name(element.tag) == "properties":
            return {_local_name(child.tag): (child.text or "").strip() or None for child in element}
    return {}


def authenticate_vendor(
    settings: SapSettings,
    vendor_id: Any,
    password: Any,
    *,
    client: Optional[SapODataClient] = None,
) -> LoginResult:
    if not vendor_id or not password:
        raise MissingIdentifierError("vendorId and vendorPassword are required.")
    path = build_key_path(LOGIN.entity_set, {"VendorId": vendor_id, "VendorPwd": password}, fmt=None)
    with _client(settings, client) as sap:
        xml_text = sap.get_xml(path)

    properties = parse_login_properties(xml_text)
    status = properties.get("Status")
    message = properties.get("Message")
    success = bool(status) and status.upper() == LOGIN_SUCCESS_STATUS
    LOGGER.info("[Gateway] login for vendor %s -> status=%s", vendor_id, status or "Not provided")
    return LoginResult(success=success, status=status, message=message, properties=properties)
