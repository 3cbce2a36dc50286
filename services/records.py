"""
SAP row -> display record mapping.

SAP rows are plain dicts keyed by SAP field codes. Accessors here never raise:
a missing key yields a placeholder ('N/A', 0, or None for dates).
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from services.sap_dates import decode, to_display_date

LOGGER = logging.getLogger(__name__)

PLACEHOLDER = "N/A"

# Keys each entity set is expected to carry (``__metadata`` aside).
EXPECTED_FIELDS: Dict[str, Tuple[str, ...]] = {
    "ZVEN_PROFILESet": ("VendorId", "Name1", "Land1", "Ort01", "Pstlz", "Regio", "Stras", "Adrnr"),
    "VEN_RFQSet": ("Lifnr", "Bedat", "Txz01", "Ktmng", "Meins"),
    "VEN_POSet": (
        "Ebeln", "Lifnr", "Bedat", "Ebelp", "Matnr", "Txz01", "Ktmng", "Meins",
        "Netpr", "Peinh", "Netwr", "Brtwr", "Waers", "Statu", "Bstyp", "Bsart",
    ),
    "VEN_GOODSRECSet": (
        "Lifnr", "Mblnr", "Vgart", "Blart", "Bldat", "Budat", "Ebeln", "Ebelp", "Bwart", "Meins", "Matnr",
    ),
    "VEN_INVOICESet": (
        "Belnr", "Bukrs", "Gjahr", "Bldat", "Budat", "Lifnr", "Waers", "Vgart", "Blart", "Buzei",
        "Ebelp", "Matnr", "Meins", "Lbkum", "Matbf", "Pstyp", "Wrbtr",
    ),
    "VEN_PAYAGESet": (
        "Bukrs", "Lifnr", "Belnr", "Buzei", "Budat", "Bldat", "Waers", "Blart", "Monat", "Bschl",
        "Shkzg", "Mwskz", "Wrbtr", "Zfbdt", "Zterm", "DueDate", "Aging", "Status",
    ),
    "ZVEN_CDMEMOSet": (
        "Lifnr", "Belnr", "Gjahr", "Buzei", "HBlart", "HBudat", "HBldat", "Dmbtr", "HWaers", "Menge",
        "Meins", "Matnr", "Hkont", "Shkzg", "Bschl", "Rebzg", "Zuonr", "Usnam", "Bukrs", "Tcode",
    ),
}

RFQ_URI_RE = re.compile(r"VEN_RFQSet\('(\d+)'\)")


def text(raw: Mapping[str, Any], key: str, default: str = PLACEHOLDER) -> str:
    value = raw.get(key) if isinstance(raw, Mapping) else None
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def number(raw: Mapping[str, Any], key: str) -> float:
    value = raw.get(key) if isinstance(raw, Mapping) else None
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError:
        return 0.0


def integer(raw: Mapping[str, Any], key: str) -> int:
    return int(number(raw, key))


def sap_date(raw: Mapping[str, Any], key: str) -> Optional[datetime]:
    value = raw.get(key) if isinstance(raw, Mapping) else None
    return decode(value)


def missing_fields(raw: Mapping[str, Any], entity_set: str) -> List[str]:
    if not isinstance(raw, Mapping):
        return list(EXPECTED_FIELDS.get(entity_set, ()))
    return [key for key in EXPECTED_FIELDS.get(entity_set, ()) if key not in raw]


def map_profile(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "vendorId": text(raw, "VendorId"),
        "name": text(raw, "Name1"),
        "street": text(raw, "Stras"),
        "city": text(raw, "Ort01"),
        "postalCode": text(raw, "Pstlz"),
        "region": text(raw, "Regio"),
        "country": text(raw, "Land1"),
        "addressNumber": text(raw, "Adrnr"),
    }


def map_rfq(raw: Mapping[str, Any]) -> Dict[str, Any]:
    metadata = raw.get("__metadata") if isinstance(raw, Mapping) else None
    uri = metadata.get("uri") if isinstance(metadata, Mapping) else None
    match = RFQ_URI_RE.search(uri) if isinstance(uri, str) else None
    rfq_id = match.group(1) if match else text(raw, "Lifnr")
    unit = text(raw, "Meins", default="")
    document_date = sap_date(raw, "Bedat")
    return {
        "id": rfq_id,
        "vendorId": text(raw, "Lifnr"),
        "item": text(raw, "Txz01"),
        "quantity": number(raw, "Ktmng"),
        "unit": unit,
        "qtyUnit": f"{number(raw, 'Ktmng'):.0f} {unit}".strip(),
        "documentDate": document_date,
        "due": to_display_date(document_date),
    }


def map_purchase_order(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "poNumber": text(raw, "Ebeln"),
        "itemNumber": text(raw, "Ebelp"),
        "vendorId": text(raw, "Lifnr"),
        "documentDate": sap_date(raw, "Bedat"),
        "materialNumber": text(raw, "Matnr"),
        "description": text(raw, "Txz01"),
        "quantity": number(raw, "Ktmng"),
        "unit": text(raw, "Meins"),
        "netPrice": number(raw, "Netpr"),
        "priceUnit": number(raw, "Peinh"),
        "netValue": number(raw, "Netwr"),
        "grossValue": number(raw, "Brtwr"),
        "currency": text(raw, "Waers"),
        "status": text(raw, "Statu"),
        "category": text(raw, "Bstyp"),
        "documentType": text(raw, "Bsart"),
    }


def map_goods_receipt(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "documentNo": text(raw, "Mblnr"),
        "vendorId": text(raw, "Lifnr"),
        "postingDate": sap_date(raw, "Budat"),
        "documentDate": sap_date(raw, "Bldat"),
        "documentType": text(raw, "Blart"),
        "purchaseOrderNo": text(raw, "Ebeln"),
        "purchaseOrderItem": text(raw, "Ebelp"),
        "materialNo": text(raw, "Matnr"),
        "description": text(raw, "Vgart"),
        "movementType": text(raw, "Bwart"),
        "unitOfMeasure": text(raw, "Meins"),
    }


def map_invoice(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "invoiceNumber": text(raw, "Belnr"),
        "companyCode": text(raw, "Bukrs"),
        "fiscalYear": text(raw, "Gjahr"),
        "billingDate": sap_date(raw, "Bldat"),
        "postingDate": sap_date(raw, "Budat"),
        "vendorId": text(raw, "Lifnr"),
        "currency": text(raw, "Waers"),
        "documentType": text(raw, "Blart"),
        "poItemNumber": text(raw, "Ebelp"),
        "materialNumber": text(raw, "Matnr"),
        "unitOfMeasure": text(raw, "Meins"),
        "quantity": number(raw, "Lbkum"),
        "amount": number(raw, "Wrbtr"),
        "description": text(raw, "Vgart"),
    }


def map_payment_aging(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "documentNumber": text(raw, "Belnr"),
        "vendorId": text(raw, "Lifnr"),
        "billingDate": sap_date(raw, "Bldat"),
        "postingDate": sap_date(raw, "Budat"),
        "dueDate": sap_date(raw, "DueDate"),
        "amount": number(raw, "Wrbtr"),
        "currency": text(raw, "Waers"),
        "aging": integer(raw, "Aging"),
        "status": text(raw, "Status"),
    }


def memo_type(debit_credit: Any) -> str:
    """SAP Shkzg: 'H' (Haben) is a credit, 'S' (Soll) a debit."""
    if debit_credit == "H":
        return "Credit"
    if debit_credit == "S":
        return "Debit"
    return "Unknown"


def map_memo(raw: Mapping[str, Any]) -> Dict[str, Any]:
    kind = memo_type(raw.get("Shkzg") if isinstance(raw, Mapping) else None)
    if kind == "Unknown":
        LOGGER.debug("[Records] Unknown Shkzg for memo %s", text(raw, "Belnr"))
    return {
        "memoId": text(raw, "Belnr"),
        "vendorId": text(raw, "Lifnr"),
        "type": kind,
        "amount": number(raw, "Dmbtr"),
        "currency": text(raw, "HWaers"),
        "description": text(raw, "Tcode", default="") or text(raw, "Zuonr"),
        "postingDate": sap_date(raw, "HBudat"),
        "documentDate": sap_date(raw, "HBldat"),
        "fiscalYear": text(raw, "Gjahr"),
        "lineNumber": text(raw, "Buzei"),
        "documentTypeRaw": text(raw, "HBlart"),
        "quantity": number(raw, "Menge"),
        "unitOfMeasure": text(raw, "Meins"),
        "materialNumber": text(raw, "Matnr"),
        "glAccount": text(raw, "Hkont"),
        "postingKey": text(raw, "Bschl"),
        "referenceInvoice": text(raw, "Rebzg"),
        "userName": text(raw, "Usnam"),
        "companyCode": text(raw, "Bukrs"),
        "transactionCode": text(raw, "Tcode"),
    }


def map_rows(rows: List[Any], mapper: Callable[[Mapping[str, Any]], Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [mapper(row) for row in rows if isinstance(row, Mapping)]
