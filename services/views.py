"""
Display views over gateway resources: fetch, map, filter, sort.

Each view ties a gateway resource to its record mapper, the fields the
search box looks at, the date field the range filter applies to, and the
default ordering of the table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from config import SapSettings
from services import gateway
from services.async_utils import run_named_isolated
from services.dashboard import build_dashboard
from services.list_view import ASC, DESC, FilterState, SortState, apply_view
from services.records import (
    map_goods_receipt,
    map_invoice,
    map_memo,
    map_payment_aging,
    map_purchase_order,
    map_rfq,
    map_rows,
    missing_fields,
)
from services.sap_client import SapGatewayError, SapODataClient

LOGGER = logging.getLogger(__name__)

DASHBOARD_CONCURRENCY = 6


class UnknownViewError(SapGatewayError):
    status_code = 404


@dataclass(frozen=True)
class ViewSpec:
    resource: gateway.ResourceSpec
    mapper: Callable[[Mapping[str, Any]], Dict[str, Any]]
    searchable_fields: Tuple[str, ...]
    date_field: Optional[str]
    default_sort: str
    default_direction: str = ASC


VIEWS: Dict[str, ViewSpec] = {
    "rfq": ViewSpec(
        gateway.RFQ,
        map_rfq,
        ("id", "vendorId", "item", "unit"),
        "documentDate",
        "documentDate",
        DESC,
    ),
    "purchase-orders": ViewSpec(
        gateway.PURCHASE_ORDERS,
        map_purchase_order,
        ("poNumber", "itemNumber", "materialNumber", "description", "status", "documentType"),
        "documentDate",
        "documentDate",
        DESC,
    ),
    "goods-receipt": ViewSpec(
        gateway.GOODS_RECEIPTS,
        map_goods_receipt,
        ("documentNo", "vendorId", "documentType", "materialNo", "description", "purchaseOrderNo"),
        "postingDate",
        "postingDate",
    ),
    "invoice": ViewSpec(
        gateway.INVOICES,
        map_invoice,
        ("invoiceNumber", "vendorId", "materialNumber", "description", "documentType", "currency"),
        "postingDate",
        "postingDate",
        DESC,
    ),
    "payage": ViewSpec(
        gateway.PAYMENT_AGING,
        map_payment_aging,
        ("documentNumber", "vendorId", "status", "currency"),
        "dueDate",
        "aging",
        DESC,
    ),
    "memo": ViewSpec(
        gateway.MEMOS,
        map_memo,
        ("memoId", "vendorId", "type", "description", "referenceInvoice", "materialNumber"),
        "postingDate",
        "postingDate",
        DESC,
    ),
}


def get_view(name: str) -> ViewSpec:
    view = VIEWS.get((name or "").strip().lower())
    if view is None:
        raise UnknownViewError(f"Unknown view '{name}'. Expected one of: {', '.join(sorted(VIEWS))}")
    return view


def fetch_mapped(
    settings: SapSettings,
    view: ViewSpec,
    vendor_id: Any,
    *,
    client: Optional[SapODataClient] = None,
) -> List[Dict[str, Any]]:
    rows = gateway.fetch_rows(settings, view.resource, vendor_id, client=client)
    if rows:
        missing = missing_fields(rows[0], view.resource.entity_set)
        if missing:
            LOGGER.debug("[Views] %s rows lack %s", view.resource.entity_set, ", ".join(missing))
    return map_rows(rows, view.mapper)


def load_view(
    settings: SapSettings,
    name: str,
    vendor_id: Any,
    filter_state: FilterState,
    sort_field: Optional[str] = None,
    direction: Optional[str] = None,
    *,
    client: Optional[SapODataClient] = None,
) -> List[Dict[str, Any]]:
    """Mapped records of one resource, filtered and sorted for display."""
    view = get_view(name)
    records = fetch_mapped(settings, view, vendor_id, client=client)
    sort_state = SortState.from_params(sort_field or view.default_sort, direction or view.default_direction)
    shown = apply_view(records, filter_state, sort_state, view.searchable_fields, view.date_field)
    LOGGER.info("[Views] %s for %s: %d of %d record(s)", name, vendor_id, len(shown), len(records))
    return shown


def _fetch_section(settings: SapSettings, view: ViewSpec, vendor_id: Any, client: Optional[SapODataClient]):
    try:
        return fetch_mapped(settings, view, vendor_id, client=client)
    except gateway.ResourceNotFoundError:
        # Goods receipts answer 404 on empty results or a denied vendor.
        return []


async def load_dashboard(
    settings: SapSettings,
    vendor_id: Any,
    *,
    client: Optional[SapODataClient] = None,
) -> Dict[str, Any]:
    """
    Fetch every list resource concurrently and aggregate them.

    A failing resource leaves its section empty and is reported under
    ``errors``; the rest of the dashboard is still built.
    """
    if vendor_id is None or not str(vendor_id).strip():
        raise gateway.MissingIdentifierError("lifnr is required")
    calls = {
        name: partial(_fetch_section, settings, view, vendor_id, client)
        for name, view in VIEWS.items()
    }
    results, failures = await run_named_isolated(calls, max_concurrency=DASHBOARD_CONCURRENCY)

    errors: Dict[str, str] = {}
    for name, exc in failures.items():
        if isinstance(exc, SapGatewayError):
            LOGGER.warning("[Views] dashboard section %s failed for %s: %s", name, vendor_id, exc)
        else:
            LOGGER.error("[Views] dashboard section %s crashed for %s", name, vendor_id, exc_info=exc)
        errors[name] = str(exc) or exc.__class__.__name__

    payload = build_dashboard(results)
    payload["vendorId"] = vendor_id
    payload["errors"] = errors
    return payload
