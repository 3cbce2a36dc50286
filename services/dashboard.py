from __future__ import annotations

import re
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple

from services.sap_dates import coerce_datetime, format_month_label

AGING_0_30 = "0-30 Days"
AGING_31_60 = "31-60 Days"
AGING_61_PLUS = "61+ Days"
AGING_BUCKETS = (AGING_0_30, AGING_31_60, AGING_61_PLUS)

# Payment statuses that no longer count as outstanding.
SETTLED_STATUS_RE = re.compile(r"\b(paid|cleared|settled)\b", re.IGNORECASE)


def _field(record: Any, name: str) -> Any:
    return record.get(name) if isinstance(record, Mapping) else None


def count_by(records: Iterable[Any], key_fn: Callable[[Any], Optional[Hashable]]) -> Dict[Hashable, int]:
    """Count records per derived key; records whose key is None are skipped."""
    counts: Dict[Hashable, int] = {}
    for record in records or []:
        key = key_fn(record)
        if key is None:
            continue
        counts[key] = counts.get(key, 0) + 1
    return counts


def _to_days(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return 0


def aging_bucket(days: Any) -> str:
    value = _to_days(days)
    if value <= 30:
        return AGING_0_30
    if value <= 60:
        return AGING_31_60
    return AGING_61_PLUS


def aging_buckets(records: Iterable[Any], field: str = "aging") -> Dict[str, int]:
    """All three aging buckets, zero-filled, in display order."""
    counts = count_by(records, lambda record: aging_bucket(_field(record, field)))
    return {bucket: counts.get(bucket, 0) for bucket in AGING_BUCKETS}


def _year_month(value: Any) -> Optional[Tuple[int, int]]:
    dt = coerce_datetime(value)
    return (dt.year, dt.month) if dt is not None else None


def monthly_trend(records: Iterable[Any], date_field: str) -> List[Dict[str, Any]]:
    """
    ``[{"name": "Dec '24", "value": 3}, ...]`` ordered chronologically.

    Records without a decodable date are left out.
    """
    counts = count_by(records, lambda record: _year_month(_field(record, date_field)))
    return [{"name": format_month_label(*month), "value": counts[month]} for month in sorted(counts)]


def status_series(records: Iterable[Any], field: str) -> List[Dict[str, Any]]:
    counts = count_by(records, lambda record: _field(record, field))
    ordered = sorted(counts.items(), key=lambda item: (-item[1], str(item[0])))
    return [{"name": str(name), "value": value} for name, value in ordered]


def is_outstanding(payment: Any) -> bool:
    return not SETTLED_STATUS_RE.search(str(_field(payment, "status") or ""))


def _distinct(records: Iterable[Any], field: str) -> int:
    return len({value for value in (_field(record, field) for record in records or []) if value is not None})


def build_summary(
    *,
    rfqs: Iterable[Any] = (),
    purchase_orders: Iterable[Any] = (),
    goods_receipts: Iterable[Any] = (),
    payments: Iterable[Any] = (),
    memos: Iterable[Any] = (),
) -> List[Dict[str, Any]]:
    """Summary cards for the dashboard home page."""
    memo_types = count_by(memos, lambda memo: _field(memo, "type"))
    return [
        {"label": "Open RFQs", "value": _distinct(rfqs, "id")},
        {"label": "Active POs", "value": _distinct(purchase_orders, "poNumber")},
        {"label": "Goods Receipts", "value": _distinct(goods_receipts, "documentNo")},
        {"label": "Outstanding Invoices", "value": sum(1 for p in payments or [] if is_outstanding(p))},
        {"label": "Credit Memos", "value": memo_types.get("Credit", 0)},
        {"label": "Debit Memos", "value": memo_types.get("Debit", 0)},
    ]


def build_dashboard(sections: Mapping[str, List[Dict[str, Any]]]) -> Dict[str, Any]:
    """
    Summary cards and chart series from already-mapped resource lists.

    ``sections`` keys: rfq, purchase-orders, goods-receipt, invoice, payage, memo.
    Missing sections count as empty.
    """
    rfqs = sections.get("rfq") or []
    purchase_orders = sections.get("purchase-orders") or []
    goods_receipts = sections.get("goods-receipt") or []
    invoices = sections.get("invoice") or []
    payments = sections.get("payage") or []
    memos = sections.get("memo") or []

    aging = aging_buckets(payments)
    return {
        "summary": build_summary(
            rfqs=rfqs,
            purchase_orders=purchase_orders,
            goods_receipts=goods_receipts,
            payments=payments,
            memos=memos,
        ),
        "charts": {
            "monthlyRfqs": monthly_trend(rfqs, "documentDate"),
            "monthlyGoodsReceipts": monthly_trend(goods_receipts, "postingDate"),
            "monthlyInvoices": monthly_trend(invoices, "postingDate"),
            "poStatus": status_series(purchase_orders, "status"),
            "paymentStatus": status_series(payments, "status"),
            "memoTypes": status_series(memos, "type"),
            "paymentAging": [{"name": bucket, "value": aging[bucket]} for bucket in AGING_BUCKETS],
        },
    }
