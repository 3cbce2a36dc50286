"""
SAP OData date handling.

SAP OData v2 serialises Edm.DateTime values as ``/Date(<millis>)/`` with an
optional ``+HHMM`` / ``-HHMM`` suffix. All calendar fields derived here are
read in UTC so bucket membership does not depend on the server timezone.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Tuple

SAP_DATE_RE = re.compile(r"/Date\((-?\d+)([+-]\d+)?\)/")
MONTH_ABBRS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
MONTH_LABEL_RE = re.compile(r"^([A-Z][a-z]{2}) '(\d{2})$")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
NO_DATE = "N/A"


def _offset(raw: str) -> timedelta:
    """``+HHMM`` when four digits follow the sign, otherwise signed milliseconds."""
    sign = -1 if raw.startswith("-") else 1
    digits = raw[1:]
    if len(digits) == 4:
        hours, minutes = int(digits[:2]), int(digits[2:])
        return sign * timedelta(hours=hours, minutes=minutes)
    return sign * timedelta(milliseconds=int(digits))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def decode(value: Any) -> Optional[datetime]:
    """
    Decode ``/Date(1748822400000)/`` into an aware UTC datetime.

    Returns None for anything that does not carry the pattern; never raises.
    """
    if isinstance(value, datetime):
        return _as_utc(value)
    if not isinstance(value, str) or not value:
        return None
    match = SAP_DATE_RE.search(value)
    if not match:
        return None
    try:
        millis = int(match.group(1))
        offset = _offset(match.group(2)) if match.group(2) else timedelta(0)
        return EPOCH + timedelta(milliseconds=millis) + offset
    except (OverflowError, ValueError):
        return None


def encode(value: datetime) -> str:
    delta = _as_utc(value) - EPOCH
    millis = delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000
    return f"/Date({millis})/"


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Accept SAP date strings, ISO strings, dates or datetimes; None otherwise."""
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate:
        return None
    decoded = decode(candidate)
    if decoded is not None:
        return decoded
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(candidate))
    except ValueError:
        return None


def to_iso_date(value: Any) -> Optional[str]:
    dt = coerce_datetime(value)
    if dt is None:
        return None
    return dt.strftime("%Y-%m-%d")


def to_month_label(value: Any) -> Optional[str]:
    """``"Dec '24"`` style label used for chart buckets."""
    dt = coerce_datetime(value)
    if dt is None:
        return None
    return format_month_label(dt.year, dt.month)


def format_month_label(year: int, month: int) -> str:
    return f"{MONTH_ABBRS[month - 1]} '{year % 100:02d}"


def parse_month_label(label: Any) -> Optional[Tuple[int, int]]:
    if not isinstance(label, str):
        return None
    match = MONTH_LABEL_RE.match(label.strip())
    if not match or match.group(1) not in MONTH_ABBRS:
        return None
    return 2000 + int(match.group(2)), MONTH_ABBRS.index(match.group(1)) + 1


def to_display_date(value: Any) -> str:
    """MM/DD/YYYY from UTC fields, or N/A."""
    dt = coerce_datetime(value)
    if dt is None:
        return NO_DATE
    return dt.strftime("%m/%d/%Y")
