"""Search, date-range filtering and sorting for the dashboard list views."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from functools import cmp_to_key
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from services.sap_dates import SAP_DATE_RE, coerce_datetime

ASC = "asc"
DESC = "desc"


def _as_date(value: Any) -> Optional[date]:
    dt = coerce_datetime(value)
    return dt.date() if dt else None


@dataclass(frozen=True)
class FilterState:
    search_term: str = ""
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @classmethod
    def from_params(
        cls,
        search_term: Optional[str] = None,
        date_from: Any = None,
        date_to: Any = None,
    ) -> "FilterState":
        """Build from raw query values; unparseable bounds are ignored."""
        return cls(
            search_term=(search_term or "").strip(),
            date_from=_as_date(date_from),
            date_to=_as_date(date_to),
        )


@dataclass(frozen=True)
class SortState:
    field: str
    direction: str = ASC

    @classmethod
    def from_params(cls, field: str, direction: Optional[str] = None) -> "SortState":
        normalized = (direction or ASC).strip().lower()
        return cls(field=field, direction=DESC if normalized == DESC else ASC)


def _value(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field)
    return None


def _matches_search(record: Any, term: str, fields: Sequence[str]) -> bool:
    for field in fields:
        value = _value(record, field)
        if value is None:
            continue
        if term in str(value).lower():
            return True
    return False


def filter_records(
    records: Iterable[Any],
    state: FilterState,
    searchable_fields: Sequence[str],
    date_field: Optional[str] = None,
) -> List[Any]:
    """
    Keep records matching the search term and lying inside the date range.

    Bounds are inclusive and compared at calendar-day granularity (UTC).
    Whenever a bound is set, records whose date is missing or unparseable
    are dropped.
    """
    term = (state.search_term or "").strip().lower()
    date_from = _as_date(state.date_from)
    date_to = _as_date(state.date_to)
    bounded = bool(date_field) and (date_from is not None or date_to is not None)

    kept: List[Any] = []
    for record in records or []:
        if term and not _matches_search(record, term, searchable_fields):
            continue
        if bounded:
            record_date = _as_date(_value(record, date_field))
            if record_date is None:
                continue
            if date_from is not None and record_date < date_from:
                continue
            if date_to is not None and record_date > date_to:
                continue
        kept.append(record)
    return kept


def _is_date_like(value: Any, field: str) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    if isinstance(value, str):
        return bool(SAP_DATE_RE.search(value)) or "date" in field.lower()
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _cmp(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


def _compare_values(left: Any, right: Any, field: str) -> int:
    if left is None and right is None:
        return 0
    if left is None:
        return -1
    if right is None:
        return 1
    if _is_date_like(left, field) and _is_date_like(right, field):
        left_dt, right_dt = coerce_datetime(left), coerce_datetime(right)
        if left_dt is not None and right_dt is not None:
            return _cmp(left_dt, right_dt)
    if _is_number(left) and _is_number(right):
        return _cmp(left, right)
    return _cmp(str(left), str(right))


def sort_records(records: Iterable[Any], field: str, direction: str = ASC) -> List[Any]:
    """
    Stable sort by ``field``.

    Dates compare chronologically, numbers numerically, anything else as
    strings. Missing values come first ascending and last descending.
    """
    sign = -1 if (direction or "").lower() == DESC else 1

    def compare(a: Any, b: Any) -> int:
        return sign * _compare_values(_value(a, field), _value(b, field), field)

    return sorted(list(records or []), key=cmp_to_key(compare))


def apply_view(
    records: Iterable[Any],
    filter_state: FilterState,
    sort_state: Optional[SortState],
    searchable_fields: Sequence[str],
    date_field: Optional[str] = None,
) -> List[Any]:
    filtered = filter_records(records, filter_state, searchable_fields, date_field)
    if sort_state is None or not sort_state.field:
        return filtered
    return sort_records(filtered, sort_state.field, sort_state.direction)
