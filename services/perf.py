import logging
from collections import deque
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

_recent_timings: deque[Dict[str, Any]] = deque(maxlen=50)


def record_timing(label: str, duration_ms: float, ok: bool = True) -> None:
    _recent_timings.append({"label": label, "duration_ms": round(duration_ms, 2), "ok": ok})


def get_recent_timings() -> List[Dict[str, Any]]:
    return list(_recent_timings)


def summarize_timings() -> Dict[str, Dict[str, Any]]:
    """Per-label call count, failure count and average duration over the recent window."""
    summary: Dict[str, Dict[str, Any]] = {}
    for entry in _recent_timings:
        bucket = summary.setdefault(entry["label"], {"calls": 0, "failures": 0, "total_ms": 0.0})
        bucket["calls"] += 1
        bucket["total_ms"] += entry["duration_ms"]
        if not entry["ok"]:
            bucket["failures"] += 1
    for bucket in summary.values():
        bucket["avg_ms"] = round(bucket.pop("total_ms") / bucket["calls"], 2)
    return summary


def clear_timings() -> None:
    _recent_timings.clear()


@contextmanager
def time_block(label: str):
    start = perf_counter()
    ok = False
    try:
        yield
        ok = True
    finally:
        duration_ms = (perf_counter() - start) * 1000.0
        record_timing(label, duration_ms, ok=ok)
        logger.debug("[perf] %s took %.2fms", label, duration_ms)
