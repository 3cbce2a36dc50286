import asyncio
from typing import Any, Callable, Dict, Tuple


async def run_named_isolated(
    calls: Dict[str, Callable[[], Any]], max_concurrency: int = 5
) -> Tuple[Dict[str, Any], Dict[str, BaseException]]:
    """
    Run zero-arg sync callables concurrently using asyncio.to_thread, bounded by
    max_concurrency. One failing call does not cancel the others.

    Returns (results, errors), both keyed by the names in ``calls``.
    """
    sem = asyncio.Semaphore(max_concurrency)

    async def _run_one(func: Callable[[], Any]) -> Any:
        async with sem:
            return await asyncio.to_thread(func)

    names = list(calls)
    outcomes = await asyncio.gather(*(_run_one(calls[name]) for name in names), return_exceptions=True)
    results: Dict[str, Any] = {}
    errors: Dict[str, BaseException] = {}
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, BaseException):
            errors[name] = outcome
        else:
            results[name] = outcome
    return results, errors
