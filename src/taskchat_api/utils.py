from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .schemas import TaskOut


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_millis() -> int:
    return int(time.time() * 1000)


# PUBLIC_INTERFACE
def filter_tasks(tasks: Iterable[TaskOut], search: Optional[str]) -> List[TaskOut]:
    """
    Keep tasks whose title or description contains ``search`` (case-insensitive).

    Args:
        tasks: Tasks returned by the store query.
        search: Free text; None or empty keeps every task.

    Returns:
        The matching tasks in their original order.
    """
    if not search:
        return list(tasks)
    needle = search.lower()

    def matches(t: TaskOut) -> bool:
        return needle in (t.title or "").lower() or needle in (t.description or "").lower()

    return [t for t in tasks if matches(t)]


# PUBLIC_INTERFACE
def sort_tasks(tasks: List[TaskOut], sort_by: Optional[str], order: Optional[str] = "desc") -> List[TaskOut]:
    """
    Sort tasks by creation time ('timestamp') or completion flag ('status').

    Any order other than 'asc' sorts descending. The sort is stable, so ties
    keep the store order in both directions. An unknown or missing
    ``sort_by`` returns the list unchanged.
    """
    reverse = order != "asc"
    if sort_by == "timestamp":
        return sorted(tasks, key=lambda t: t.created_at, reverse=reverse)
    if sort_by == "status":
        return sorted(tasks, key=lambda t: t.status, reverse=reverse)
    return tasks
