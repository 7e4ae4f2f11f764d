"""Task list filtering, fuzzy search and sorting.

Pure functions over a task list: search narrows and ranks, field and date
predicates are ANDed, then a stable sort on the selected key.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from difflib import SequenceMatcher

from taskflow.models import PRIORITY_RANK, Task, TaskFilters
from taskflow.utils.dates import FAR_FUTURE, start_of_week

SEARCH_WEIGHTS: dict[str, float] = {
    "title": 0.4,
    "description": 0.2,
    "comments": 0.2,
    "assignee": 0.2,
}
DEFAULT_THRESHOLD = 0.6


def _naive_utc(value: datetime) -> datetime:
    """Drop tzinfo after converting to UTC so naive and aware values compare."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def similarity(query: str, text: str | None) -> float:
    """How well *query* matches *text*, in [0, 1].

    A substring hit scores 1; otherwise the best SequenceMatcher ratio against
    the whole text or any run of words as long as the query.
    """
    if not text:
        return 0.0
    needle = query.casefold().strip()
    haystack = text.casefold()
    if not needle:
        return 0.0
    if needle in haystack:
        return 1.0

    words = haystack.split()
    width = max(1, len(needle.split()))
    candidates = [haystack]
    candidates.extend(" ".join(words[i : i + width]) for i in range(len(words)))
    return max(SequenceMatcher(None, needle, c).ratio() for c in candidates)


def _search_fields(task: Task) -> dict[str, str]:
    return {
        "title": task.title,
        "description": task.description or "",
        "comments": " ".join(c.content for c in task.comments),
        "assignee": task.assigned_to.name if task.assigned_to else "",
    }


def search_tasks(
    tasks: Iterable[Task], query: str, threshold: float = DEFAULT_THRESHOLD
) -> list[Task]:
    """Tasks matching *query* in any searched field, most relevant first."""
    scored: list[tuple[float, Task]] = []
    for task in tasks:
        scores = {
            field: similarity(query, text) for field, text in _search_fields(task).items()
        }
        if max(scores.values()) < threshold:
            continue
        relevance = sum(SEARCH_WEIGHTS[field] * score for field, score in scores.items())
        scored.append((relevance, task))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [task for _, task in scored]


def matches_date_range(
    task: Task, date_range: str, now: datetime, week_starts_on: int = 0
) -> bool:
    """Due-date window predicate."""
    if date_range == "all":
        return True
    if task.due_date is None:
        return date_range == "no-due-date"

    due = _naive_utc(task.due_date)
    current = _naive_utc(now)
    if date_range == "overdue":
        return due < current and task.status != "done"
    if date_range == "today":
        return due.date() == current.date()

    week_start = start_of_week(current.date(), week_starts_on)
    if date_range == "this-week":
        return week_start <= due.date() < week_start + timedelta(days=7)
    if date_range == "next-week":
        next_start = week_start + timedelta(days=7)
        return next_start <= due.date() < next_start + timedelta(days=7)
    return False


def matches_filters(
    task: Task, filters: TaskFilters, now: datetime, week_starts_on: int = 0
) -> bool:
    """Field-equality predicates plus the date range, ANDed."""
    if filters.status != "all" and task.status != filters.status:
        return False
    if filters.priority != "all" and task.priority != filters.priority:
        return False
    if filters.assignee != "all" and (
        task.assigned_to is None or task.assigned_to.id != filters.assignee
    ):
        return False
    if filters.milestone == "milestone" and task.type != "milestone":
        return False
    if filters.milestone == "task" and task.type == "milestone":
        return False
    if filters.deadline == "deadline" and not task.is_deadline:
        return False
    if filters.deadline == "normal" and task.is_deadline:
        return False
    return matches_date_range(task, filters.date_range, now, week_starts_on)


SORT_KEYS: dict[str, Callable[[Task], object]] = {
    "createdAt": lambda t: _naive_utc(t.created_at),
    "title": lambda t: t.title.casefold(),
    "priority": lambda t: PRIORITY_RANK.get(t.priority, 0),
    "dueDate": lambda t: _naive_utc(t.due_date) if t.due_date else FAR_FUTURE,
    "assignee": lambda t: t.assigned_to.name.casefold() if t.assigned_to else "zzz",
    "status": lambda t: t.status,
    "dependencyLevel": lambda t: len(t.dependencies),
}


def sort_tasks(tasks: list[Task], sort_by: str, sort_order: str = "asc") -> list[Task]:
    """Stable sort; ``relevance`` keeps the incoming order."""
    if sort_by == "relevance":
        return list(tasks)
    return sorted(tasks, key=SORT_KEYS[sort_by], reverse=sort_order == "desc")


def filter_tasks(
    tasks: Iterable[Task],
    filters: TaskFilters,
    now: datetime,
    week_starts_on: int = 0,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[Task]:
    """Search, filter and sort *tasks* according to *filters*."""
    selected = list(tasks)
    if filters.search and filters.search.strip():
        selected = search_tasks(selected, filters.search, threshold)
    selected = [t for t in selected if matches_filters(t, filters, now, week_starts_on)]
    return sort_tasks(selected, filters.sort_by, filters.sort_order)
