"""CRM report aggregation."""

from collections import Counter
from datetime import date
from typing import Iterable, Optional

from src.db.models import Client, ClientStatus, Meeting, MeetingStatus, Task, TaskPriority
from src.schemas.schemas import ReportSummary

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _in_range(day: Optional[date], start: Optional[date], end: Optional[date]) -> bool:
    if start is None and end is None:
        return True
    if day is None:
        return False
    return (start is None or day >= start) and (end is None or day <= end)


def _counts(values: Iterable[str], keys: Iterable[str]) -> dict[str, int]:
    counter = Counter(values)
    return {key: counter.get(key, 0) for key in keys}


def build_summary(
    clients: list[Client],
    meetings: list[Meeting],
    tasks: list[Task],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> ReportSummary:
    """Summarize a user's CRM records.

    Meetings are filtered on their date and tasks on their due date; tasks
    without a due date only count when no range is given. Clients are never
    filtered.
    """
    meetings = [m for m in meetings if _in_range(m.date, start, end)]
    tasks = [t for t in tasks if _in_range(t.due_date, start, end)]
    completed = sum(1 for t in tasks if t.completed)

    return ReportSummary(
        from_date=start,
        to_date=end,
        total_clients=len(clients),
        total_meetings=len(meetings),
        total_tasks=len(tasks),
        clients_by_status=_counts((c.status.value for c in clients), (s.value for s in ClientStatus)),
        meetings_by_status=_counts((m.status.value for m in meetings), (s.value for s in MeetingStatus)),
        meetings_by_weekday=_counts((WEEKDAYS[m.date.weekday()] for m in meetings), WEEKDAYS),
        tasks_by_priority=_counts((t.priority.value for t in tasks), (p.value for p in TaskPriority)),
        tasks_completed=completed,
        tasks_pending=len(tasks) - completed,
    )
