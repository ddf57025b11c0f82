"""
Task list ordering and status tab helpers.

These work on raw task dicts as returned by ``GET /api/tasks`` so they can be
applied before the records are parsed into ``Task`` models.
"""
import sys
from typing import Any, Dict, Iterable, List, Optional, Union

from matterdesk.dates import parse_to_date
from matterdesk.helpers import to_number
from matterdesk.tasks.schemas import StatusSummary, StatusTab, TaskPriority, TaskStatus

PRIORITY_ORDER = {
    TaskPriority.HIGH.value: 0,
    TaskPriority.MEDIUM.value: 1,
    TaskPriority.LOW.value: 2,
}
STATUS_ORDER = {TaskStatus.COMPLETED.value: 1}

TASK_SCOPES = ("all", "my")


def _due_timestamp(task: Dict[str, Any]) -> float:
    parsed = parse_to_date(task.get("dueDate")) if task.get("dueDate") else None
    return parsed.timestamp() if parsed else float("inf")


def sort_tasks(tasks: Optional[Iterable[Dict[str, Any]]] = None, include_priority_sort: bool = False) -> List[Dict[str, Any]]:
    """Open tasks before completed ones, then by priority (optional), then earliest due date."""
    def sort_key(task):
        task = task or {}
        status_rank = STATUS_ORDER.get(task.get("status"), 0)
        priority_rank = PRIORITY_ORDER.get(task.get("priority"), sys.maxsize) if include_priority_sort else 0
        return (status_rank, priority_rank, _due_timestamp(task))

    return sorted(tasks or [], key=sort_key)


def extract_status_summary(summary: Optional[Dict[str, Any]]) -> StatusSummary:
    summary = summary or {}
    return StatusSummary(
        all=int(to_number(summary.get("all") or 0, 0)),
        pending_tasks=int(to_number(summary.get("pendingTasks") or 0, 0)),
        in_progress_tasks=int(to_number(summary.get("inProgressTasks") or 0, 0)),
        completed_tasks=int(to_number(summary.get("completedTasks") or 0, 0)),
    )


def build_status_tabs(status_summary: Union[StatusSummary, Dict[str, Any], None] = None) -> List[StatusTab]:
    if not isinstance(status_summary, StatusSummary):
        status_summary = extract_status_summary(status_summary)

    return [
        StatusTab(label="All", count=status_summary.all),
        StatusTab(label=TaskStatus.PENDING.value, count=status_summary.pending_tasks),
        StatusTab(label=TaskStatus.IN_PROGRESS.value, count=status_summary.in_progress_tasks),
        StatusTab(label=TaskStatus.COMPLETED.value, count=status_summary.completed_tasks),
    ]


def normalize_scope(scope) -> Optional[str]:
    if not isinstance(scope, str):
        return None

    trimmed = scope.strip().lower()
    return trimmed if trimmed in TASK_SCOPES else None


def normalize_status_filter(status_filter) -> Optional[str]:
    if not isinstance(status_filter, str):
        return None

    trimmed = status_filter.strip()
    if not trimmed or trimmed.lower() == "all":
        return None
    return trimmed
