from datetime import datetime, timedelta
from typing import Any, Optional
import math

from matterdesk.dates import parse_to_date


def clamp_percentage(value) -> float:
    try:
        numeric_value = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(numeric_value):
        return 0
    return min(100, max(0, numeric_value))


def calculate_task_completion(progress=None, completed_todo_count=None, todo_checklist: Any = None) -> float:
    """Percentage complete; an explicit ``progress`` wins over the checklist ratio."""
    if isinstance(progress, (int, float)) and not isinstance(progress, bool) and not math.isnan(progress):
        return clamp_percentage(progress)

    completed = completed_todo_count if isinstance(completed_todo_count, (int, float)) else 0

    if isinstance(todo_checklist, (list, tuple)):
        total_todos = len(todo_checklist)
    elif isinstance(todo_checklist, (int, float)) and not isinstance(todo_checklist, bool):
        total_todos = todo_checklist
    else:
        total_todos = 0

    if total_todos <= 0:
        return 0

    return clamp_percentage(completed / total_todos * 100)


def _is_due_within_next_day(due_date, is_completed: bool, now: Optional[datetime] = None) -> bool:
    if not due_date or is_completed:
        return False

    parsed = parse_to_date(due_date)
    if not parsed:
        return False

    return parsed - (now or datetime.now()) <= timedelta(days=1)


def get_progress_tone(percentage, status: Optional[str] = None, due_date=None, now: Optional[datetime] = None) -> str:
    """``success`` once done, ``danger`` when barely started or due within a day, else ``caution``."""
    normalized_percentage = clamp_percentage(percentage)
    is_completed = (isinstance(status, str) and status.lower() == "completed") or normalized_percentage >= 100

    if is_completed:
        return "success"

    if normalized_percentage < 25 or _is_due_within_next_day(due_date, is_completed, now):
        return "danger"

    return "caution"
