import pytest

from matterdesk.tasks.helpers import (
    build_status_tabs,
    extract_status_summary,
    normalize_scope,
    normalize_status_filter,
    sort_tasks,
)
from matterdesk.tasks.schemas import StatusSummary, StatusTab


def test_sort_tasks_orders_by_status_priority_and_due_date():
    tasks = [
        {"_id": "1", "status": "In Progress", "priority": "Medium", "dueDate": "2025-03-10"},
        {"_id": "2", "status": "Pending", "priority": "High", "dueDate": "2025-02-01"},
        {"_id": "3", "status": "Pending", "priority": "Low", "dueDate": "2025-01-01"},
        {"_id": "4", "status": "Completed", "priority": "High", "dueDate": "2024-12-01"},
    ]

    sorted_tasks = sort_tasks(tasks, include_priority_sort=True)

    assert [task["_id"] for task in sorted_tasks] == ["2", "1", "3", "4"]


def test_sort_tasks_skips_priority_when_disabled():
    tasks = [
        {"_id": "1", "status": "Pending", "priority": "Low", "dueDate": "2025-01-02"},
        {"_id": "2", "status": "Pending", "priority": "High", "dueDate": "2025-01-01"},
    ]

    assert [task["_id"] for task in sort_tasks(tasks)] == ["2", "1"]


def test_sort_tasks_puts_missing_due_dates_last():
    tasks = [
        {"_id": "none", "status": "Pending"},
        {"_id": "dated", "status": "Pending", "dueDate": "2025-01-01T00:00:00Z"},
    ]

    assert [task["_id"] for task in sort_tasks(tasks)] == ["dated", "none"]
    assert sort_tasks(None) == []


def test_sort_tasks_does_not_mutate_input():
    tasks = [{"_id": "b", "dueDate": "2025-02-01"}, {"_id": "a", "dueDate": "2025-01-01"}]
    sort_tasks(tasks)
    assert [task["_id"] for task in tasks] == ["b", "a"]


def test_build_status_tabs_returns_counts():
    tabs = build_status_tabs({"all": 10, "pendingTasks": 4, "inProgressTasks": 3, "completedTasks": 3})

    assert tabs == [
        StatusTab(label="All", count=10),
        StatusTab(label="Pending", count=4),
        StatusTab(label="In Progress", count=3),
        StatusTab(label="Completed", count=3),
    ]


def test_build_status_tabs_defaults_to_zero():
    assert [tab.count for tab in build_status_tabs()] == [0, 0, 0, 0]


def test_extract_status_summary_coerces_missing_values():
    assert extract_status_summary({"inProgressTasks": "2"}) == StatusSummary(
        all=0, pending_tasks=0, in_progress_tasks=2, completed_tasks=0
    )
    assert extract_status_summary(None) == StatusSummary()


@pytest.mark.parametrize(
    "scope, expected",
    [(" My ", "my"), ("ALL", "all"), ("team", None), ("", None), (None, None)],
)
def test_normalize_scope(scope, expected):
    assert normalize_scope(scope) == expected


@pytest.mark.parametrize(
    "status, expected",
    [("All", None), (" all ", None), ("", None), (None, None), (" In Progress ", "In Progress")],
)
def test_normalize_status_filter(status, expected):
    assert normalize_status_filter(status) == expected
