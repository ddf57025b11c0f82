import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from matterdesk.api_paths import API_PATHS
from matterdesk.exceptions import ValidationError
from matterdesk.notices.schemas import Notification
from matterdesk.services.base import BaseService, unwrap, unwrap_list
from matterdesk.tasks.helpers import (
    build_status_tabs,
    extract_status_summary,
    normalize_scope,
    normalize_status_filter,
    sort_tasks,
)
from matterdesk.tasks.schemas import Task, TaskListing, TaskPayload, TaskStatus, TodoItem

logger = logging.getLogger(__name__)


class TaskService(BaseService):
    def list_tasks(
        self,
        status_filter: Optional[str] = "All",
        scope: Optional[str] = None,
        include_priority_sort: bool = False,
    ) -> TaskListing:
        params = {}
        normalized_status = normalize_status_filter(status_filter)
        normalized_scope = normalize_scope(scope)

        if normalized_status:
            params["status"] = normalized_status
        if normalized_scope:
            params["scope"] = normalized_scope

        data = self.client.get(API_PATHS.TASKS.GET_ALL, params=params)
        raw_tasks = unwrap_list(data, "tasks")
        summary = extract_status_summary(data.get("statusSummary") if isinstance(data, dict) else None)

        tasks = [Task.model_validate(task) for task in sort_tasks(raw_tasks, include_priority_sort)]
        logger.info(f"Fetched {len(tasks)} tasks")
        return TaskListing(tasks=tasks, status_summary=summary, tabs=build_status_tabs(summary))

    def get_task(self, task_id: str) -> Task:
        return Task.model_validate(unwrap(self.client.get(API_PATHS.TASKS.by_id(task_id)), "task"))

    def create_task(self, payload: TaskPayload) -> Task:
        if not payload.title or not payload.title.strip():
            raise ValidationError("Title is required.")
        if not payload.due_date:
            raise ValidationError("Due date is required.")
        data = self.client.post(API_PATHS.TASKS.CREATE, json=payload.to_api())
        return Task.model_validate(unwrap(data, "task"))

    def update_task(self, task_id: str, payload: TaskPayload) -> Task:
        data = self.client.put(API_PATHS.TASKS.by_id(task_id), json=payload.to_api())
        return Task.model_validate(unwrap(data, "updatedTask"))

    def delete_task(self, task_id: str) -> Dict[str, Any]:
        return self.client.delete(API_PATHS.TASKS.by_id(task_id))

    def update_status(self, task_id: str, status: Union[TaskStatus, str]) -> Task:
        status = TaskStatus(status).value
        data = self.client.put(API_PATHS.TASKS.status(task_id), json={"status": status})
        return Task.model_validate(unwrap(data, "task"))

    def update_checklist(self, task_id: str, todo_checklist: List[Union[TodoItem, Dict[str, Any]]]) -> Task:
        items = []
        for item in todo_checklist:
            if isinstance(item, TodoItem):
                item = item.model_dump(by_alias=True)
            items.append({"_id": item.get("_id"), "completed": bool(item.get("completed"))})

        data = self.client.put(API_PATHS.TASKS.todo(task_id), json={"todoChecklist": items})
        return Task.model_validate(unwrap(data, "task"))

    def upload_document(
        self,
        task_id: str,
        file_path: Union[str, Path],
        title: str,
        document_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not (title or "").strip():
            raise ValidationError("Document title is required.")

        form = {"title": title.strip()}
        if document_type and document_type.strip():
            form["documentType"] = document_type.strip()
        if description and description.strip():
            form["description"] = description.strip()

        file_path = Path(file_path)
        with open(file_path, "rb") as f:
            data = self.client.post(API_PATHS.TASKS.documents(task_id), data=form, files={"file": (file_path.name, f)})
        return unwrap(data, "document")

    def get_dashboard_data(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.client.get(API_PATHS.TASKS.DASHBOARD_DATA, params=params)

    def get_user_dashboard_data(self) -> Dict[str, Any]:
        return self.client.get(API_PATHS.TASKS.USER_DASHBOARD_DATA)

    def get_notifications(self) -> List[Notification]:
        data = self.client.get(API_PATHS.TASKS.NOTIFICATIONS)
        return [Notification.model_validate(item) for item in unwrap_list(data, "notifications")]
