from pathlib import Path
from typing import Optional, Union

from matterdesk.api_paths import API_PATHS
from matterdesk.services.base import BaseService

DEFAULT_TASKS_REPORT = "task_details.xlsx"
DEFAULT_USERS_REPORT = "user_details.xlsx"


class ReportService(BaseService):
    def export_tasks(self, destination: Optional[Union[str, Path]] = None) -> Path:
        return self.client.download(API_PATHS.REPORTS.EXPORT_TASKS, destination or DEFAULT_TASKS_REPORT)

    def export_users(self, destination: Optional[Union[str, Path]] = None) -> Path:
        return self.client.download(API_PATHS.REPORTS.EXPORT_USERS, destination or DEFAULT_USERS_REPORT)
