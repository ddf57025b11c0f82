from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Union
from datetime import datetime
import enum

from matterdesk.schemas import ApiRecord, UserBasic


class TaskStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TodoItem(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    text: str
    completed: bool = False


class Task(ApiRecord):
    title: str = ""
    description: Optional[str] = None
    status: str = TaskStatus.PENDING.value
    priority: str = TaskPriority.MEDIUM.value
    due_date: Optional[str] = Field(None, alias="dueDate")
    assigned_to: List[Union[UserBasic, str]] = Field(default_factory=list, alias="assignedTo")
    todo_checklist: List[TodoItem] = Field(default_factory=list, alias="todoChecklist")
    progress: Optional[float] = None
    completed_todo_count: Optional[int] = Field(None, alias="completedTodoCount")
    matter: Optional[Union[Dict[str, Any], str]] = None
    case: Optional[Union[Dict[str, Any], str]] = None
    attachments: List[Any] = Field(default_factory=list)


# Request payloads
class TaskPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[str] = Field(None, alias="dueDate")
    assigned_to: Optional[List[str]] = Field(None, alias="assignedTo")
    todo_checklist: Optional[List[TodoItem]] = Field(None, alias="todoChecklist")
    attachments: Optional[List[str]] = None
    matter: Optional[str] = None
    case: Optional[str] = Field(None, alias="caseFile")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StatusSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    all: int = 0
    pending_tasks: int = Field(0, alias="pendingTasks")
    in_progress_tasks: int = Field(0, alias="inProgressTasks")
    completed_tasks: int = Field(0, alias="completedTasks")


class StatusTab(BaseModel):
    label: str
    count: int = 0


class TaskListing(BaseModel):
    tasks: List[Task]
    status_summary: StatusSummary
    tabs: List[StatusTab]
    fetched_at: datetime = Field(default_factory=datetime.now)
