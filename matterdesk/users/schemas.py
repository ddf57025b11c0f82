from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any

from matterdesk.auth.schemas import UserProfile
from matterdesk.roles import UserRole


class TeamMember(UserProfile):
    """Directory entry as listed by ``GET /api/users``, including task counts."""
    pending_tasks: int = Field(0, alias="pendingTasks")
    in_progress_tasks: int = Field(0, alias="inProgressTasks")
    completed_tasks: int = Field(0, alias="completedTasks")


class UserPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None
    office_location: Optional[str] = Field(None, alias="officeLocation")
    gender: Optional[str] = None

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
