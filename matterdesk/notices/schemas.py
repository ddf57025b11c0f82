from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, Union

from matterdesk.schemas import ApiRecord, UserBasic


class Notice(ApiRecord):
    message: str = ""
    title: Optional[str] = None
    status: Optional[str] = None
    starts_at: Optional[str] = Field(None, alias="startsAt")
    expires_at: Optional[str] = Field(None, alias="expiresAt")
    created_by: Optional[Union[UserBasic, str]] = Field(None, alias="createdBy")
    created_at: Optional[str] = Field(None, alias="createdAt")


class Notification(ApiRecord):
    """Dashboard activity entry from ``GET /api/tasks/notifications``."""
    type: Optional[str] = None
    action: Optional[str] = None
    title: Optional[str] = None
    message: str = ""
    details: Optional[Any] = None
    actor: Optional[Union[UserBasic, str]] = None
    date: Optional[str] = None


class NoticePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1)
    starts_at: Optional[str] = Field(None, alias="startsAt")
    expires_at: Optional[str] = Field(None, alias="expiresAt")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
