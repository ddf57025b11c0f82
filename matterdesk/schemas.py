from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ApiRecord(BaseModel):
    """Base for records owned by the backend. Unknown fields are kept as-is."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")


class UserBasic(ApiRecord):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")
