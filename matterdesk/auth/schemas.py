from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, Dict, Any

from matterdesk.schemas import ApiRecord


class UserCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: EmailStr
    password: str
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")
    admin_invite_token: Optional[str] = Field(None, alias="adminInviteToken")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AdminTokenReset(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    new_password: str = Field(..., alias="newPassword")
    admin_invite_token: str = Field(..., alias="adminInviteToken")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class UserProfile(ApiRecord):
    name: str = ""
    email: str = ""
    role: str = ""
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")
    office_location: Optional[str] = Field(None, alias="officeLocation")
    gender: Optional[str] = None
    must_change_password: bool = Field(False, alias="mustChangePassword")
    token: Optional[str] = None
