from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, Union

from matterdesk.schemas import ApiRecord, UserBasic


class Document(ApiRecord):
    title: str = ""
    file_url: Optional[str] = Field(None, alias="fileUrl")
    matter: Optional[Union[Dict[str, Any], str]] = None
    case_file: Optional[Union[Dict[str, Any], str]] = Field(None, alias="caseFile")
    uploaded_by: Optional[Union[UserBasic, str]] = Field(None, alias="uploadedBy")
    created_at: Optional[str] = Field(None, alias="createdAt")


class DocumentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: Optional[str] = None
    file_url: Optional[str] = Field(None, alias="fileUrl")
    matter: Optional[str] = None
    case_file: Optional[str] = Field(None, alias="caseFile")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
