from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Union

from matterdesk.schemas import ApiRecord, UserBasic


class MatterStats(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    open_task_count: int = Field(0, alias="openTaskCount")
    closed_task_count: int = Field(0, alias="closedTaskCount")


class MatterBilling(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    invoice_suppressed: bool = Field(False, alias="invoiceSuppressed")


class Matter(ApiRecord):
    title: str = ""
    matter_number: Optional[str] = Field(None, alias="matterNumber")
    client: Optional[Union[UserBasic, str]] = None
    lead_attorney: Optional[Union[UserBasic, str]] = Field(None, alias="leadAttorney")
    team_members: List[Union[UserBasic, str]] = Field(default_factory=list, alias="teamMembers")
    status: Optional[str] = None
    practice_area: Optional[str] = Field(None, alias="practiceArea")
    tags: List[Any] = Field(default_factory=list)
    key_contacts: List[Any] = Field(default_factory=list, alias="keyContacts")
    description: Optional[str] = None
    stats: MatterStats = Field(default_factory=MatterStats)
    billing: MatterBilling = Field(default_factory=MatterBilling)
    opened_date: Optional[str] = Field(None, alias="openedDate")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")


class Case(ApiRecord):
    title: str = ""
    case_number: Optional[str] = Field(None, alias="caseNumber")
    matter: Optional[Union[Dict[str, Any], str]] = None
    court: Optional[str] = None
    status: Optional[str] = None
    lead_attorney: Optional[Union[UserBasic, str]] = Field(None, alias="leadAttorney")
    lead_counsel: Optional[Union[UserBasic, str]] = Field(None, alias="leadCounsel")


class MatterPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: Optional[str] = None
    matter_number: Optional[str] = Field(None, alias="matterNumber")
    client: Optional[str] = None
    lead_attorney: Optional[str] = Field(None, alias="leadAttorney")
    team_members: Optional[List[str]] = Field(None, alias="teamMembers")
    status: Optional[str] = None
    practice_area: Optional[str] = Field(None, alias="practiceArea")
    description: Optional[str] = None
    opened_date: Optional[str] = Field(None, alias="openedDate")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CasePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: Optional[str] = None
    case_number: Optional[str] = Field(None, alias="caseNumber")
    matter: Optional[str] = None
    court: Optional[str] = None
    status: Optional[str] = None
    lead_attorney: Optional[str] = Field(None, alias="leadAttorney")
    lead_counsel: Optional[str] = Field(None, alias="leadCounsel")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
