from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from matterdesk.api_paths import API_PATHS
from matterdesk.exceptions import ValidationError
from matterdesk.matters.schemas import Case, CasePayload, Matter, MatterPayload
from matterdesk.schemas import UserBasic
from matterdesk.services.base import BaseService, unwrap, unwrap_list


class MatterService(BaseService):
    def list_matters(self, params: Optional[Dict[str, Any]] = None) -> List[Matter]:
        data = self.client.get(API_PATHS.MATTERS.GET_ALL, params=params)
        return [Matter.model_validate(item) for item in unwrap_list(data, "matters")]

    def list_raw_matters(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Matters exactly as the API sends them, for the invoice helpers."""
        data = self.client.get(API_PATHS.MATTERS.GET_ALL, params=params)
        return [item for item in unwrap_list(data, "matters") if isinstance(item, dict)]

    def list_clients(self) -> List[UserBasic]:
        data = self.client.get(API_PATHS.MATTERS.GET_CLIENTS)
        return [UserBasic.model_validate(item) for item in unwrap_list(data, "clients")]

    def get_matter(self, matter_id: str) -> Matter:
        return Matter.model_validate(unwrap(self.client.get(API_PATHS.MATTERS.by_id(matter_id)), "matter"))

    def create_matter(self, payload: MatterPayload) -> Matter:
        if not payload.title or not payload.title.strip():
            raise ValidationError("Matter title is required.")
        data = self.client.post(API_PATHS.MATTERS.CREATE, json=payload.to_api())
        return Matter.model_validate(unwrap(data, "matter"))

    def update_matter(self, matter_id: str, payload: MatterPayload) -> Matter:
        data = self.client.put(API_PATHS.MATTERS.by_id(matter_id), json=payload.to_api())
        return Matter.model_validate(unwrap(data, "matter"))

    def delete_matter(self, matter_id: str) -> Dict[str, Any]:
        return self.client.delete(API_PATHS.MATTERS.by_id(matter_id))

    # Case files
    def list_cases(self, params: Optional[Dict[str, Any]] = None) -> List[Case]:
        data = self.client.get(API_PATHS.CASES.GET_ALL, params=params)
        return [Case.model_validate(item) for item in unwrap_list(data, "cases")]

    def get_case(self, case_id: str) -> Case:
        return Case.model_validate(unwrap(self.client.get(API_PATHS.CASES.by_id(case_id)), "caseFile"))

    def create_case(self, payload: CasePayload) -> Case:
        if not payload.title or not payload.title.strip():
            raise ValidationError("Case title is required.")
        if not payload.matter:
            raise ValidationError("Select the matter this case belongs to.")
        data = self.client.post(API_PATHS.CASES.CREATE, json=payload.to_api())
        return Case.model_validate(unwrap(data, "caseFile"))

    def update_case(self, case_id: str, payload: CasePayload) -> Case:
        data = self.client.put(API_PATHS.CASES.by_id(case_id), json=payload.to_api())
        return Case.model_validate(unwrap(data, "caseFile"))

    def delete_case(self, case_id: str) -> Dict[str, Any]:
        return self.client.delete(API_PATHS.CASES.by_id(case_id))

    def upload_case_document(
        self,
        case_id: str,
        file_path: Union[str, Path],
        title: str,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not (title or "").strip():
            raise ValidationError("Document title is required.")

        form = {"title": title.strip()}
        if description and description.strip():
            form["description"] = description.strip()

        file_path = Path(file_path)
        with open(file_path, "rb") as f:
            data = self.client.post(API_PATHS.CASES.documents(case_id), data=form, files={"file": (file_path.name, f)})
        return unwrap(data, "document")
