from typing import Any, Dict, List, Optional

from matterdesk.api_paths import API_PATHS
from matterdesk.exceptions import ValidationError
from matterdesk.notices.schemas import Notice, NoticePayload
from matterdesk.services.base import BaseService, unwrap, unwrap_list


class NoticeService(BaseService):
    def publish(self, message: str, starts_at: Optional[str] = None, expires_at: Optional[str] = None) -> Notice:
        if not (message or "").strip():
            raise ValidationError("Notice message is required.")
        payload = NoticePayload(message=message.strip(), starts_at=starts_at, expires_at=expires_at)
        data = self.client.post(API_PATHS.NOTICES.PUBLISH, json=payload.to_api())
        return Notice.model_validate(unwrap(data, "notice"))

    def get_active(self) -> List[Notice]:
        """Active notices; the API answers with either a ``notices`` list or a single ``notice``."""
        data = self.client.get(API_PATHS.NOTICES.GET_ACTIVE)
        if isinstance(data, dict) and "notices" not in data:
            notice = data.get("notice")
            return [Notice.model_validate(notice)] if isinstance(notice, dict) else []
        return [Notice.model_validate(item) for item in unwrap_list(data, "notices")]

    def list_all(self) -> List[Notice]:
        data = self.client.get(API_PATHS.NOTICES.GET_ALL)
        return [Notice.model_validate(item) for item in unwrap_list(data, "notices")]

    def delete(self, notice_id: str) -> Dict[str, Any]:
        return self.client.delete(API_PATHS.NOTICES.by_id(notice_id))
