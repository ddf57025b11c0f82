from typing import Any, Dict, List, Optional

from matterdesk.api_paths import API_PATHS
from matterdesk.documents.schemas import Document, DocumentPayload
from matterdesk.exceptions import ValidationError
from matterdesk.services.base import BaseService, unwrap, unwrap_list


class DocumentService(BaseService):
    def list_documents(self, params: Optional[Dict[str, Any]] = None) -> List[Document]:
        data = self.client.get(API_PATHS.DOCUMENTS.GET_ALL, params=params)
        return [Document.model_validate(item) for item in unwrap_list(data, "documents")]

    def get_document(self, document_id: str) -> Document:
        return Document.model_validate(unwrap(self.client.get(API_PATHS.DOCUMENTS.by_id(document_id)), "document"))

    def create_document(self, payload: DocumentPayload) -> Document:
        if not payload.title or not payload.title.strip():
            raise ValidationError("Document title is required.")
        data = self.client.post(API_PATHS.DOCUMENTS.CREATE, json=payload.to_api())
        return Document.model_validate(unwrap(data, "document"))

    def update_document(self, document_id: str, payload: DocumentPayload) -> Document:
        data = self.client.put(API_PATHS.DOCUMENTS.by_id(document_id), json=payload.to_api())
        return Document.model_validate(unwrap(data, "document"))

    def delete_document(self, document_id: str) -> Dict[str, Any]:
        return self.client.delete(API_PATHS.DOCUMENTS.by_id(document_id))
