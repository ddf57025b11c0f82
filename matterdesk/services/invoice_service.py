import logging
from typing import Any, Dict, List, Optional, Union

from matterdesk.api_paths import API_PATHS
from matterdesk.exceptions import ApiError, ValidationError
from matterdesk.invoices.editing import build_invoice_entry_from_payload, build_invoice_modal_initial_values
from matterdesk.invoices.schemas import InvoiceEntry, InvoiceListing, InvoicePayload, NormalizedInvoice
from matterdesk.invoices.utils import (
    derive_invoices_from_matters,
    filter_invoices_for_viewer,
    normalize_invoice_record,
    sort_invoices_by_due_date,
    summarize_invoices,
)
from matterdesk.roles import UserRole, matches_role
from matterdesk.services.base import BaseService, unwrap_list
from matterdesk.services.matter_service import MatterService

logger = logging.getLogger(__name__)


def _build_matter_lookup(invoices: List[NormalizedInvoice]) -> Dict[str, Optional[Dict[str, Any]]]:
    lookup: Dict[str, Optional[Dict[str, Any]]] = {}
    for invoice in invoices:
        if invoice.matter_id:
            lookup[invoice.matter_id] = invoice.raw_matter or lookup.get(invoice.matter_id)
    return lookup


class InvoiceService(BaseService):
    def list_invoices(
        self,
        viewer_role: Any = UserRole.ADMIN.value,
        viewer_id: Optional[str] = None,
        today=None,
    ) -> InvoiceListing:
        """Invoices visible to the viewer, normalized and ordered by due date."""
        params = {}
        if matches_role(viewer_role, UserRole.CLIENT) and viewer_id:
            params["clientId"] = viewer_id

        data = self.client.get(API_PATHS.INVOICES.GET_ALL, params=params)
        normalized = [
            normalize_invoice_record(invoice, None, today)
            for invoice in unwrap_list(data, "invoices")
            if isinstance(invoice, dict)
        ]
        scoped = filter_invoices_for_viewer([invoice for invoice in normalized if invoice], viewer_role, viewer_id)
        logger.info(f"Loaded {len(scoped)} invoices")

        return InvoiceListing(
            invoices=sort_invoices_by_due_date(scoped),
            summary=summarize_invoices(scoped),
            matter_lookup=_build_matter_lookup(scoped),
        )

    def derive_from_matters(
        self,
        viewer_role: Any = UserRole.ADMIN.value,
        viewer_id: Optional[str] = None,
        today=None,
    ) -> InvoiceListing:
        """Estimated invoices built from matter activity when none have been issued."""
        matters = MatterService(self.client).list_raw_matters()
        derived = derive_invoices_from_matters(matters, viewer_role, viewer_id, today)
        return InvoiceListing(
            invoices=sort_invoices_by_due_date(derived),
            summary=summarize_invoices(derived),
            matter_lookup=_build_matter_lookup(derived),
        )

    def get_invoice(self, invoice_id: str, today=None) -> NormalizedInvoice:
        return self._normalize_saved(self.client.get(API_PATHS.INVOICES.by_id(invoice_id)), None, today)

    def save_invoice(
        self,
        payload: Union[InvoicePayload, Dict[str, Any]],
        existing: Optional[NormalizedInvoice] = None,
        today=None,
    ) -> NormalizedInvoice:
        """Create the invoice, or update ``existing`` when given."""
        if not isinstance(payload, InvoicePayload):
            payload = InvoicePayload.model_validate(payload)
        if not payload.matter and not existing:
            raise ValidationError("Select the matter this invoice belongs to.")

        invoice_id = None
        if existing is not None:
            invoice_id = (existing.raw or {}).get("_id") or existing.id

        if invoice_id:
            data = self.client.put(API_PATHS.INVOICES.by_id(invoice_id), json=payload.to_api())
        else:
            data = self.client.post(API_PATHS.INVOICES.CREATE, json=payload.to_api())

        return self._normalize_saved(data, existing.raw_matter if existing else None, today)

    def delete_invoice(self, invoice_id: str) -> Dict[str, Any]:
        return self.client.delete(API_PATHS.INVOICES.by_id(invoice_id))

    def preview_invoice(
        self,
        payload: Union[InvoicePayload, Dict[str, Any]],
        existing: Optional[NormalizedInvoice] = None,
    ) -> InvoiceEntry:
        """Listing entry for a form submission, computed locally before saving."""
        return build_invoice_entry_from_payload(payload, existing)

    def edit_values(self, invoice: Optional[NormalizedInvoice]) -> Optional[Dict[str, Any]]:
        return build_invoice_modal_initial_values(invoice)

    def _normalize_saved(self, data: Any, fallback_matter, today) -> NormalizedInvoice:
        saved = data.get("invoice") if isinstance(data, dict) else None
        if not saved:
            raise ApiError("Invoice response missing required data", payload=data)

        matter = saved.get("matter") if isinstance(saved.get("matter"), dict) else fallback_matter
        return normalize_invoice_record(saved, matter, today)
