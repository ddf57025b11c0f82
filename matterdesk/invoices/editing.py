"""
Helpers for the create/edit invoice flow.

``build_invoice_entry_from_payload`` produces the record shown in the listing
while the save request is in flight, so the totals follow the same rules as
``normalize_invoice_record``.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Union
import time

from matterdesk.dates import difference_in_days, format_date_label, parse_to_date
from matterdesk.helpers import to_number
from matterdesk.invoices.schemas import InvoiceEntry, InvoicePayload, InvoiceStatus, NormalizedInvoice

FallbackInvoice = Union[NormalizedInvoice, InvoiceEntry, None]


def compute_line_items_total(items: Optional[Iterable[Any]] = None) -> float:
    total = 0.0
    for item in items or []:
        amount = item.get("amount") if isinstance(item, dict) else getattr(item, "amount", None)
        total += to_number(amount, 0)
    return total


def infer_invoice_status(total_amount, due_date, today=None) -> str:
    if not total_amount or total_amount <= 0:
        return InvoiceStatus.PAID.value

    parsed_due_date = parse_to_date(due_date)
    if not parsed_due_date:
        return InvoiceStatus.PAYMENT_DUE.value

    diff_in_days = difference_in_days(parsed_due_date, today)
    if diff_in_days < 0:
        return InvoiceStatus.OVERDUE.value
    if diff_in_days <= 7:
        return InvoiceStatus.DUE_SOON.value
    return InvoiceStatus.PAYMENT_DUE.value


def _payload_dict(payload) -> Dict[str, Any]:
    if isinstance(payload, InvoicePayload):
        return payload.to_api()
    return dict(payload or {})


def build_invoice_entry_from_payload(
    payload: Union[InvoicePayload, Dict[str, Any], None],
    fallback_invoice: FallbackInvoice = None,
    now: Optional[datetime] = None,
) -> InvoiceEntry:
    """
    Build the listing entry for a submitted invoice form.

    Totals are recomputed from the line items when any group has an amount;
    otherwise the previous entry's figures are kept.
    """
    data = _payload_dict(payload)
    current = now or datetime.now()
    fallback_raw = dict(fallback_invoice.raw or {}) if fallback_invoice else {}

    issued_on = (
        data.get("invoiceDate")
        or (fallback_invoice.issued_on if fallback_invoice else None)
        or fallback_raw.get("invoiceDate")
        or fallback_raw.get("issuedOn")
        or current.isoformat()
    )
    due_date = (
        data.get("dueDate")
        or (fallback_invoice.due_date if fallback_invoice else None)
        or fallback_raw.get("dueDate")
        or ""
    )

    professional_total = compute_line_items_total(data.get("professionalFees"))
    expenses_total = compute_line_items_total(data.get("expenses"))
    government_total = compute_line_items_total(data.get("governmentFees"))
    has_line_items = professional_total > 0 or expenses_total > 0 or government_total > 0

    fallback_advance = getattr(fallback_invoice, "advance_amount", 0) or 0
    advance_amount = max(to_number(data.get("advanceAmount", fallback_advance), 0), 0)

    if has_line_items:
        advance_applied = min(advance_amount, expenses_total)
        net_expenses_total = max(expenses_total - advance_applied, 0)
    else:
        fallback_expenses = to_number(fallback_raw.get("expensesTotal"), 0)
        advance_applied = min(advance_amount, max(fallback_expenses, 0))
        net_expenses_total = max(getattr(fallback_invoice, "net_expenses_total", 0) or 0, 0)

    fallback_total = max(to_number(getattr(fallback_invoice, "total_amount", 0), 0), 0)
    calculated_total = professional_total + government_total + net_expenses_total
    total_amount = calculated_total if has_line_items else fallback_total

    fallback_balance = max(to_number(getattr(fallback_invoice, "balance_due", 0), 0) or fallback_total, 0)
    balance_due = max(calculated_total, 0) if has_line_items else fallback_balance

    identifier = (
        (fallback_invoice.id if fallback_invoice else None)
        or data.get("invoiceId")
        or data.get("invoiceNumber")
        or f"invoice-{int(time.time() * 1000)}"
    )

    return InvoiceEntry(
        id=str(identifier),
        invoice_number=(
            data.get("invoiceNumber")
            or (fallback_invoice.invoice_number if fallback_invoice else None)
            or f"Invoice {current.year}"
        ),
        issued_on=issued_on,
        issued_on_label=format_date_label(issued_on, "Not set"),
        due_date=due_date,
        due_date_label=format_date_label(due_date, "Not set"),
        total_amount=max(total_amount, 0),
        balance_due=balance_due,
        status=infer_invoice_status(balance_due, due_date, current),
        raw={**fallback_raw, **data},
    )


def _resolve_invoice_identifier(record: Dict[str, Any]) -> Optional[str]:
    if not record:
        return None
    invoice_number = record.get("invoiceNumber")
    return (
        record.get("_id")
        or record.get("id")
        or record.get("invoiceId")
        or (invoice_number if isinstance(invoice_number, str) else None)
    )


def build_invoice_modal_initial_values(entry: FallbackInvoice) -> Optional[Dict[str, Any]]:
    """Form values for editing an existing invoice, in wire (camelCase) keys."""
    if entry is None:
        return None

    raw_invoice = dict(entry.raw or {})
    entry_values = {
        "id": entry.id,
        "invoiceNumber": entry.invoice_number,
        "issuedOn": entry.issued_on,
        "dueDate": entry.due_date,
        "totalAmount": entry.total_amount,
        "balanceDue": entry.balance_due,
        "status": entry.status,
    }
    identifier = _resolve_invoice_identifier(raw_invoice) or _resolve_invoice_identifier(entry_values)

    return {
        **entry_values,
        **raw_invoice,
        "id": identifier or entry.id,
        "_id": raw_invoice.get("_id") or identifier or entry.id,
        "invoiceId": identifier or entry.id,
        "invoiceNumber": raw_invoice.get("invoiceNumber") or raw_invoice.get("number") or entry.invoice_number or "",
        "invoiceDate": raw_invoice.get("invoiceDate") or raw_invoice.get("issuedOn") or entry.issued_on or "",
        "dueDate": raw_invoice.get("dueDate") or entry.due_date or "",
    }
