"""
Invoice normalization and derivation.

The API returns invoices in several historical shapes (embedded or referenced
matters, ``amountDue`` vs ``balanceDue``, pre-computed or missing totals).
Everything here flattens those into ``NormalizedInvoice`` records and computes
the display status. Nothing in this module performs I/O.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
import time

from matterdesk.dates import add_days, difference_in_days, format_date_label, parse_to_date
from matterdesk.helpers import round_half_up, to_number
from matterdesk.invoices.schemas import InvoiceStatus, InvoiceSummary, NormalizedInvoice, Party
from matterdesk.roles import UserRole, matches_role

DUE_SOON_WINDOW_DAYS = 7
PAYMENT_DUE_RATIO = 0.6

STATUS_LABELS = {
    InvoiceStatus.OVERDUE.value: "Overdue",
    InvoiceStatus.DUE_SOON.value: "Due soon",
    InvoiceStatus.PAYMENT_DUE.value: "Payment due",
    InvoiceStatus.PARTIAL.value: "Partially paid",
    InvoiceStatus.PAID.value: "Paid",
}

STATUS_FILTERS = [{"value": "all", "label": "All statuses"}] + [
    {"value": value, "label": label} for value, label in STATUS_LABELS.items()
]


def _first(*values):
    """First truthy value, else the last one."""
    for value in values:
        if value:
            return value
    return values[-1] if values else None


def _coalesce(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _as_dict(value) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _to_id(value) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def clamp(value: float, minimum: float, maximum: float) -> float:
    if value != value:  # NaN
        return minimum
    return min(max(value, minimum), maximum)


def _to_valid_date(value, fallback=None) -> datetime:
    return parse_to_date(value) or parse_to_date(fallback) or datetime.now()


def format_currency(value) -> str:
    """Format an amount as Indian rupees with lakh/crore grouping, e.g. ``₹12,34,567.50``."""
    amount = to_number(value, 0)
    sign = "-" if amount < 0 else ""
    integer_part, _, fraction = f"{abs(amount):.2f}".partition(".")

    if len(integer_part) > 3:
        head, tail = integer_part[:-3], integer_part[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        integer_part = ",".join(groups + [tail])

    return f"{sign}₹{integer_part}.{fraction}"


def resolve_invoice_status(balance_due, total_amount, due_date, today=None) -> str:
    normalized_balance = max(to_number(balance_due, 0), 0)
    normalized_total = max(to_number(total_amount, 0), 0)
    due_in_days = difference_in_days(_to_valid_date(due_date, today), today)

    if normalized_total <= 0 or normalized_balance <= 0:
        return InvoiceStatus.PAID.value

    if due_in_days < 0:
        return InvoiceStatus.OVERDUE.value

    if due_in_days <= DUE_SOON_WINDOW_DAYS:
        return InvoiceStatus.DUE_SOON.value

    if normalized_balance / normalized_total >= PAYMENT_DUE_RATIO:
        return InvoiceStatus.PAYMENT_DUE.value

    return InvoiceStatus.PARTIAL.value


def _display_name(record: Dict[str, Any]) -> str:
    return _first(record.get("name"), record.get("fullName"), record.get("displayName"), "")


def _build_invoice_number(matter: Dict[str, Any], index: int) -> str:
    if matter.get("matterNumber"):
        return f"INV-{matter['matterNumber']}"

    raw_id = _to_id(matter.get("_id")) or _to_id(matter.get("id")) or f"MATTER-{index + 1}"
    return f"INV-{raw_id[-6:].upper()}"


def _resolve_client_identity(matter: Dict[str, Any]) -> Party:
    client = matter.get("client")
    if isinstance(client, dict):
        return Party(
            id=_to_id(_first(client.get("_id"), client.get("id"), matter.get("clientId"), None)),
            name=_first(_display_name(client), matter.get("clientName"), ""),
            email=_first(client.get("email"), matter.get("clientEmail"), ""),
        )

    return Party(
        id=_to_id(_first(client, matter.get("clientId"), None)),
        name=matter.get("clientName") or "",
        email=matter.get("clientEmail") or "",
    )


def _resolve_lead_attorney(matter: Dict[str, Any]) -> Party:
    lead = matter.get("leadAttorney")
    if isinstance(lead, dict):
        return Party(
            id=_to_id(_first(lead.get("_id"), lead.get("id"), None)),
            name=_display_name(lead),
            email=lead.get("email") or "",
        )

    if matter.get("leadAttorneyName"):
        return Party(
            id=_to_id(matter.get("leadAttorneyId")),
            name=matter["leadAttorneyName"],
            email=matter.get("leadAttorneyEmail") or "",
        )

    return Party()


def _build_invoice_from_matter(matter: Dict[str, Any], index: int, today=None) -> NormalizedInvoice:
    client = _resolve_client_identity(matter)
    lead_attorney = _resolve_lead_attorney(matter)

    opened_on = _to_valid_date(matter.get("openedDate"), matter.get("createdAt"))
    updated_on = _to_valid_date(matter.get("updatedAt"), opened_on)
    issued_on = add_days(updated_on, -clamp(index * 2, 0, 12))
    due_date = add_days(issued_on, 30 + clamp(index * 3, 0, 18))

    stats = _as_dict(matter.get("stats"))
    open_tasks = to_number(stats.get("openTaskCount"), 0)
    closed_tasks = to_number(stats.get("closedTaskCount"), 0)
    total_tasks = max(open_tasks + closed_tasks, 0)

    complexity_factor = 1 + clamp(total_tasks * 0.04, 0, 0.45)
    base_amount = 12000 + total_tasks * 1800
    total_amount = round_half_up(base_amount * complexity_factor)

    progress = clamp(closed_tasks / total_tasks, 0, 1) if total_tasks > 0 else 0.35
    paid_amount = round_half_up(total_amount * clamp(progress + 0.2, 0.35, 1))
    balance_due = max(total_amount - paid_amount, 0)

    matter_id = _to_id(matter.get("_id")) or _to_id(matter.get("id"))

    return NormalizedInvoice(
        id=_to_id(matter.get("_id")) or f"invoice-{index}",
        invoice_number=_build_invoice_number(matter, index),
        matter_id=matter_id or "",
        matter_title=_first(matter.get("title"), matter.get("name"), "Untitled Matter"),
        matter_status=matter.get("status") or "",
        practice_area=matter.get("practiceArea") or "",
        client=client,
        lead_attorney=lead_attorney,
        issued_on=issued_on,
        issued_on_label=format_date_label(issued_on, "Not issued"),
        due_date=due_date,
        due_date_label=format_date_label(due_date, "Not set"),
        due_in_days=difference_in_days(due_date, today),
        total_amount=total_amount,
        paid_amount=paid_amount,
        balance_due=balance_due,
        progress=progress,
        open_tasks=open_tasks,
        closed_tasks=closed_tasks,
        total_tasks=total_tasks,
        status=resolve_invoice_status(balance_due, total_amount, due_date, today),
        tags=matter.get("tags") if isinstance(matter.get("tags"), list) else [],
        key_contacts=matter.get("keyContacts") if isinstance(matter.get("keyContacts"), list) else [],
        description=matter.get("description") or "",
        raw_matter=matter,
    )


def derive_invoices_from_matters(
    matters: Optional[Iterable[Dict[str, Any]]],
    viewer_role: Any = UserRole.ADMIN.value,
    viewer_id: Optional[str] = None,
    today=None,
) -> List[NormalizedInvoice]:
    """Estimate one invoice per matter for firms that have not issued real invoices yet."""
    normalized_matters = [m for m in (matters or []) if isinstance(m, dict)]
    is_client_viewer = matches_role(viewer_role, UserRole.CLIENT)

    def visible(matter):
        if _as_dict(matter.get("billing")).get("invoiceSuppressed"):
            return False
        if not is_client_viewer:
            return True
        client = _resolve_client_identity(matter)
        if not client.id or not viewer_id:
            return False
        return client.id == str(viewer_id)

    filtered = [matter for matter in normalized_matters if visible(matter)]
    return [_build_invoice_from_matter(matter, index, today) for index, matter in enumerate(filtered)]


def compute_collection_rate(total_billed, total_collected) -> int:
    if not total_billed:
        return 0
    rate = (max(total_collected, 0) / max(total_billed, 1)) * 100
    return round_half_up(rate)


def summarize_invoices(invoices: Optional[Iterable[NormalizedInvoice]]) -> InvoiceSummary:
    summary = InvoiceSummary()
    for invoice in invoices or []:
        summary.total_invoices += 1
        summary.outstanding_balance += max(to_number(invoice.balance_due, 0), 0)
        summary.total_billed += max(to_number(invoice.total_amount, 0), 0)
        summary.total_collected += max(to_number(invoice.paid_amount, 0), 0)
        if invoice.status == InvoiceStatus.OVERDUE.value:
            summary.overdue_count += 1
        elif invoice.status == InvoiceStatus.DUE_SOON.value:
            summary.due_soon_count += 1
        elif invoice.status == InvoiceStatus.PAID.value:
            summary.paid_count += 1

    summary.collection_rate = compute_collection_rate(summary.total_billed, summary.total_collected)
    return summary


def build_search_index(invoice: Optional[NormalizedInvoice]) -> str:
    if not invoice:
        return ""

    parts = [
        invoice.invoice_number,
        invoice.matter_title,
        invoice.client.name,
        invoice.client.email,
        invoice.practice_area,
        invoice.matter_status,
    ]
    return " ".join(part for part in parts if isinstance(part, str) and part.strip()).lower()


def filter_invoices(invoices: Iterable[NormalizedInvoice], search_query: str = "", status: str = "all") -> List[NormalizedInvoice]:
    normalized_search = (search_query or "").strip().lower()
    normalized_status = (status or "").strip()

    results = []
    for invoice in invoices:
        if normalized_status and normalized_status != "all" and invoice.status != normalized_status:
            continue
        if normalized_search and normalized_search not in build_search_index(invoice):
            continue
        results.append(invoice)
    return results


def sort_invoices_by_due_date(invoices: Iterable[NormalizedInvoice]) -> List[NormalizedInvoice]:
    """Earliest due date first; invoices without a usable due date go last."""
    def sort_key(invoice):
        due = parse_to_date(invoice.due_date)
        return (due is None, due or datetime.max)

    return sorted(invoices, key=sort_key)


def get_status_meta(status) -> Dict[str, str]:
    normalized = status.strip() if isinstance(status, str) else ""
    return {"label": STATUS_LABELS.get(normalized, "Draft")}


def _resolve_client_from_invoice(invoice: Dict[str, Any], matter: Dict[str, Any]) -> Party:
    matter_client = matter.get("client")

    if isinstance(matter_client, dict):
        return Party(
            id=_to_id(_first(matter_client.get("_id"), matter_client.get("id"), matter_client.get("clientId"), None)),
            name=_first(_display_name(matter_client), matter.get("clientName"), invoice.get("clientName"), ""),
            email=_first(matter_client.get("email"), matter_client.get("contactEmail"), invoice.get("clientEmail"), ""),
        )

    if matter_client:
        return Party(
            id=_to_id(matter_client),
            name=_first(matter.get("clientName"), invoice.get("clientName"), ""),
            email=invoice.get("clientEmail") or "",
        )

    invoice_client = invoice.get("client")
    if isinstance(invoice_client, dict):
        return Party(
            id=_to_id(_first(
                invoice_client.get("_id"),
                invoice_client.get("id"),
                invoice_client.get("clientId"),
                invoice.get("clientId"),
                None,
            )),
            name=_first(_display_name(invoice_client), invoice.get("clientName"), matter.get("clientName"), ""),
            email=_first(invoice_client.get("email"), invoice.get("clientEmail"), ""),
        )

    return Party(
        id=_to_id(invoice.get("clientId")),
        name=_first(invoice.get("clientName"), matter.get("clientName"), ""),
        email=invoice.get("clientEmail") or "",
    )


def _resolve_lead_attorney_from_invoice(invoice: Dict[str, Any], matter: Dict[str, Any]) -> Party:
    matter_lead = matter.get("leadAttorney")

    if isinstance(matter_lead, dict):
        return Party(
            id=_to_id(_first(matter_lead.get("_id"), matter_lead.get("id"), matter_lead.get("leadAttorneyId"), None)),
            name=_first(_display_name(matter_lead), matter.get("leadAttorneyName"), invoice.get("leadAttorneyName"), ""),
            email=_first(matter_lead.get("email"), matter.get("leadAttorneyEmail"), ""),
        )

    if matter_lead:
        return Party(
            id=_to_id(matter_lead),
            name=_first(matter.get("leadAttorneyName"), invoice.get("leadAttorneyName"), ""),
            email=matter.get("leadAttorneyEmail") or "",
        )

    invoice_lead = invoice.get("leadAttorney")
    if isinstance(invoice_lead, dict):
        return Party(
            id=_to_id(_first(invoice_lead.get("_id"), invoice_lead.get("id"), invoice_lead.get("leadAttorneyId"), None)),
            name=_first(_display_name(invoice_lead), invoice.get("leadAttorneyName"), ""),
            email=invoice_lead.get("email") or "",
        )

    if invoice.get("leadAttorneyId") or invoice.get("leadAttorneyName"):
        return Party(
            id=_to_id(invoice.get("leadAttorneyId")),
            name=invoice.get("leadAttorneyName") or "",
            email=invoice.get("leadAttorneyEmail") or "",
        )

    return Party()


def _resolve_matter_reference(invoice: Dict[str, Any], fallback_matter) -> Optional[Dict[str, Any]]:
    if isinstance(invoice.get("matter"), dict):
        return invoice["matter"]
    if isinstance(fallback_matter, dict):
        return fallback_matter
    return None


def _resolve_matter_id(invoice: Dict[str, Any], matter: Optional[Dict[str, Any]]) -> str:
    reference = invoice.get("matter")
    if isinstance(reference, str) and reference.strip():
        return reference
    if invoice.get("matterId"):
        return str(invoice["matterId"])
    if matter and matter.get("id"):
        return str(matter["id"])
    if matter and matter.get("_id"):
        return str(matter["_id"])
    return ""


def normalize_invoice_record(
    invoice: Optional[Dict[str, Any]],
    fallback_matter: Optional[Dict[str, Any]] = None,
    today=None,
) -> Optional[NormalizedInvoice]:
    """
    Flatten a raw API invoice into a display record.

    Totals supplied by the API win; missing ones are derived from the line item
    group totals, with the client's advance applied against expenses first.
    Every amount is clamped at zero and an explicit ``status`` from the API
    overrides the inferred one.
    """
    if not invoice:
        return None

    matter = _resolve_matter_reference(invoice, fallback_matter)
    matter_data = matter or {}
    matter_id = _resolve_matter_id(invoice, matter)

    issued_on = _first(
        invoice.get("invoiceDate"),
        invoice.get("issuedOn"),
        invoice.get("createdAt"),
        _first(matter_data.get("updatedAt"), matter_data.get("openedDate"), None),
    )
    due_date = _first(invoice.get("dueDate"), invoice.get("paymentDueDate"), invoice.get("dueOn"), None)

    professional_total = to_number(invoice.get("professionalFeesTotal"), 0)
    expenses_total = to_number(invoice.get("expensesTotal"), 0)
    government_total = to_number(invoice.get("governmentFeesTotal"), 0)

    advance_amount = max(to_number(invoice.get("advanceAmount"), 0), 0)
    inferred_advance_applied = min(advance_amount, max(expenses_total, 0))
    advance_applied = max(to_number(invoice.get("advanceApplied"), inferred_advance_applied), 0)
    advance_balance = max(to_number(invoice.get("advanceBalance"), advance_amount - advance_applied), 0)

    net_expenses_total = max(to_number(invoice.get("netExpensesTotal"), expenses_total - advance_applied), 0)
    gross_total_amount = max(
        to_number(invoice.get("grossTotalAmount"), professional_total + expenses_total + government_total), 0
    )
    total_amount = max(
        to_number(invoice.get("totalAmount"), professional_total + government_total + net_expenses_total), 0
    )

    paid_amount = to_number(_coalesce(invoice.get("paidAmount"), invoice.get("amountPaid")), 0)

    explicit_balance = _coalesce(invoice.get("balanceDue"), invoice.get("amountDue"))
    if explicit_balance is None:
        balance_due = total_amount - paid_amount
    else:
        balance_due = to_number(explicit_balance, total_amount)
    balance_due = max(balance_due, 0)

    if isinstance(invoice.get("status"), str):
        explicit_status = invoice["status"].strip()
    elif isinstance(invoice.get("invoiceStatus"), str):
        explicit_status = invoice["invoiceStatus"].strip()
    else:
        explicit_status = ""
    status = explicit_status or resolve_invoice_status(balance_due, total_amount, due_date, today)

    stats = _as_dict(matter_data.get("stats"))
    open_tasks = max(to_number(_coalesce(invoice.get("openTasks"), stats.get("openTaskCount")), 0), 0)
    closed_tasks = max(to_number(_coalesce(invoice.get("closedTasks"), stats.get("closedTaskCount")), 0), 0)
    total_tasks = max(to_number(invoice.get("totalTasks"), open_tasks + closed_tasks), 0)

    progress = clamp(max(total_amount - balance_due, 0) / total_amount, 0, 1) if total_amount > 0 else 0

    invoice_number_text = invoice.get("invoiceNumber") if isinstance(invoice.get("invoiceNumber"), str) else None
    identifier = (
        _to_id(invoice.get("_id"))
        or _to_id(invoice.get("id"))
        or _to_id(invoice.get("invoiceId"))
        or invoice_number_text
        or f"invoice-{int(time.time() * 1000)}"
    )

    parsed_due = parse_to_date(due_date)

    return NormalizedInvoice(
        id=identifier,
        invoice_number=str(_first(
            invoice.get("invoiceNumber"),
            invoice.get("number"),
            invoice.get("reference"),
            f"Invoice {datetime.now().year}",
        )),
        issued_on=issued_on,
        issued_on_label=format_date_label(issued_on, "Not set"),
        due_date=due_date,
        due_date_label=format_date_label(due_date, "Not set"),
        due_in_days=difference_in_days(parsed_due, today) if parsed_due else None,
        total_amount=total_amount,
        paid_amount=max(paid_amount, 0),
        balance_due=balance_due,
        status=status,
        progress=progress,
        open_tasks=open_tasks,
        closed_tasks=closed_tasks,
        total_tasks=total_tasks,
        matter_id=matter_id,
        matter_title=_first(matter_data.get("title"), invoice.get("matterTitle"), "Untitled Matter"),
        matter_status=_first(matter_data.get("status"), invoice.get("matterStatus"), ""),
        practice_area=_first(matter_data.get("practiceArea"), invoice.get("practiceArea"), ""),
        client=_resolve_client_from_invoice(invoice, matter_data),
        lead_attorney=_resolve_lead_attorney_from_invoice(invoice, matter_data),
        advance_amount=advance_amount,
        advance_applied=advance_applied,
        advance_balance=advance_balance,
        net_expenses_total=net_expenses_total,
        gross_total_amount=gross_total_amount,
        raw=invoice,
        raw_matter=matter,
    )


def filter_invoices_for_viewer(
    invoices: List[NormalizedInvoice],
    viewer_role: Any = UserRole.ADMIN.value,
    viewer_id: Optional[str] = None,
) -> List[NormalizedInvoice]:
    """Clients only ever see their own invoices; firm staff see everything."""
    if not matches_role(viewer_role, UserRole.CLIENT):
        return list(invoices)

    if not viewer_id:
        return []

    scoped = []
    for invoice in invoices:
        client_id = invoice.client.id or _to_id(_as_dict(invoice.raw).get("clientId"))
        if client_id and client_id == str(viewer_id):
            scoped.append(invoice)
    return scoped
