import pytest

from matterdesk.invoices.schemas import NormalizedInvoice, Party
from matterdesk.invoices.utils import (
    STATUS_FILTERS,
    build_search_index,
    compute_collection_rate,
    derive_invoices_from_matters,
    filter_invoices,
    filter_invoices_for_viewer,
    format_currency,
    get_status_meta,
    normalize_invoice_record,
    resolve_invoice_status,
    sort_invoices_by_due_date,
    summarize_invoices,
)


def make_invoice(**overrides):
    values = {"id": "inv", "invoice_number": "INV-1", "status": "partial"}
    values.update(overrides)
    return NormalizedInvoice(**values)


@pytest.mark.parametrize(
    "balance, total, due_date, expected",
    [
        (0, 1000, "2025-03-01", "paid"),
        (500, 0, "2025-03-01", "paid"),
        (500, 1000, "2025-03-01", "overdue"),
        (500, 1000, "2025-03-15", "dueSoon"),
        (500, 1000, "2025-03-17", "dueSoon"),
        (700, 1000, "2025-04-30", "paymentDue"),
        (600, 1000, "2025-04-30", "paymentDue"),
        (300, 1000, "2025-04-30", "partial"),
        (300, 1000, None, "dueSoon"),
        (300, 1000, "not a date", "dueSoon"),
    ],
)
def test_resolve_invoice_status(balance, total, due_date, expected, today):
    assert resolve_invoice_status(balance, total, due_date, today) == expected


def test_normalize_invoice_applies_advance_against_expenses(today):
    invoice = {
        "_id": "inv1",
        "invoiceNumber": "INV-001",
        "matter": {
            "_id": "m1",
            "title": "Acme v Beta",
            "status": "Open",
            "practiceArea": "Litigation",
            "client": {"_id": "c1", "name": "Acme Ltd", "email": "legal@acme.test"},
            "leadAttorney": {"_id": "u1", "name": "Jane Doe", "email": "jane@lawfirm.co.ke"},
            "stats": {"openTaskCount": 2, "closedTaskCount": 3},
        },
        "invoiceDate": "2025-03-01",
        "dueDate": "2025-04-30",
        "professionalFeesTotal": 10000,
        "expensesTotal": 3000,
        "governmentFeesTotal": 1000,
        "advanceAmount": 5000,
        "paidAmount": 2000,
    }

    normalized = normalize_invoice_record(invoice, today=today)

    assert normalized.id == "inv1"
    assert normalized.invoice_number == "INV-001"
    assert normalized.advance_applied == 3000
    assert normalized.advance_balance == 2000
    assert normalized.net_expenses_total == 0
    assert normalized.gross_total_amount == 14000
    assert normalized.total_amount == 11000
    assert normalized.paid_amount == 2000
    assert normalized.balance_due == 9000
    assert normalized.status == "paymentDue"
    assert normalized.progress == pytest.approx(2000 / 11000)
    assert normalized.due_in_days == 51
    assert normalized.issued_on_label == "1st Mar 2025"
    assert normalized.due_date_label == "30th Apr 2025"
    assert normalized.matter_id == "m1"
    assert normalized.matter_title == "Acme v Beta"
    assert normalized.practice_area == "Litigation"
    assert normalized.client == Party(id="c1", name="Acme Ltd", email="legal@acme.test")
    assert normalized.lead_attorney.name == "Jane Doe"
    assert (normalized.open_tasks, normalized.closed_tasks, normalized.total_tasks) == (2, 3, 5)
    assert normalized.raw == invoice
    assert normalized.raw_matter == invoice["matter"]


def test_normalize_invoice_prefers_explicit_values(today):
    invoice = {
        "_id": "inv2",
        "totalAmount": "5000",
        "amountDue": "0",
        "status": " paid ",
        "matter": "m9",
        "clientId": "c7",
        "clientName": "Solo Client",
    }

    normalized = normalize_invoice_record(invoice, today=today)

    assert normalized.total_amount == 5000
    assert normalized.balance_due == 0
    assert normalized.status == "paid"
    assert normalized.progress == 1
    assert normalized.matter_id == "m9"
    assert normalized.matter_title == "Untitled Matter"
    assert normalized.client.id == "c7"
    assert normalized.client.name == "Solo Client"
    assert normalized.due_in_days is None
    assert normalized.due_date_label == "Not set"
    assert normalized.raw_matter is None


def test_normalize_invoice_uses_fallback_matter(today):
    matter = {"_id": "m3", "title": "Estate of Smith", "client": "c3", "clientName": "Smith Family"}
    normalized = normalize_invoice_record({"invoiceNumber": "INV-9", "totalAmount": 100}, matter, today)

    assert normalized.matter_id == "m3"
    assert normalized.matter_title == "Estate of Smith"
    assert normalized.client == Party(id="c3", name="Smith Family", email="")
    assert normalized.id == "INV-9"


def test_normalize_invoice_clamps_and_generates_identifiers(today):
    normalized = normalize_invoice_record({"totalAmount": -50}, today=today)

    assert normalized.total_amount == 0
    assert normalized.balance_due == 0
    assert normalized.status == "paid"
    assert normalized.progress == 0
    assert normalized.id.startswith("invoice-")
    assert normalized.invoice_number.startswith("Invoice ")


@pytest.mark.parametrize("empty", [None, {}])
def test_normalize_invoice_returns_none_for_empty_input(empty):
    assert normalize_invoice_record(empty) is None


MATTERS = [
    {
        "_id": "abcdef123456",
        "title": "Matter A",
        "matterNumber": "MAT-7",
        "updatedAt": "2025-03-01T00:00:00",
        "client": {"_id": "c1", "name": "Acme"},
        "stats": {"openTaskCount": 2, "closedTaskCount": 3},
    },
    {
        "_id": "xyz987654321",
        "title": "Matter B",
        "updatedAt": "2025-03-05T00:00:00",
        "client": "c2",
        "stats": {},
    },
    {"_id": "suppressed", "title": "Hidden", "billing": {"invoiceSuppressed": True}},
]


def test_derive_invoices_from_matters_estimates_amounts(today):
    first, second = derive_invoices_from_matters(MATTERS, "admin", today=today)

    assert first.invoice_number == "INV-MAT-7"
    assert first.total_amount == 25200
    assert first.paid_amount == 20160
    assert first.balance_due == 5040
    assert first.progress == pytest.approx(0.6)
    assert first.issued_on_label == "1st Mar 2025"
    assert first.due_date_label == "31st Mar 2025"
    assert first.due_in_days == 21
    assert first.status == "partial"
    assert first.client.name == "Acme"

    assert second.invoice_number == "INV-654321"
    assert second.total_amount == 12000
    assert second.paid_amount == 6600
    assert second.balance_due == 5400
    assert second.progress == 0.35
    assert second.issued_on_label == "3rd Mar 2025"
    assert second.due_date_label == "5th Apr 2025"
    assert second.client.id == "c2"


def test_derive_invoices_scopes_client_viewers(today):
    own = derive_invoices_from_matters(MATTERS, "client", viewer_id="c2", today=today)
    assert [invoice.matter_title for invoice in own] == ["Matter B"]

    assert derive_invoices_from_matters(MATTERS, "client", viewer_id=None, today=today) == []
    assert derive_invoices_from_matters(None) == []


def test_summarize_invoices(today):
    summary = summarize_invoices(derive_invoices_from_matters(MATTERS, today=today))

    assert summary.total_invoices == 2
    assert summary.total_billed == 37200
    assert summary.total_collected == 26760
    assert summary.outstanding_balance == 10440
    assert summary.collection_rate == 72
    assert (summary.overdue_count, summary.due_soon_count, summary.paid_count) == (0, 0, 0)


def test_summarize_invoices_counts_statuses():
    summary = summarize_invoices(
        [
            make_invoice(status="overdue", total_amount=100, balance_due=100),
            make_invoice(status="dueSoon", total_amount=100, balance_due=40, paid_amount=60),
            make_invoice(status="paid", total_amount=100, paid_amount=100),
        ]
    )
    assert (summary.overdue_count, summary.due_soon_count, summary.paid_count) == (1, 1, 1)
    assert summary.collection_rate == 53


def test_compute_collection_rate():
    assert compute_collection_rate(0, 0) == 0
    assert compute_collection_rate(200, 50) == 25
    assert compute_collection_rate(100, -5) == 0


@pytest.mark.parametrize(
    "value, expected",
    [
        (1234567.5, "₹12,34,567.50"),
        (100000, "₹1,00,000.00"),
        (999, "₹999.00"),
        (-1500, "-₹1,500.00"),
        (None, "₹0.00"),
        ("abc", "₹0.00"),
    ],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


def test_search_and_status_filters():
    invoices = [
        make_invoice(id="1", invoice_number="INV-1", client=Party(name="Acme Ltd"), status="overdue"),
        make_invoice(id="2", invoice_number="INV-2", matter_title="Beta Holdings", status="paid"),
    ]

    assert build_search_index(invoices[0]) == "inv-1 untitled matter acme ltd"
    assert build_search_index(None) == ""
    assert [i.id for i in filter_invoices(invoices, "  ACME ")] == ["1"]
    assert [i.id for i in filter_invoices(invoices, "", "paid")] == ["2"]
    assert [i.id for i in filter_invoices(invoices, "beta", "overdue")] == []
    assert len(filter_invoices(invoices, "", "all")) == 2


def test_sort_invoices_by_due_date_puts_missing_dates_last():
    invoices = [
        make_invoice(id="none"),
        make_invoice(id="late", due_date="2025-05-01"),
        make_invoice(id="early", due_date="2025-02-01"),
    ]
    assert [i.id for i in sort_invoices_by_due_date(invoices)] == ["early", "late", "none"]


def test_status_meta_and_filters():
    assert get_status_meta("overdue") == {"label": "Overdue"}
    assert get_status_meta(" dueSoon ") == {"label": "Due soon"}
    assert get_status_meta("archived") == {"label": "Draft"}
    assert get_status_meta(None) == {"label": "Draft"}
    assert STATUS_FILTERS[0] == {"value": "all", "label": "All statuses"}


def test_filter_invoices_for_viewer():
    invoices = [
        make_invoice(id="1", client=Party(id="c1")),
        make_invoice(id="2", raw={"clientId": "c2"}),
        make_invoice(id="3"),
    ]

    assert len(filter_invoices_for_viewer(invoices, "admin")) == 3
    assert [i.id for i in filter_invoices_for_viewer(invoices, "client", "c1")] == ["1"]
    assert [i.id for i in filter_invoices_for_viewer(invoices, "Client", "c2")] == ["2"]
    assert filter_invoices_for_viewer(invoices, "client") == []
