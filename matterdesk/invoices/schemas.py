from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
import enum


class InvoiceStatus(str, enum.Enum):
    OVERDUE = "overdue"
    DUE_SOON = "dueSoon"
    PAYMENT_DUE = "paymentDue"
    PARTIAL = "partial"
    PAID = "paid"


class Party(BaseModel):
    id: Optional[str] = None
    name: str = ""
    email: str = ""


# Request payloads (camelCase on the wire)
class LineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[str] = None
    particulars: str = ""
    amount: float = 0


class InvoicePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    invoice_number: Optional[str] = Field(None, alias="invoiceNumber")
    matter: Optional[str] = None
    invoice_date: Optional[str] = Field(None, alias="invoiceDate")
    due_date: Optional[str] = Field(None, alias="dueDate")
    professional_fees: List[LineItem] = Field(default_factory=list, alias="professionalFees")
    expenses: List[LineItem] = Field(default_factory=list)
    government_fees: List[LineItem] = Field(default_factory=list, alias="governmentFees")
    advance_amount: float = Field(0, ge=0, alias="advanceAmount")
    notes: Optional[str] = None

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# Display records
class NormalizedInvoice(BaseModel):
    id: str
    invoice_number: str
    issued_on: Any = None
    issued_on_label: str = "Not set"
    due_date: Any = None
    due_date_label: str = "Not set"
    due_in_days: Optional[int] = None
    total_amount: float = 0
    paid_amount: float = 0
    balance_due: float = 0
    status: str
    progress: float = 0
    open_tasks: float = 0
    closed_tasks: float = 0
    total_tasks: float = 0
    matter_id: str = ""
    matter_title: str = "Untitled Matter"
    matter_status: str = ""
    practice_area: str = ""
    client: Party = Field(default_factory=Party)
    lead_attorney: Party = Field(default_factory=Party)
    advance_amount: float = 0
    advance_applied: float = 0
    advance_balance: float = 0
    net_expenses_total: float = 0
    gross_total_amount: float = 0
    tags: List[Any] = Field(default_factory=list)
    key_contacts: List[Any] = Field(default_factory=list)
    description: str = ""
    raw: Optional[Dict[str, Any]] = None
    raw_matter: Optional[Dict[str, Any]] = None


class InvoiceEntry(BaseModel):
    """Optimistic record built from a submitted form before the API answers."""
    id: str
    invoice_number: str
    issued_on: Any = None
    issued_on_label: str = "Not set"
    due_date: Any = None
    due_date_label: str = "Not set"
    total_amount: float = 0
    balance_due: float = 0
    status: str
    raw: Dict[str, Any] = Field(default_factory=dict)


class InvoiceSummary(BaseModel):
    total_invoices: int = 0
    outstanding_balance: float = 0
    total_billed: float = 0
    total_collected: float = 0
    overdue_count: int = 0
    due_soon_count: int = 0
    paid_count: int = 0
    collection_rate: int = 0


class InvoiceListing(BaseModel):
    invoices: List[NormalizedInvoice]
    summary: InvoiceSummary
    matter_lookup: Dict[str, Optional[Dict[str, Any]]] = Field(default_factory=dict)
    fetched_at: datetime = Field(default_factory=datetime.now)
