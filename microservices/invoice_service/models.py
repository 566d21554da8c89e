"""
Invoice Service Data Models

Clients, line-item invoices, company profile and pricing results.
JSON field names are camelCase (invoiceNumber, taxRate, totalGst, ...);
Python attributes are snake_case.
"""

from enum import Enum
from typing import Annotated, Optional, Dict, Any, List, Union
from datetime import datetime
from decimal import Decimal
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel


# Exact decimal internally, JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Line-item numbers as received: numbers, numeric strings or junk.
# The pricing engine decides how to coerce them.
RawNumber = Optional[Union[Decimal, str]]


class InvoiceBaseModel(BaseModel):
    """Base model with camelCase aliases"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ====================
# Enums
# ====================

class TaxMode(str, Enum):
    """How tax is applied to an invoice"""
    INVOICE = "invoice"      # one rate on the subtotal
    PER_ITEM = "per_item"    # each item's own GST rate


class InvoiceStatus(str, Enum):
    """Invoice status"""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMode(str, Enum):
    """Payment mode printed on the invoice"""
    CASH = "cash"
    BANK = "bank"
    UPI = "upi"
    CHEQUE = "cheque"


# ====================
# Pricing models
# ====================

class LineItem(InvoiceBaseModel):
    """One billable row, as entered"""
    description: str = Field(..., description="Item description")
    hsn: Optional[str] = Field(None, description="HSN/SAC code")
    quantity: RawNumber = Field(default=0, description="Unit count")
    area: RawNumber = Field(default=None, description="Billed area (sq/m); overrides quantity when > 0")
    rate: RawNumber = Field(default=0, description="Price per unit or per unit area")
    tax_rate: RawNumber = Field(
        default=None,
        validation_alias=AliasChoices("taxRate", "gstRate", "tax_rate"),
        description="Per-item GST percentage",
    )

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("description must not be empty")
        return v


class PricedLineItem(InvoiceBaseModel):
    """A line item after coercion, with its amount and per-item tax"""
    description: str
    hsn: Optional[str] = None
    quantity: Money = Decimal("0")
    area: Optional[Money] = None
    rate: Money = Decimal("0")
    tax_rate: Optional[Money] = None
    amount: Money = Decimal("0")
    tax_amount: Money = Decimal("0")


class TaxPolicy(InvoiceBaseModel):
    """Tax mode selection plus the invoice-level rate"""
    mode: TaxMode = TaxMode.INVOICE
    rate: RawNumber = Field(default=0, description="Invoice-level percentage (invoice mode only)")


class InvoiceTotals(InvoiceBaseModel):
    """Subtotal, tax and grand total"""
    subtotal: Money = Decimal("0")
    tax_amount: Money = Decimal("0")
    total: Money = Decimal("0")


class InvoiceTotalsDisplay(InvoiceBaseModel):
    """Totals rendered as currency strings"""
    subtotal: str
    tax_amount: str
    total: str


# ====================
# Core records
# ====================

class BankDetails(InvoiceBaseModel):
    """Customer bank details for bank-transfer payments"""
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    account_holder: Optional[str] = None


class Invoice(InvoiceBaseModel):
    """Stored invoice with frozen totals"""
    id: str = Field(..., description="Invoice ID")
    invoice_number: str = Field(..., description="Human readable invoice number")

    # Client
    client_id: Optional[str] = None
    client_name: str = ""
    client_email: Optional[str] = None
    client_address: Optional[str] = None

    description: str = ""
    items: List[PricedLineItem] = Field(default_factory=list)

    # Pricing
    tax_mode: TaxMode = TaxMode.INVOICE
    tax_rate: Optional[Money] = None
    subtotal: Money = Decimal("0")
    tax_amount: Money = Decimal("0")
    total_gst: Money = Decimal("0")
    total: Money = Decimal("0")

    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_mode: PaymentMode = PaymentMode.CASH
    bank_details: Optional[BankDetails] = None

    # Terms
    notes: str = ""
    delivery_terms: str = "Within 20-30 days"
    payment_terms: str = "100% Advance payment"
    additional_terms: str = "Goods once sold can't be returned."

    created_at: datetime
    updated_at: datetime
    due_date: datetime


class Client(InvoiceBaseModel):
    """Client (customer) record"""
    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CompanySettings(InvoiceBaseModel):
    """Company profile printed on invoices"""
    name: str = "YOUR ENGINEERING COMPANY"
    tagline: str = "Professional Engineering Solutions"
    address: str = "Your Company Address\nCity, State - PIN Code"
    phone: str = "Your Phone Number"
    email: str = "your.email@company.com"
    gstin: str = "Your GSTIN Number"
    state: str = "Your State Code"
    bank_name: str = "Your Bank Name"
    account_no: str = "Your Account Number"
    ifsc_code: str = "Your IFSC Code"
    account_holder: str = "Your Company Name"
    logo: Optional[str] = Field(None, description="Base64 encoded logo")


# ====================
# Request models
# ====================

class InvoiceCalculationRequest(InvoiceBaseModel):
    """Live recalculation of an invoice being edited"""
    items: List[LineItem] = Field(default_factory=list)
    tax_mode: TaxMode = TaxMode.INVOICE
    tax_rate: RawNumber = 0


class InvoiceCreateRequest(InvoiceBaseModel):
    """Create invoice request"""
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    description: str = ""
    items: List[LineItem] = Field(default_factory=list)
    tax_mode: TaxMode = TaxMode.INVOICE
    tax_rate: RawNumber = 0
    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_mode: PaymentMode = PaymentMode.CASH
    bank_details: Optional[BankDetails] = None
    notes: Optional[str] = None
    delivery_terms: Optional[str] = None
    payment_terms: Optional[str] = None
    additional_terms: Optional[str] = None
    due_date: Optional[datetime] = None


class InvoiceUpdateRequest(InvoiceBaseModel):
    """Update invoice request; only fields sent are applied"""
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    description: Optional[str] = None
    items: Optional[List[LineItem]] = None
    tax_mode: Optional[TaxMode] = None
    tax_rate: RawNumber = None
    status: Optional[InvoiceStatus] = None
    payment_mode: Optional[PaymentMode] = None
    bank_details: Optional[BankDetails] = None
    notes: Optional[str] = None
    delivery_terms: Optional[str] = None
    payment_terms: Optional[str] = None
    additional_terms: Optional[str] = None
    due_date: Optional[datetime] = None


class ClientCreateRequest(InvoiceBaseModel):
    """Create client request"""
    name: str = Field(..., description="Company or person name")
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


class ClientUpdateRequest(InvoiceBaseModel):
    """Update client request"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


class CompanySettingsUpdate(InvoiceBaseModel):
    """Partial company profile update"""
    name: Optional[str] = None
    tagline: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    gstin: Optional[str] = None
    state: Optional[str] = None
    bank_name: Optional[str] = None
    account_no: Optional[str] = None
    ifsc_code: Optional[str] = None
    account_holder: Optional[str] = None
    logo: Optional[str] = None


# ====================
# Response models
# ====================

class InvoiceCalculationResponse(InvoiceBaseModel):
    """Priced rows, totals and their display strings"""
    items: List[PricedLineItem] = Field(default_factory=list)
    tax_mode: TaxMode
    tax_rate: Optional[Money] = None
    subtotal: Money
    tax_amount: Money
    total: Money
    display: InvoiceTotalsDisplay


class InvoiceSummaryRow(InvoiceBaseModel):
    """One printable row"""
    description: str
    hsn: str = ""
    quantity: str
    area: str
    rate: str
    amount: str


class InvoiceSummary(InvoiceBaseModel):
    """Printable rendition of an invoice"""
    invoice_number: str
    created_at: datetime
    due_date: datetime
    status: InvoiceStatus
    company: CompanySettings
    bill_to: Dict[str, Optional[str]]
    description: str
    rows: List[InvoiceSummaryRow]
    tax_label: str
    subtotal: str
    tax_amount: str
    total: str
    payment_mode: PaymentMode
    bank_details: Optional[BankDetails] = None
    notes: str = ""
    terms: List[str] = Field(default_factory=list)


class DashboardStats(InvoiceBaseModel):
    """Dashboard figures"""
    total_invoices: int = 0
    total_revenue: Money = Decimal("0")
    pending_amount: Money = Decimal("0")
    overdue_invoices: int = 0


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    timestamp: datetime


class ServiceInfo(BaseModel):
    """Service information"""
    service: str
    version: str
    description: str
    capabilities: List[str]
    route_count: int
    strict_validation: bool
    currency_symbol: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
