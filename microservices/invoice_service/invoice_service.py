"""
Invoice Service Business Logic

Client and invoice management around the pricing engine. Totals are always
computed here from line items, never taken from the caller.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.config import InvoiceServiceConfig

from .models import (
    Client,
    ClientCreateRequest,
    ClientUpdateRequest,
    CompanySettings,
    CompanySettingsUpdate,
    DashboardStats,
    Invoice,
    InvoiceCalculationRequest,
    InvoiceCalculationResponse,
    InvoiceCreateRequest,
    InvoiceStatus,
    InvoiceSummary,
    InvoiceSummaryRow,
    InvoiceUpdateRequest,
    LineItem,
    PricedLineItem,
    TaxMode,
    TaxPolicy,
)
from .pricing import (
    format_currency,
    format_number,
    format_totals,
    price_line_items,
    resolve_tax_rate,
    totals_from_priced,
)
from .protocols import (
    ClientNotFoundError,
    InvalidLineItemError,
    InvoiceNotFoundError,
    InvoiceRepositoryProtocol,
)

logger = logging.getLogger(__name__)

# Invoice fields copied verbatim from an update request
_PLAIN_UPDATE_FIELDS = (
    "client_name",
    "client_email",
    "client_address",
    "description",
    "status",
    "payment_mode",
    "bank_details",
    "notes",
    "delivery_terms",
    "payment_terms",
    "additional_terms",
)


def _utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class InvoiceService:
    """
    Invoice management business logic

    Handles pricing, invoice lifecycle, clients, company profile and
    dashboard figures.
    """

    def __init__(
        self,
        repository: InvoiceRepositoryProtocol,
        config: Optional[InvoiceServiceConfig] = None,
    ):
        """
        Initialize Invoice Service

        Args:
            repository: Invoice repository (dependency injection)
            config: Service settings (defaults from environment)
        """
        self.repository = repository
        self.config = config or InvoiceServiceConfig.from_env()
        logger.info(
            f"InvoiceService initialized (strict_validation={self.config.strict_validation})"
        )

    # ====================
    # Pricing
    # ====================

    def _price(self, items: List[Any], tax_mode: TaxMode, tax_rate: Any) -> Dict[str, Any]:
        """Price items and aggregate; the only path that produces stored totals"""
        policy = TaxPolicy(mode=tax_mode, rate=tax_rate)
        strict = self.config.strict_validation
        try:
            invoice_rate = resolve_tax_rate(policy, strict) if tax_mode == TaxMode.INVOICE else None
            priced = price_line_items(items, policy, strict)
        except InvalidLineItemError as e:
            logger.warning(f"Rejected line items: {e}")
            raise
        totals = totals_from_priced(priced, policy, strict)

        return {
            "items": priced,
            "tax_mode": tax_mode,
            "tax_rate": invoice_rate,
            "subtotal": totals.subtotal,
            "tax_amount": totals.tax_amount,
            "total": totals.total,
            "totals": totals,
        }

    async def calculate(self, request: InvoiceCalculationRequest) -> InvoiceCalculationResponse:
        """Recalculate totals for an invoice being edited; stores nothing"""
        result = self._price(request.items, request.tax_mode, request.tax_rate)
        return InvoiceCalculationResponse(
            items=result["items"],
            tax_mode=result["tax_mode"],
            tax_rate=result["tax_rate"],
            subtotal=result["subtotal"],
            tax_amount=result["tax_amount"],
            total=result["total"],
            display=format_totals(result["totals"], self.config.currency_symbol),
        )

    # ====================
    # Invoices
    # ====================

    async def create_invoice(self, request: InvoiceCreateRequest) -> Invoice:
        """Create an invoice with totals frozen from its line items"""
        client_name = request.client_name
        client_email = request.client_email
        client_address = request.client_address

        if request.client_id:
            client = await self.repository.get_client(request.client_id)
            if not client:
                raise ClientNotFoundError(f"Client not found: {request.client_id}")
            client_name = client_name or client.name
            client_email = client_email or client.email
            client_address = client_address or client.address

        pricing = self._price(request.items, request.tax_mode, request.tax_rate)

        now = datetime.now(timezone.utc)
        due_date = _utc(request.due_date) if request.due_date else now + timedelta(days=self.config.payment_due_days)
        sequence = await self.repository.next_invoice_sequence()

        invoice = Invoice(
            id=str(uuid.uuid4()),
            invoice_number=f"{self.config.invoice_number_prefix}{sequence:04d}",
            client_id=request.client_id,
            client_name=client_name or "",
            client_email=client_email,
            client_address=client_address,
            description=request.description,
            items=pricing["items"],
            tax_mode=pricing["tax_mode"],
            tax_rate=pricing["tax_rate"],
            subtotal=pricing["subtotal"],
            tax_amount=pricing["tax_amount"],
            total_gst=pricing["tax_amount"],
            total=pricing["total"],
            status=request.status,
            payment_mode=request.payment_mode,
            bank_details=request.bank_details,
            notes=request.notes or "",
            created_at=now,
            updated_at=now,
            due_date=due_date,
        )
        # Keep model defaults for terms the caller left out
        terms = {
            name: getattr(request, name)
            for name in ("delivery_terms", "payment_terms", "additional_terms")
            if getattr(request, name)
        }
        if terms:
            invoice = invoice.model_copy(update=terms)

        invoice = await self.repository.create_invoice(invoice)
        logger.info(f"Invoice created: {invoice.invoice_number} ({invoice.id}) total={invoice.total}")
        return invoice

    async def get_invoice(self, invoice_id: str) -> Invoice:
        """Get invoice by ID"""
        invoice = await self.repository.get_invoice(invoice_id)
        if not invoice:
            raise InvoiceNotFoundError(f"Invoice not found: {invoice_id}")
        return invoice

    async def list_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        search: Optional[str] = None,
    ) -> List[Invoice]:
        """List invoices with optional status filter and search text"""
        return await self.repository.list_invoices(status=status, search=search)

    async def update_invoice(self, invoice_id: str, request: InvoiceUpdateRequest) -> Invoice:
        """
        Apply the fields sent in the request to an invoice.

        Totals are recomputed whenever items, tax mode or tax rate change.
        """
        invoice = await self.get_invoice(invoice_id)
        sent = request.model_fields_set
        updates: Dict[str, Any] = {}

        if "client_id" in sent and request.client_id != invoice.client_id:
            updates["client_id"] = request.client_id
            if request.client_id:
                client = await self.repository.get_client(request.client_id)
                if not client:
                    raise ClientNotFoundError(f"Client not found: {request.client_id}")
                updates["client_name"] = client.name
                updates["client_email"] = client.email
                updates["client_address"] = client.address

        for name in _PLAIN_UPDATE_FIELDS:
            if name in sent and getattr(request, name) is not None:
                updates[name] = getattr(request, name)

        if "due_date" in sent and request.due_date is not None:
            updates["due_date"] = _utc(request.due_date)

        if sent & {"items", "tax_mode", "tax_rate"}:
            items = request.items if request.items is not None else [
                self._as_line_item(row) for row in invoice.items
            ]
            tax_mode = request.tax_mode or invoice.tax_mode
            if "tax_rate" in sent and request.tax_rate is not None:
                tax_rate = request.tax_rate
            else:
                tax_rate = invoice.tax_rate if invoice.tax_rate is not None else 0
            pricing = self._price(items, tax_mode, tax_rate)
            updates.update(
                items=pricing["items"],
                tax_mode=pricing["tax_mode"],
                tax_rate=pricing["tax_rate"],
                subtotal=pricing["subtotal"],
                tax_amount=pricing["tax_amount"],
                total_gst=pricing["tax_amount"],
                total=pricing["total"],
            )

        updates["updated_at"] = datetime.now(timezone.utc)
        updated = invoice.model_copy(update=updates)
        await self.repository.update_invoice(updated)
        logger.info(f"Invoice updated: {updated.invoice_number} ({updated.id})")
        return updated

    @staticmethod
    def _as_line_item(row: PricedLineItem) -> LineItem:
        return LineItem(
            description=row.description,
            hsn=row.hsn,
            quantity=row.quantity,
            area=row.area,
            rate=row.rate,
            tax_rate=row.tax_rate,
        )

    async def delete_invoice(self, invoice_id: str) -> None:
        """Delete invoice"""
        if not await self.repository.delete_invoice(invoice_id):
            raise InvoiceNotFoundError(f"Invoice not found: {invoice_id}")
        logger.info(f"Invoice deleted: {invoice_id}")

    async def get_invoice_summary(self, invoice_id: str) -> InvoiceSummary:
        """Printable rendition of a stored invoice, amounts as currency strings"""
        invoice = await self.get_invoice(invoice_id)
        company = await self.repository.get_company_settings()
        symbol = self.config.currency_symbol

        rows = [
            InvoiceSummaryRow(
                description=row.description,
                hsn=row.hsn or "",
                quantity=format_number(row.quantity),
                area=format_number(row.area),
                rate=format_currency(row.rate, symbol),
                amount=format_currency(row.amount, symbol),
            )
            for row in invoice.items
        ]

        if invoice.tax_mode == TaxMode.INVOICE:
            tax_label = f"Tax ({format_number(invoice.tax_rate)}%)"
        else:
            tax_label = "GST"

        return InvoiceSummary(
            invoice_number=invoice.invoice_number,
            created_at=invoice.created_at,
            due_date=invoice.due_date,
            status=invoice.status,
            company=company,
            bill_to={
                "name": invoice.client_name,
                "email": invoice.client_email,
                "address": invoice.client_address,
            },
            description=invoice.description,
            rows=rows,
            tax_label=tax_label,
            subtotal=format_currency(invoice.subtotal, symbol),
            tax_amount=format_currency(invoice.tax_amount, symbol),
            total=format_currency(invoice.total, symbol),
            payment_mode=invoice.payment_mode,
            bank_details=invoice.bank_details,
            notes=invoice.notes,
            terms=[
                f"Delivery: {invoice.delivery_terms}",
                f"Payment: {invoice.payment_terms}",
                invoice.additional_terms,
            ],
        )

    # ====================
    # Clients
    # ====================

    async def create_client(self, request: ClientCreateRequest) -> Client:
        """Create client"""
        client = Client(
            id=str(uuid.uuid4()),
            name=request.name,
            email=request.email,
            phone=request.phone,
            address=request.address,
            gstin=request.gstin,
            created_at=datetime.now(timezone.utc),
        )
        client = await self.repository.create_client(client)
        logger.info(f"Client created: {client.name} ({client.id})")
        return client

    async def get_client(self, client_id: str) -> Client:
        """Get client by ID"""
        client = await self.repository.get_client(client_id)
        if not client:
            raise ClientNotFoundError(f"Client not found: {client_id}")
        return client

    async def list_clients(self) -> List[Client]:
        """List clients"""
        return await self.repository.list_clients()

    async def update_client(self, client_id: str, request: ClientUpdateRequest) -> Client:
        """Apply the fields sent in the request to a client"""
        client = await self.get_client(client_id)
        updates = {
            name: getattr(request, name)
            for name in request.model_fields_set
            if getattr(request, name) is not None
        }
        updates["updated_at"] = datetime.now(timezone.utc)
        updated = client.model_copy(update=updates)
        await self.repository.update_client(updated)
        logger.info(f"Client updated: {updated.id}")
        return updated

    async def delete_client(self, client_id: str) -> None:
        """Delete client; invoices keep their copied client details"""
        if not await self.repository.delete_client(client_id):
            raise ClientNotFoundError(f"Client not found: {client_id}")
        logger.info(f"Client deleted: {client_id}")

    # ====================
    # Company profile
    # ====================

    async def get_company_settings(self) -> CompanySettings:
        """Get company profile"""
        return await self.repository.get_company_settings()

    async def update_company_settings(self, request: CompanySettingsUpdate) -> CompanySettings:
        """Merge the fields sent into the company profile"""
        current = await self.repository.get_company_settings()
        updates = {name: getattr(request, name) for name in request.model_fields_set}
        # logo may be cleared with null; other fields keep their value
        updates = {k: v for k, v in updates.items() if v is not None or k == "logo"}
        settings = current.model_copy(update=updates)
        settings = await self.repository.save_company_settings(settings)
        logger.info(f"Company settings updated: {sorted(updates)}")
        return settings

    # ====================
    # Dashboard
    # ====================

    async def get_dashboard_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        """
        Dashboard figures.

        Revenue counts paid invoices, pending counts sent ones; an invoice is
        overdue when marked so, or when sent and past its due date.
        """
        now = _utc(now) if now else datetime.now(timezone.utc)
        invoices = await self.repository.list_invoices()

        total_revenue = sum((inv.total for inv in invoices if inv.status == InvoiceStatus.PAID), Decimal("0"))
        pending_amount = sum((inv.total for inv in invoices if inv.status == InvoiceStatus.SENT), Decimal("0"))
        overdue = sum(
            1 for inv in invoices
            if inv.status == InvoiceStatus.OVERDUE
            or (inv.status == InvoiceStatus.SENT and _utc(inv.due_date) < now)
        )

        return DashboardStats(
            total_invoices=len(invoices),
            total_revenue=total_revenue,
            pending_amount=pending_amount,
            overdue_invoices=overdue,
        )
