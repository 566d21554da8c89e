"""
Invoice Service - Component Tests

Tests for:
- Live recalculation
- Invoice creation, numbering and frozen totals
- Partial updates and recomputation
- Printable summary
- Client and company profile management
- Dashboard figures
- Strict line-item validation

The repository is the in-memory implementation wrapped in AsyncMocks.
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from core.config import InvoiceServiceConfig
from microservices.invoice_service.invoice_service import InvoiceService
from microservices.invoice_service.models import (
    ClientCreateRequest,
    ClientUpdateRequest,
    CompanySettingsUpdate,
    InvoiceCalculationRequest,
    InvoiceCreateRequest,
    InvoiceStatus,
    InvoiceUpdateRequest,
    TaxMode,
)
from microservices.invoice_service.protocols import (
    ClientNotFoundError,
    InvalidLineItemError,
    InvoiceNotFoundError,
)
from tests.fixtures import make_client_create_request, make_invoice_create_request, make_line_item

from .mocks import MockInvoiceRepository

pytestmark = [pytest.mark.component, pytest.mark.asyncio]


def _create_request(**kwargs) -> InvoiceCreateRequest:
    return InvoiceCreateRequest.model_validate(make_invoice_create_request(**kwargs))


# =============================================================================
# Calculation
# =============================================================================

class TestCalculate:
    """Live recalculation"""

    async def test_invoice_mode(self, invoice_service, sample_items):
        request = InvoiceCalculationRequest.model_validate(
            {"items": sample_items, "taxMode": "invoice", "taxRate": 18}
        )
        result = await invoice_service.calculate(request)

        assert result.subtotal == Decimal("250")
        assert result.tax_amount == Decimal("45")
        assert result.total == Decimal("295")
        assert result.tax_rate == Decimal("18")
        assert result.display.total == "₹295.00"

    async def test_per_item_mode(self, invoice_service, area_item):
        request = InvoiceCalculationRequest.model_validate(
            {"items": [area_item], "taxMode": "per_item"}
        )
        result = await invoice_service.calculate(request)

        assert result.items[0].amount == Decimal("600")
        assert result.items[0].tax_amount == Decimal("108")
        assert result.total == Decimal("708")
        assert result.tax_rate is None
        assert result.display.tax_amount == "₹108.00"

    async def test_stores_nothing(self, invoice_service, mock_invoice_repository, sample_items):
        request = InvoiceCalculationRequest.model_validate({"items": sample_items})
        await invoice_service.calculate(request)

        assert mock_invoice_repository.invoice_count() == 0
        mock_invoice_repository.next_invoice_sequence.assert_not_called()

    async def test_custom_currency_symbol(self, mock_invoice_repository, sample_items):
        service = InvoiceService(
            repository=mock_invoice_repository,
            config=InvoiceServiceConfig(currency_symbol="Rs. "),
        )
        request = InvoiceCalculationRequest.model_validate({"items": sample_items})
        result = await service.calculate(request)

        assert result.display.subtotal == "Rs. 250.00"


# =============================================================================
# Invoice creation
# =============================================================================

class TestCreateInvoice:
    """Invoice creation"""

    async def test_totals_are_computed_from_items(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())

        assert invoice.subtotal == Decimal("250")
        assert invoice.tax_amount == Decimal("45")
        assert invoice.total_gst == invoice.tax_amount
        assert invoice.total == Decimal("295")
        assert len(invoice.items) == 2

    async def test_caller_totals_are_ignored(self, invoice_service):
        request = _create_request(subtotal=1, total=1)
        invoice = await invoice_service.create_invoice(request)

        assert invoice.total == Decimal("295")

    async def test_sequential_invoice_numbers(self, invoice_service):
        first = await invoice_service.create_invoice(_create_request())
        second = await invoice_service.create_invoice(_create_request())

        assert first.invoice_number == "INV-0001"
        assert second.invoice_number == "INV-0002"
        assert first.id != second.id

    async def test_number_prefix_from_config(self, mock_invoice_repository):
        service = InvoiceService(
            repository=mock_invoice_repository,
            config=InvoiceServiceConfig(invoice_number_prefix="ACME/"),
        )
        invoice = await service.create_invoice(_create_request())

        assert invoice.invoice_number == "ACME/0001"

    async def test_default_due_date(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())

        assert invoice.due_date - invoice.created_at == timedelta(days=30)

    async def test_explicit_due_date_is_kept(self, invoice_service):
        due = datetime(2026, 12, 31, tzinfo=timezone.utc)
        invoice = await invoice_service.create_invoice(_create_request(dueDate=due.isoformat()))

        assert invoice.due_date == due

    async def test_default_terms(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())

        assert invoice.delivery_terms == "Within 20-30 days"
        assert invoice.additional_terms == "Goods once sold can't be returned."

    async def test_terms_override(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request(paymentTerms="50% on order"))

        assert invoice.payment_terms == "50% on order"
        assert invoice.delivery_terms == "Within 20-30 days"

    async def test_client_details_filled_from_client(self, invoice_service):
        client = await invoice_service.create_client(
            ClientCreateRequest.model_validate(make_client_create_request(name="Skyline Infra"))
        )
        invoice = await invoice_service.create_invoice(
            _create_request(client_id=client.id, client_name=None)
        )

        assert invoice.client_id == client.id
        assert invoice.client_name == "Skyline Infra"
        assert invoice.client_email == client.email
        assert invoice.client_address == client.address

    async def test_unknown_client_raises(self, invoice_service, mock_invoice_repository):
        with pytest.raises(ClientNotFoundError):
            await invoice_service.create_invoice(_create_request(client_id="missing"))

        mock_invoice_repository.next_invoice_sequence.assert_not_called()
        assert mock_invoice_repository.invoice_count() == 0

    async def test_stored_invoice_matches_result(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())
        stored = await invoice_service.get_invoice(invoice.id)

        assert stored == invoice

    async def test_lenient_bad_numbers_become_zero(self, invoice_service):
        items = [make_line_item(quantity="lots", rate=100), make_line_item(quantity=1, rate=50)]
        invoice = await invoice_service.create_invoice(_create_request(items=items))

        assert invoice.items[0].amount == 0
        assert invoice.subtotal == Decimal("50")


# =============================================================================
# Reading, updating and deleting invoices
# =============================================================================

class TestInvoiceLifecycle:
    """Get, list, update, delete"""

    async def test_get_missing_invoice_raises(self, invoice_service):
        with pytest.raises(InvoiceNotFoundError):
            await invoice_service.get_invoice("missing")

    async def test_list_filters_by_status_and_search(self, invoice_service):
        await invoice_service.create_invoice(_create_request(client_name="Acme Builders"))
        await invoice_service.create_invoice(_create_request(client_name="Skyline Infra", status="paid"))
        await invoice_service.create_invoice(_create_request(client_name="Acme Roofing", status="paid"))

        paid = await invoice_service.list_invoices(status=InvoiceStatus.PAID)
        acme = await invoice_service.list_invoices(search="acme")
        acme_paid = await invoice_service.list_invoices(status=InvoiceStatus.PAID, search="ACME")
        by_number = await invoice_service.list_invoices(search="inv-0002")

        assert len(paid) == 2
        assert len(acme) == 2
        assert [inv.client_name for inv in acme_paid] == ["Acme Roofing"]
        assert [inv.client_name for inv in by_number] == ["Skyline Infra"]

    async def test_update_status_keeps_totals(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())
        updated = await invoice_service.update_invoice(
            invoice.id, InvoiceUpdateRequest(status=InvoiceStatus.SENT)
        )

        assert updated.status == InvoiceStatus.SENT
        assert updated.total == invoice.total
        assert updated.invoice_number == invoice.invoice_number
        assert updated.updated_at >= invoice.updated_at

    async def test_update_items_recomputes_totals(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())
        request = InvoiceUpdateRequest.model_validate(
            {"items": [make_line_item(quantity=10, rate=10)]}
        )
        updated = await invoice_service.update_invoice(invoice.id, request)

        assert updated.subtotal == Decimal("100")
        assert updated.tax_amount == Decimal("18")
        assert updated.total == Decimal("118")

    async def test_update_tax_rate_reprices_stored_items(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())
        updated = await invoice_service.update_invoice(
            invoice.id, InvoiceUpdateRequest.model_validate({"taxRate": 5})
        )

        assert updated.subtotal == Decimal("250")
        assert updated.tax_amount == Decimal("12.5")
        assert updated.total == Decimal("262.5")

    async def test_switch_to_per_item_mode(self, invoice_service, area_item):
        invoice = await invoice_service.create_invoice(_create_request(items=[area_item]))
        assert invoice.total == Decimal("708")

        updated = await invoice_service.update_invoice(
            invoice.id, InvoiceUpdateRequest(tax_mode=TaxMode.PER_ITEM)
        )

        assert updated.tax_mode == TaxMode.PER_ITEM
        assert updated.tax_rate is None
        assert updated.tax_amount == Decimal("108")
        assert updated.total == Decimal("708")

    async def test_update_is_persisted(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())
        await invoice_service.update_invoice(invoice.id, InvoiceUpdateRequest(notes="Call before delivery"))

        stored = await invoice_service.get_invoice(invoice.id)
        assert stored.notes == "Call before delivery"

    async def test_update_to_unknown_client_raises(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())

        with pytest.raises(ClientNotFoundError):
            await invoice_service.update_invoice(invoice.id, InvoiceUpdateRequest(client_id="missing"))

    async def test_update_missing_invoice_raises(self, invoice_service):
        with pytest.raises(InvoiceNotFoundError):
            await invoice_service.update_invoice("missing", InvoiceUpdateRequest(notes="x"))

    async def test_delete_invoice(self, invoice_service, mock_invoice_repository):
        invoice = await invoice_service.create_invoice(_create_request())
        await invoice_service.delete_invoice(invoice.id)

        assert mock_invoice_repository.invoice_count() == 0
        with pytest.raises(InvoiceNotFoundError):
            await invoice_service.delete_invoice(invoice.id)


# =============================================================================
# Summary
# =============================================================================

class TestInvoiceSummary:
    """Printable rendition"""

    async def test_summary_formats_amounts(self, invoice_service):
        invoice = await invoice_service.create_invoice(_create_request())
        summary = await invoice_service.get_invoice_summary(invoice.id)

        assert summary.invoice_number == "INV-0001"
        assert summary.tax_label == "Tax (18%)"
        assert summary.subtotal == "₹250.00"
        assert summary.tax_amount == "₹45.00"
        assert summary.total == "₹295.00"
        assert summary.rows[0].quantity == "2"
        assert summary.rows[0].rate == "₹100.00"
        assert summary.rows[0].amount == "₹200.00"
        assert summary.bill_to["name"] == "Acme Builders"
        assert summary.terms[0] == "Delivery: Within 20-30 days"

    async def test_per_item_summary(self, invoice_service, area_item):
        invoice = await invoice_service.create_invoice(
            _create_request(items=[area_item], tax_mode="per_item")
        )
        summary = await invoice_service.get_invoice_summary(invoice.id)

        assert summary.tax_label == "GST"
        assert summary.rows[0].area == "3"
        assert summary.total == "₹708.00"

    async def test_summary_uses_company_profile(self, invoice_service):
        await invoice_service.update_company_settings(CompanySettingsUpdate(name="Acme Engineering"))
        invoice = await invoice_service.create_invoice(_create_request())
        summary = await invoice_service.get_invoice_summary(invoice.id)

        assert summary.company.name == "Acme Engineering"


# =============================================================================
# Clients and company profile
# =============================================================================

class TestClientsAndCompany:
    """Client CRUD and company profile merge"""

    async def test_client_crud(self, invoice_service, mock_invoice_repository):
        client = await invoice_service.create_client(
            ClientCreateRequest.model_validate(make_client_create_request())
        )
        assert client.created_at is not None

        updated = await invoice_service.update_client(
            client.id, ClientUpdateRequest(phone="+91 90000 00000")
        )
        assert updated.phone == "+91 90000 00000"
        assert updated.name == client.name
        assert updated.updated_at is not None

        assert [c.id for c in await invoice_service.list_clients()] == [client.id]

        await invoice_service.delete_client(client.id)
        assert mock_invoice_repository.client_count() == 0

    async def test_missing_client_raises(self, invoice_service):
        with pytest.raises(ClientNotFoundError):
            await invoice_service.get_client("missing")
        with pytest.raises(ClientNotFoundError):
            await invoice_service.update_client("missing", ClientUpdateRequest(name="X"))
        with pytest.raises(ClientNotFoundError):
            await invoice_service.delete_client("missing")

    async def test_deleting_client_keeps_invoice_details(self, invoice_service):
        client = await invoice_service.create_client(
            ClientCreateRequest.model_validate(make_client_create_request(name="Skyline Infra"))
        )
        invoice = await invoice_service.create_invoice(
            _create_request(client_id=client.id, client_name=None)
        )
        await invoice_service.delete_client(client.id)

        stored = await invoice_service.get_invoice(invoice.id)
        assert stored.client_name == "Skyline Infra"

    async def test_company_settings_merge(self, invoice_service):
        await invoice_service.update_company_settings(CompanySettingsUpdate(name="Acme Engineering"))
        settings = await invoice_service.update_company_settings(
            CompanySettingsUpdate(gstin="27ABCDE1234F1Z5", logo="data:image/png;base64,AAAA")
        )

        assert settings.name == "Acme Engineering"
        assert settings.gstin == "27ABCDE1234F1Z5"
        assert settings.logo == "data:image/png;base64,AAAA"

    async def test_company_logo_can_be_cleared(self, invoice_service):
        await invoice_service.update_company_settings(CompanySettingsUpdate(logo="abc"))
        settings = await invoice_service.update_company_settings(
            CompanySettingsUpdate.model_validate({"logo": None})
        )

        assert settings.logo is None


# =============================================================================
# Dashboard
# =============================================================================

class TestDashboard:
    """Dashboard figures"""

    async def test_empty(self, invoice_service):
        stats = await invoice_service.get_dashboard_stats()

        assert stats.total_invoices == 0
        assert stats.total_revenue == 0
        assert stats.overdue_invoices == 0

    async def test_revenue_pending_and_overdue(self, invoice_service):
        now = datetime(2026, 6, 1, tzinfo=timezone.utc)
        past = (now - timedelta(days=5)).isoformat()
        future = (now + timedelta(days=5)).isoformat()

        await invoice_service.create_invoice(_create_request(status="paid"))
        await invoice_service.create_invoice(_create_request(status="sent", dueDate=future))
        await invoice_service.create_invoice(_create_request(status="sent", dueDate=past))
        await invoice_service.create_invoice(_create_request(status="overdue"))
        await invoice_service.create_invoice(_create_request(status="draft", dueDate=past))

        stats = await invoice_service.get_dashboard_stats(now=now)

        assert stats.total_invoices == 5
        assert stats.total_revenue == Decimal("295")
        assert stats.pending_amount == Decimal("590")
        assert stats.overdue_invoices == 2


# =============================================================================
# Strict validation
# =============================================================================

class TestStrictValidation:
    """Malformed line items are rejected"""

    async def test_create_rejected_before_numbering(self, strict_invoice_service, mock_invoice_repository):
        items = [make_line_item(quantity=1, rate=10), make_line_item(quantity="-1", rate=10)]

        with pytest.raises(InvalidLineItemError) as exc_info:
            await strict_invoice_service.create_invoice(_create_request(items=items))

        assert exc_info.value.index == 1
        assert exc_info.value.field == "quantity"
        mock_invoice_repository.next_invoice_sequence.assert_not_called()
        assert mock_invoice_repository.invoice_count() == 0

    async def test_calculate_rejects_bad_invoice_rate(self, strict_invoice_service, sample_items):
        request = InvoiceCalculationRequest.model_validate({"items": sample_items, "taxRate": "abc"})

        with pytest.raises(InvalidLineItemError):
            await strict_invoice_service.calculate(request)

    async def test_update_rejected_leaves_invoice_unchanged(self, strict_invoice_service):
        invoice = await strict_invoice_service.create_invoice(_create_request())
        request = InvoiceUpdateRequest.model_validate({"items": [make_line_item(rate="free")]})

        with pytest.raises(InvalidLineItemError):
            await strict_invoice_service.update_invoice(invoice.id, request)

        stored = await strict_invoice_service.get_invoice(invoice.id)
        assert stored.total == invoice.total

    async def test_valid_items_accepted(self, strict_invoice_service):
        invoice = await strict_invoice_service.create_invoice(_create_request())
        assert invoice.total == Decimal("295")
