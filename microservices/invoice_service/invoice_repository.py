"""
Invoice Repository

In-memory data access layer for invoices, clients and the company profile.
Records live for the lifetime of the process.
"""

import logging
from typing import Dict, List, Optional

from .models import (
    Client,
    CompanySettings,
    Invoice,
    InvoiceStatus,
)

logger = logging.getLogger(__name__)


class InvoiceRepository:
    """
    Repository for invoice service records.

    Collections:
        - invoices: Invoice records keyed by id, in creation order
        - clients: Client records keyed by id, in creation order
        - company: Single company profile
    """

    def __init__(self, start_sequence: int = 1):
        """Initialize empty in-memory collections"""
        self._invoices: Dict[str, Invoice] = {}
        self._clients: Dict[str, Client] = {}
        self._company = CompanySettings()
        self._next_sequence = start_sequence

        logger.info("InvoiceRepository initialized (in-memory)")

    async def initialize(self) -> None:
        """Nothing to connect to; kept for lifecycle symmetry"""
        logger.debug("InvoiceRepository ready")

    async def close(self) -> None:
        """Drop all records"""
        self._invoices.clear()
        self._clients.clear()
        logger.info("InvoiceRepository closed")

    # ====================
    # Invoices
    # ====================

    async def next_invoice_sequence(self) -> int:
        """Reserve the next invoice sequence number"""
        sequence = self._next_sequence
        self._next_sequence += 1
        return sequence

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """Store a new invoice"""
        self._invoices[invoice.id] = invoice.model_copy(deep=True)
        return invoice

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID"""
        invoice = self._invoices.get(invoice_id)
        return invoice.model_copy(deep=True) if invoice else None

    async def list_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        search: Optional[str] = None,
    ) -> List[Invoice]:
        """List invoices filtered by status and a case-insensitive search over
        client name, invoice number and description"""
        results = list(self._invoices.values())

        if status:
            results = [inv for inv in results if inv.status == status]

        if search:
            needle = search.lower()
            results = [
                inv for inv in results
                if needle in (inv.client_name or "").lower()
                or needle in inv.invoice_number.lower()
                or needle in (inv.description or "").lower()
            ]

        return [inv.model_copy(deep=True) for inv in results]

    async def update_invoice(self, invoice: Invoice) -> Optional[Invoice]:
        """Replace a stored invoice"""
        if invoice.id not in self._invoices:
            return None
        self._invoices[invoice.id] = invoice.model_copy(deep=True)
        return invoice

    async def delete_invoice(self, invoice_id: str) -> bool:
        """Delete invoice"""
        return self._invoices.pop(invoice_id, None) is not None

    # ====================
    # Clients
    # ====================

    async def create_client(self, client: Client) -> Client:
        """Store a new client"""
        self._clients[client.id] = client.model_copy(deep=True)
        return client

    async def get_client(self, client_id: str) -> Optional[Client]:
        """Get client by ID"""
        client = self._clients.get(client_id)
        return client.model_copy(deep=True) if client else None

    async def list_clients(self) -> List[Client]:
        """List all clients"""
        return [client.model_copy(deep=True) for client in self._clients.values()]

    async def update_client(self, client: Client) -> Optional[Client]:
        """Replace a stored client"""
        if client.id not in self._clients:
            return None
        self._clients[client.id] = client.model_copy(deep=True)
        return client

    async def delete_client(self, client_id: str) -> bool:
        """Delete client"""
        return self._clients.pop(client_id, None) is not None

    # ====================
    # Company profile
    # ====================

    async def get_company_settings(self) -> CompanySettings:
        """Get company profile"""
        return self._company.model_copy(deep=True)

    async def save_company_settings(self, settings: CompanySettings) -> CompanySettings:
        """Replace company profile"""
        self._company = settings.model_copy(deep=True)
        return settings
