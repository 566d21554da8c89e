"""
Invoice Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from typing import List, Optional, Protocol

from .models import (
    Client,
    CompanySettings,
    Invoice,
    InvoiceStatus,
)


# ====================
# Repository Protocol
# ====================


class InvoiceRepositoryProtocol(Protocol):
    """Protocol for invoice data repository"""

    async def initialize(self) -> None:
        """Initialize repository"""
        ...

    async def close(self) -> None:
        """Release repository resources"""
        ...

    # Invoices
    async def next_invoice_sequence(self) -> int:
        """Reserve the next invoice sequence number"""
        ...

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """Store a new invoice"""
        ...

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID"""
        ...

    async def list_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        search: Optional[str] = None,
    ) -> List[Invoice]:
        """List invoices, optionally filtered by status and search text"""
        ...

    async def update_invoice(self, invoice: Invoice) -> Optional[Invoice]:
        """Replace a stored invoice"""
        ...

    async def delete_invoice(self, invoice_id: str) -> bool:
        """Delete invoice, returns False when it did not exist"""
        ...

    # Clients
    async def create_client(self, client: Client) -> Client:
        """Store a new client"""
        ...

    async def get_client(self, client_id: str) -> Optional[Client]:
        """Get client by ID"""
        ...

    async def list_clients(self) -> List[Client]:
        """List all clients"""
        ...

    async def update_client(self, client: Client) -> Optional[Client]:
        """Replace a stored client"""
        ...

    async def delete_client(self, client_id: str) -> bool:
        """Delete client, returns False when it did not exist"""
        ...

    # Company profile
    async def get_company_settings(self) -> CompanySettings:
        """Get company profile"""
        ...

    async def save_company_settings(self, settings: CompanySettings) -> CompanySettings:
        """Replace company profile"""
        ...


# ====================
# Custom Exceptions (no I/O operations)
# ====================


class InvoiceServiceError(Exception):
    """Base exception for invoice service errors"""

    pass


class InvalidLineItemError(InvoiceServiceError):
    """Raised in strict mode when a line item number cannot be used"""

    def __init__(self, message: str, index: Optional[int] = None, field: Optional[str] = None):
        super().__init__(message)
        self.index = index
        self.field = field


class InvoiceNotFoundError(InvoiceServiceError):
    """Raised when invoice is not found"""

    pass


class ClientNotFoundError(InvoiceServiceError):
    """Raised when client is not found"""

    pass


__all__ = [
    "InvoiceRepositoryProtocol",
    "InvoiceServiceError",
    "InvalidLineItemError",
    "InvoiceNotFoundError",
    "ClientNotFoundError",
]
