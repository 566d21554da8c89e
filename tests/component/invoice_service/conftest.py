"""
Invoice Service - Component Test Configuration

Service-specific fixtures with mocked dependencies.
"""
import pytest
from fastapi.testclient import TestClient

from core.config import InvoiceServiceConfig

from .mocks import MockInvoiceRepository


@pytest.fixture
def mock_invoice_repository():
    """Provide MockInvoiceRepository"""
    return MockInvoiceRepository()


@pytest.fixture
def service_config():
    """Lenient service settings"""
    return InvoiceServiceConfig()


@pytest.fixture
def invoice_service(mock_invoice_repository, service_config):
    """Create InvoiceService with mocked dependencies"""
    from microservices.invoice_service.invoice_service import InvoiceService

    return InvoiceService(repository=mock_invoice_repository, config=service_config)


@pytest.fixture
def strict_invoice_service(mock_invoice_repository):
    """InvoiceService that rejects malformed line items"""
    from microservices.invoice_service.invoice_service import InvoiceService

    return InvoiceService(
        repository=mock_invoice_repository,
        config=InvoiceServiceConfig(strict_validation=True),
    )


def _client_for(service):
    from microservices.invoice_service.main import app, get_invoice_service

    app.dependency_overrides[get_invoice_service] = lambda: service
    return app, TestClient(app)


@pytest.fixture
def api_client(invoice_service):
    """TestClient bound to the lenient service"""
    app, client = _client_for(invoice_service)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def strict_api_client(strict_invoice_service):
    """TestClient bound to the strict service"""
    app, client = _client_for(strict_invoice_service)
    yield client
    app.dependency_overrides.clear()
