"""
Invoice Microservice API

REST API for clients, line-item invoices, company profile and live
invoice pricing. Records are held in process memory.
"""

from fastapi import FastAPI, HTTPException, Depends, Path, Query, Request, Response, status
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import List, Optional
from datetime import datetime, timezone

from core.config import get_settings
from core.logger import setup_service_logger

from .factory import create_invoice_service
from .invoice_service import InvoiceService
from .models import (
    Client,
    ClientCreateRequest,
    ClientUpdateRequest,
    CompanySettings,
    CompanySettingsUpdate,
    DashboardStats,
    HealthResponse,
    Invoice,
    InvoiceCalculationRequest,
    InvoiceCalculationResponse,
    InvoiceCreateRequest,
    InvoiceStatus,
    InvoiceSummary,
    InvoiceUpdateRequest,
    ServiceInfo,
)
from .protocols import ClientNotFoundError, InvalidLineItemError, InvoiceNotFoundError
from .routes_registry import SERVICE_METADATA, SERVICE_ROUTES, get_route_summary

# Configuration
config = get_settings()

# Logging
logger = setup_service_logger("microservices.invoice_service", level=config.log_level.upper())

# Globals
invoice_service: Optional[InvoiceService] = None
SERVICE_PORT = config.service_port or 8260
SERVICE_VERSION = SERVICE_METADATA["version"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    global invoice_service

    try:
        invoice_service = create_invoice_service(config=config)
        await invoice_service.repository.initialize()
        logger.info(f"Invoice service started on port {SERVICE_PORT}")
        yield
    except Exception as e:
        logger.error(f"Failed to initialize invoice service: {e}")
        raise
    finally:
        if invoice_service:
            await invoice_service.repository.close()
            logger.info("Invoice service shut down")
        invoice_service = None


app = FastAPI(
    title="Invoice Service",
    description="Clients, line-item invoices and invoice pricing",
    version=SERVICE_VERSION,
    lifespan=lifespan
)


# ====================
# Dependency injection
# ====================

async def get_invoice_service() -> InvoiceService:
    """Get invoice service instance"""
    if not invoice_service:
        raise HTTPException(status_code=503, detail="Invoice service not initialized")
    return invoice_service


def _invalid_items(e: InvalidLineItemError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": str(e), "index": e.index, "field": e.field},
    )


# ====================
# Health and service info
# ====================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    return HealthResponse(
        status="healthy",
        service=config.service_name,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        timestamp=datetime.now(timezone.utc),
    )


@app.get("/api/v1/invoices/info", response_model=ServiceInfo)
async def get_service_info():
    """Service information"""
    return ServiceInfo(
        service=SERVICE_METADATA["service_name"],
        version=SERVICE_VERSION,
        description="Invoice pricing, invoice and client management",
        capabilities=SERVICE_METADATA["capabilities"],
        route_count=len(SERVICE_ROUTES),
        strict_validation=config.strict_validation,
        currency_symbol=config.currency_symbol,
        metadata=get_route_summary(),
    )


# ====================
# Pricing
# ====================

@app.post("/api/v1/invoices/calculate", response_model=InvoiceCalculationResponse)
async def calculate_invoice(
    request: InvoiceCalculationRequest,
    service: InvoiceService = Depends(get_invoice_service)
):
    """Recalculate line items and totals for an invoice being edited"""
    try:
        return await service.calculate(request)
    except InvalidLineItemError as e:
        raise _invalid_items(e)


# ====================
# Invoices
# ====================

@app.get("/api/v1/invoices", response_model=List[Invoice])
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by status"),
    search: Optional[str] = Query(None, description="Search client name, invoice number, description"),
    service: InvoiceService = Depends(get_invoice_service)
):
    """List invoices"""
    return await service.list_invoices(status=status_filter, search=search)


@app.post("/api/v1/invoices", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    request: InvoiceCreateRequest,
    service: InvoiceService = Depends(get_invoice_service)
):
    """Create an invoice; totals are computed from its items"""
    try:
        return await service.create_invoice(request)
    except ClientNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidLineItemError as e:
        raise _invalid_items(e)


@app.get("/api/v1/invoices/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: str = Path(..., description="Invoice ID"),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Get invoice"""
    try:
        return await service.get_invoice(invoice_id)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")


@app.get("/api/v1/invoices/{invoice_id}/summary", response_model=InvoiceSummary)
async def get_invoice_summary(
    invoice_id: str = Path(..., description="Invoice ID"),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Printable invoice rendition"""
    try:
        return await service.get_invoice_summary(invoice_id)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")


@app.put("/api/v1/invoices/{invoice_id}", response_model=Invoice)
async def update_invoice(
    request: InvoiceUpdateRequest,
    invoice_id: str = Path(..., description="Invoice ID"),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Update invoice; totals are recomputed when items or tax change"""
    try:
        return await service.update_invoice(invoice_id, request)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    except ClientNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidLineItemError as e:
        raise _invalid_items(e)


@app.delete("/api/v1/invoices/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: str = Path(..., description="Invoice ID"),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Delete invoice"""
    try:
        await service.delete_invoice(invoice_id)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ====================
# Clients
# ====================

@app.get("/api/v1/clients", response_model=List[Client])
async def list_clients(service: InvoiceService = Depends(get_invoice_service)):
    """List clients"""
    return await service.list_clients()


@app.post("/api/v1/clients", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    request: ClientCreateRequest,
    service: InvoiceService = Depends(get_invoice_service)
):
    """Create client"""
    return await service.create_client(request)


@app.get("/api/v1/clients/{client_id}", response_model=Client)
async def get_client(
    client_id: str = Path(..., description="Client ID"),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Get client"""
    try:
        return await service.get_client(client_id)
    except ClientNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")


@app.put("/api/v1/clients/{client_id}", response_model=Client)
async def update_client(
    request: ClientUpdateRequest,
    client_id: str = Path(..., description="Client ID"),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Update client"""
    try:
        return await service.update_client(client_id, request)
    except ClientNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")


@app.delete("/api/v1/clients/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: str = Path(..., description="Client ID"),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Delete client"""
    try:
        await service.delete_client(client_id)
    except ClientNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ====================
# Company profile and dashboard
# ====================

@app.get("/api/v1/company", response_model=CompanySettings)
async def get_company_settings(service: InvoiceService = Depends(get_invoice_service)):
    """Get company profile"""
    return await service.get_company_settings()


@app.put("/api/v1/company", response_model=CompanySettings)
async def update_company_settings(
    request: CompanySettingsUpdate,
    service: InvoiceService = Depends(get_invoice_service)
):
    """Update company profile"""
    return await service.update_company_settings(request)


@app.get("/api/v1/dashboard", response_model=DashboardStats)
async def get_dashboard(service: InvoiceService = Depends(get_invoice_service)):
    """Dashboard figures"""
    return await service.get_dashboard_stats()


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception in {request.url}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error occurred"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "microservices.invoice_service.main:app",
        host=config.service_host,
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
