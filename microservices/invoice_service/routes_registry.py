"""
Invoice Service Routes Registry
Defines all API routes exposed by the invoice service
"""

from typing import List, Dict, Any

# Define all routes
SERVICE_ROUTES = [
    # Health and Service Info
    {
        "path": "/health",
        "methods": ["GET"],
        "description": "Health check endpoint"
    },
    {
        "path": "/api/v1/invoices/info",
        "methods": ["GET"],
        "description": "Service information and capabilities"
    },

    # Pricing
    {
        "path": "/api/v1/invoices/calculate",
        "methods": ["POST"],
        "description": "Recalculate line items and totals without storing"
    },

    # Invoices
    {
        "path": "/api/v1/invoices",
        "methods": ["GET", "POST"],
        "description": "List (status/search filters) or create invoices"
    },
    {
        "path": "/api/v1/invoices/{invoice_id}",
        "methods": ["GET", "PUT", "DELETE"],
        "description": "Get, update or delete an invoice"
    },
    {
        "path": "/api/v1/invoices/{invoice_id}/summary",
        "methods": ["GET"],
        "description": "Printable invoice rendition"
    },

    # Clients
    {
        "path": "/api/v1/clients",
        "methods": ["GET", "POST"],
        "description": "List or create clients"
    },
    {
        "path": "/api/v1/clients/{client_id}",
        "methods": ["GET", "PUT", "DELETE"],
        "description": "Get, update or delete a client"
    },

    # Company profile and dashboard
    {
        "path": "/api/v1/company",
        "methods": ["GET", "PUT"],
        "description": "Company profile"
    },
    {
        "path": "/api/v1/dashboard",
        "methods": ["GET"],
        "description": "Invoice counts and revenue figures"
    },
]


def get_route_summary() -> Dict[str, Any]:
    """
    Generate compact route metadata grouped by area
    """
    health_routes: List[str] = []
    invoice_routes: List[str] = []
    client_routes: List[str] = []
    other_routes: List[str] = []

    for route in SERVICE_ROUTES:
        path = route["path"]
        compact_path = path.replace("/api/v1/", "")

        if path.startswith("/health"):
            health_routes.append(compact_path)
        elif path.startswith("/api/v1/invoices"):
            invoice_routes.append(compact_path)
        elif path.startswith("/api/v1/clients"):
            client_routes.append(compact_path)
        else:
            other_routes.append(compact_path)

    methods = sorted({m for r in SERVICE_ROUTES for m in r["methods"]})
    return {
        "route_count": str(len(SERVICE_ROUTES)),
        "base_path": "/api/v1",
        "health": ",".join(health_routes),
        "invoices": ",".join(invoice_routes),
        "clients": ",".join(client_routes),
        "other": ",".join(other_routes),
        "methods": ",".join(methods),
    }


# Service metadata
SERVICE_METADATA = {
    "service_name": "invoice_service",
    "version": "1.0.0",
    "tags": ["v1", "invoice", "pricing"],
    "capabilities": [
        "line_item_pricing",
        "area_billing",
        "invoice_level_tax",
        "per_item_gst",
        "invoice_management",
        "client_management",
        "company_profile",
        "dashboard_stats",
    ]
}
