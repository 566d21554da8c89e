"""
Shared Test Fixtures

Centralized factories used across all test layers.

Structure:
    - common.py: Base ID generators, timestamps
    - invoice_fixtures.py: Line item, invoice and client factories
"""

# Common utilities
from .common import (
    make_client_id,
    make_email,
    make_timestamp,
)

# Invoice service fixtures
from .invoice_fixtures import (
    make_line_item,
    make_sample_items,
    make_invoice_create_request,
    make_client_create_request,
)

__all__ = [
    "make_client_id",
    "make_email",
    "make_timestamp",
    "make_line_item",
    "make_sample_items",
    "make_invoice_create_request",
    "make_client_create_request",
]
