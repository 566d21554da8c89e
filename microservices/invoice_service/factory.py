"""
Invoice Service Factory

Factory for creating InvoiceService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config import InvoiceServiceConfig

from .invoice_repository import InvoiceRepository
from .invoice_service import InvoiceService

logger = logging.getLogger(__name__)


def create_invoice_service(
    config: Optional[InvoiceServiceConfig] = None,
) -> InvoiceService:
    """
    Create InvoiceService with all real dependencies

    Args:
        config: Optional service settings (loaded from environment if not provided)

    Returns:
        InvoiceService backed by a fresh in-memory repository
    """
    if config is None:
        config = InvoiceServiceConfig.from_env()

    repository = InvoiceRepository()
    logger.info("Invoice repository created (in-memory)")

    return InvoiceService(repository=repository, config=config)


__all__ = ["create_invoice_service"]
