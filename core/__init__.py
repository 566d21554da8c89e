#!/usr/bin/env python3
"""
Core Module for Microservices

Shared components used by the invoice service.

COMPONENTS:
    - config/: Service and logging configuration loaded from environment
    - logger.py: Service logger setup

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    config = get_settings()
    logger = setup_service_logger("microservices.invoice_service", level=config.log_level)
"""

__version__ = "1.0.0"
