#!/usr/bin/env python3
"""Invoice service configuration

Runtime settings for the invoice service: network binding, presentation
defaults and the line-item validation mode.
"""
import os
from dataclasses import dataclass

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class InvoiceServiceConfig:
    """Invoice service settings"""

    # ===========================================
    # Service binding
    # ===========================================
    service_name: str = "invoice_service"
    service_host: str = "0.0.0.0"
    service_port: int = 8260
    debug: bool = False
    log_level: str = "info"

    # ===========================================
    # Invoice defaults
    # ===========================================
    currency_symbol: str = "₹"
    invoice_number_prefix: str = "INV-"
    payment_due_days: int = 30

    # Reject malformed quantity/area/rate/taxRate instead of treating them as zero
    strict_validation: bool = False

    @classmethod
    def from_env(cls) -> 'InvoiceServiceConfig':
        """Load service configuration from environment variables"""
        return cls(
            service_name=os.getenv("SERVICE_NAME", "invoice_service"),
            service_host=os.getenv("HOST", "0.0.0.0"),
            service_port=_int(os.getenv("PORT", "8260"), 8260),
            debug=_bool(os.getenv("DEBUG", "false")),
            log_level=os.getenv("LOG_LEVEL", "info"),

            currency_symbol=os.getenv("INVOICE_CURRENCY_SYMBOL", "₹"),
            invoice_number_prefix=os.getenv("INVOICE_NUMBER_PREFIX", "INV-"),
            payment_due_days=_int(os.getenv("INVOICE_PAYMENT_DUE_DAYS", "30"), 30),

            strict_validation=_bool(os.getenv("INVOICE_STRICT_VALIDATION", "false")),
        )
