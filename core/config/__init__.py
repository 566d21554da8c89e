#!/usr/bin/env python3
"""Configuration for the invoice service

Configuration hierarchy:
- service_config: Service binding, invoice defaults, validation mode
- logging_config: Logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .service_config import InvoiceServiceConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = InvoiceServiceConfig.from_env()

def get_settings() -> InvoiceServiceConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> InvoiceServiceConfig:
    """Reload settings from environment"""
    global settings
    settings = InvoiceServiceConfig.from_env()
    return settings

__all__ = [
    'InvoiceServiceConfig',
    'LoggingConfig',
    'get_settings',
    'reload_settings',
    'settings',
]
