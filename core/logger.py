#!/usr/bin/env python3
"""
Service logger setup

Configures a named logger for a microservice using LoggingConfig. Module
loggers created with logging.getLogger(__name__) under the same package
propagate to it.
"""
import logging
import sys
from typing import Optional

from .config.logging_config import LoggingConfig


def setup_service_logger(logger_name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Configure and return the logger for a service

    Args:
        logger_name: Logger name, usually the service package
            (e.g. "microservices.invoice_service")
        level: Log level override (defaults to LOG_LEVEL from the environment)

    Returns:
        The configured logger
    """
    config = LoggingConfig.from_env()
    log_level = (level or config.level_name).upper()
    formatter = logging.Formatter(config.log_format)

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    # Re-running setup (reloads, tests) must not stack handlers
    if logger.handlers:
        return logger

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


__all__ = ["setup_service_logger"]
