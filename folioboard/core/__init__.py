"""
Folioboard Core
===============

Core utilities and shared functionality for Folioboard modules.
"""

from .config import Config, get_config_value
from .logging_service import LoggingService, db_log, logger

__all__ = ['Config', 'get_config_value', 'LoggingService', 'db_log', 'logger']
