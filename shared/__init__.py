"""
Catalog Shared Library
======================

Common utilities, configuration and the authentication core used by the
catalog service.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - errors: Error taxonomy mapped to HTTP responses
    - auth: Token codec, credential store, session manager, auth gate
    - database: MongoDB client
    - models: Shared Pydantic models

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "Catalog Team"

from shared.config import settings
from shared.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
