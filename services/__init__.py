"""
Catalog Services
================

HTTP services for the catalog platform.

Services:
- catalog: authentication, users and products REST API
"""

__all__ = [
    "catalog",
]
