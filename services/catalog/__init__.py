"""
Catalog Service
===============

Product catalog REST API with dual-token authentication.

This service provides:
- Account registration, login, token refresh and logout
- Role-based access control (user, admin)
- User administration
- Product catalog browsing and management

Version: 0.1.0
"""

__version__ = "0.1.0"
