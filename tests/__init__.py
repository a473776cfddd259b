"""
Catalog Test Suite
==================

Test organization:
- tests/unit/              - Token codec, stores, session manager, auth gate
- tests/services/catalog/  - HTTP endpoints against in-memory stores

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
"""
