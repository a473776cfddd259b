"""
Database Module
===============

Async MongoDB access for the catalog service.

Usage:
    from shared.database import MongoDBClient

    users = MongoDBClient.collection("users")
    doc = await users.find_one({"email": "a@example.com"})
"""

from shared.database.mongodb import MongoDBClient


__all__ = [
    "MongoDBClient",
]
