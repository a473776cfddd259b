#!/usr/bin/env python3
"""
Database Initialization Script
==============================

Create the MongoDB indexes the catalog service relies on and optionally
bootstrap an admin account.

Usage:
    python scripts/init_databases.py
    python scripts/init_databases.py --admin-email admin@example.com \\
        --admin-password 'Secret123' --admin-name 'Site Admin'

Version: 0.1.0
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pymongo.errors import PyMongoError

from shared.logging import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False, service_name="init-db")
logger = get_logger(__name__)


async def init_mongodb() -> bool:
    """Initialize MongoDB indexes."""
    from shared.database.mongodb import MongoDBClient

    logger.info("Initializing MongoDB...")

    try:
        client = MongoDBClient.get_client()

        await MongoDBClient.create_indexes()

        info = await client.server_info()
        logger.info(f"MongoDB connected: v{info['version']}")

        logger.info("MongoDB initialized successfully")
        return True

    except PyMongoError as e:
        logger.error(f"MongoDB initialization failed: {e}")
        return False


async def bootstrap_admin(email: str, password: str, name: str) -> bool:
    """Create an admin account, or promote the existing account with that email."""
    from shared.auth.mongo_store import MongoCredentialStore
    from shared.errors import CatalogError
    from shared.models.user import RegisterRequest, Role

    logger.info("Bootstrapping admin account...")

    try:
        # Same rules as self-registration
        request = RegisterRequest(name=name, email=email, password=password)
    except ValueError as e:
        logger.error(f"Admin account rejected: {e}")
        return False

    try:
        store = MongoCredentialStore()
        user = await store.find_by_email(request.email)

        if user is None:
            password_hash = await store.hasher.hash_async(request.password)
            user = await store.create_user(
                request.name,
                request.email,
                password_hash,
                Role.ADMIN,
            )
            logger.info("admin_created", user_id=user.id)
        else:
            await store.set_role(user.id, Role.ADMIN)
            logger.info("admin_promoted", user_id=user.id)

        return True

    except (PyMongoError, CatalogError) as e:
        logger.error(f"Admin bootstrap failed: {e}")
        return False


async def main(args: argparse.Namespace) -> int:
    """Main initialization function."""
    from shared.database.mongodb import MongoDBClient

    logger.info("=" * 60)
    logger.info("Catalog Database Initialization")
    logger.info("=" * 60)

    results = {"MongoDB": await init_mongodb()}

    if args.admin_email:
        results["Admin"] = await bootstrap_admin(
            args.admin_email,
            args.admin_password,
            args.admin_name,
        )

    await MongoDBClient.close()

    # Summary
    logger.info("=" * 60)
    logger.info("Initialization Summary")
    logger.info("=" * 60)

    failed = []
    for name, success in results.items():
        status = "OK" if success else "FAILED"
        logger.info(f"  {name}: {status}")
        if not success:
            failed.append(name)

    if failed:
        logger.error(f"Failed: {', '.join(failed)}")
        return 1

    logger.info("Initialization completed successfully")
    return 0


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Initialize the catalog database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--admin-email",
        help="Email of the admin account to create or promote",
    )
    parser.add_argument(
        "--admin-password",
        help="Password for a newly created admin account",
    )
    parser.add_argument(
        "--admin-name",
        default="Administrator",
        help="Display name for a newly created admin account",
    )

    args = parser.parse_args()

    if args.admin_email and not args.admin_password:
        parser.error("--admin-password is required with --admin-email")

    return args


if __name__ == "__main__":
    args = parse_args()
    exit_code = asyncio.run(main(args))
    sys.exit(exit_code)
