"""
Ownership Checks
================

Resource-level access rules layered on top of the role gate.

Version: 0.1.0
"""

from shared.auth import AuthContext
from shared.errors import AccessDenied
from shared.logging import get_logger

logger = get_logger(__name__)


def can_modify(context: AuthContext, owner_id: str) -> bool:
    """Admins may modify anything; everyone else only what they own."""
    return context.is_admin or context.user_id == owner_id


def ensure_owner_or_admin(context: AuthContext, owner_id: str, resource: str) -> None:
    """
    Raises:
        AccessDenied: caller is neither the owner nor an admin (403)
    """
    if not can_modify(context, owner_id):
        logger.warning(
            "access_denied",
            user_id=context.user_id,
            owner_id=owner_id,
            resource=resource,
        )
        raise AccessDenied(f"You do not have permission to modify this {resource}")
