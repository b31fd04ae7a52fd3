"""
Shared route dependencies.
"""
from typing import Optional

from fastapi import Header

from judge_assignment.errors import MissingAdminIdentityError


async def get_acting_admin_id(
    x_admin_id: Optional[str] = Header(default=None, alias="X-Admin-Id")
) -> str:
    """
    Acting admin identity attached to new assignments.

    Supplied by the admin session collaborator; authorization itself is
    enforced upstream.
    """
    if x_admin_id is None or x_admin_id.strip() == "":
        raise MissingAdminIdentityError()
    return x_admin_id.strip()
