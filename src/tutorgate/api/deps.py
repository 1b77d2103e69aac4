"""
Caller identity dependencies.

Authentication happens upstream; the gateway forwards the authenticated
subject as `X-Subject-Id` and `X-Subject-Role` headers.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from tutorgate.core.models.users import ROLES
from tutorgate.release import Caller


async def get_caller(
    x_subject_id: str | None = Header(None),
    x_subject_role: str | None = Header(None),
) -> Caller:
    """Build the Caller from the forwarded identity headers."""
    if not x_subject_id or not x_subject_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing caller identity"
        )
    if x_subject_role not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=f"Unknown role: {x_subject_role}"
        )
    try:
        subject_id = UUID(x_subject_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Malformed subject id"
        ) from e
    return Caller(subject_id=subject_id, role=x_subject_role)


def require_role(*roles: str):  # type: ignore[no-untyped-def]
    """Dependency factory rejecting callers whose role is not in `roles`."""

    async def dependency(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return caller

    return dependency


require_staff = require_role("instructor", "admin")
require_admin = require_role("admin")
