"""
FastAPI dependency for request authorization.

Token validation happens upstream (the API gateway's authorizer), so the
service only checks that a Bearer credential was forwarded.

Flow:
  1. Extract the Authorization header
  2. Require the Bearer scheme and a non-empty token

Security:
  • Generic 401 for ALL failure modes (missing, wrong scheme, empty)
  • Raw tokens are NEVER logged
"""

from __future__ import annotations

from fastapi import Header, HTTPException, status

# Generic 401 — same message for all auth failures to avoid leaking info
_AUTH_FAILED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Missing or invalid authorization.",
    headers={"WWW-Authenticate": "Bearer"},
)


async def require_authorization(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> None:
    """
    FastAPI dependency — rejects requests without a Bearer credential.

    Usage in routers:
        router = APIRouter(dependencies=[Depends(require_authorization)])
    """
    if not authorization:
        raise _AUTH_FAILED

    parts = authorization.split(" ", maxsplit=1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise _AUTH_FAILED
