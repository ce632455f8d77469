"""
JWT helpers — the request's trust context.

Identity verification is owned by the external identity provider; this
module only verifies the bearer token it issued and extracts the
principal id from the `sub` claim.

- A missing, malformed, expired or badly-signed token yields *no*
  principal.  Whether that is an error is decided by the caller
  (the access guard raises `Unauthenticated`).
- `create_access_token` mirrors the provider's token shape and is used
  by the bootstrap script and the test-suite.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from admin_rbac.core.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(principal_id: uuid.UUID, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: dict[str, Any] = {"sub": str(principal_id), "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_principal_id(token: str) -> uuid.UUID | None:
    """Return the principal id carried by `token`, or None if it cannot be trusted."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        return None

    subject = payload.get("sub")
    if not subject:
        return None
    try:
        return uuid.UUID(str(subject))
    except ValueError:
        logger.info("Rejected bearer token with non-UUID subject")
        return None


async def get_current_principal_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> uuid.UUID | None:
    """FastAPI dependency — principal id from the Authorization header, if any."""
    if credentials is None:
        return None
    return decode_principal_id(credentials.credentials)
