"""Shared-secret authorization for the trigger and review API."""

import secrets

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cli.config import get_cron_secret

logger = structlog.get_logger().bind(source="web_auth")

security = HTTPBearer(auto_error=False)


async def require_cron_secret(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> None:
    """Accept only ``Authorization: Bearer <CRON_SECRET>``, compared in constant time."""
    expected = get_cron_secret()
    if not expected:
        logger.error("cron_secret_missing")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="CRON_SECRET not configured",
        )
    supplied = credentials.credentials if credentials else ""
    if not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing secret",
            headers={"WWW-Authenticate": "Bearer"},
        )
