import hmac
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shop.core.config import settings
from shop.core.db import get_async_engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def verify_health_token(x_health_token: Annotated[str | None, Header()] = None) -> None:
    """
    Verify health check token if configured.

    When HEALTH_TOKEN is set, health endpoints require the X-Health-Token
    header. If it is not set, health endpoints remain public.
    """
    expected_token = settings.health_token
    if not expected_token:
        return
    if not x_health_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Health token required",
        )
    if not hmac.compare_digest(x_health_token, expected_token):
        logger.warning("Unauthorized health check attempt")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid health token",
        )


@router.get("/health", dependencies=[Depends(verify_health_token)])
def health() -> dict:
    """Liveness probe."""
    return {"ok": True}


@router.get("/readyz", dependencies=[Depends(verify_health_token)])
async def readyz() -> JSONResponse:
    """Readiness probe: verifies database connectivity.

    Returns:
      - 200 when DB is reachable
      - 503 when DB is unavailable
    """
    try:
        engine = get_async_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return JSONResponse(status_code=status.HTTP_200_OK, content={"ok": True, "db": "ok"})
    except (SQLAlchemyError, OSError) as exc:
        logger.error(f"Health check failed: {exc}", exc_info=True)
        # Don't expose internal error details to callers
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "db": "unavailable"},
        )
