"""Authentication endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from sqlalchemy.ext.asyncio import AsyncSession

from pettycash.api.deps import get_db_session
from pettycash.core.config import get_settings
from pettycash.schemas.auth import Token
from pettycash.services import audit_service
from pettycash.services.auth_service import authenticate_user, create_access_token_for_user

router = APIRouter()

_SECONDS = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


def parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Turn ``"10/minute"`` into ``(10, 60)``."""
    count_str, _, window = value.partition("/")
    try:
        count = int(count_str.strip())
    except ValueError:
        return fallback
    return count, _SECONDS.get(window.strip().lower(), fallback[1])


_LOGIN_LIMIT = parse_rate(get_settings().rate_limit_login, fallback=(10, 60))


async def _login_rate_limit(request: Request, response: Response) -> None:
    # limiter is only initialised when redis is reachable
    if FastAPILimiter.redis is None:
        return
    limiter = RateLimiter(times=_LOGIN_LIMIT[0], seconds=_LOGIN_LIMIT[1])
    await limiter(request, response)


@router.post(
    "/token",
    response_model=Token,
    summary="Obtain access token",
    dependencies=[Depends(_login_rate_limit)],
)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> Token:
    """Validate credentials and issue a bearer token."""
    user = await authenticate_user(
        session, email=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    await audit_service.record_event(
        session,
        event_type="auth.login",
        organization_id=user.organization_id,
        user_id=user.id,
        description="Successful login",
        payload={"user_id": str(user.id), "email": user.email},
        ip_address=request.client.host if request.client else None,
    )
    return Token(access_token=create_access_token_for_user(user))
