"""
Authentication Dependencies

SendKey bearer authentication and the per-account rate limiter shared by
every authenticated route.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, Request, Response

from ..config import Config
from ..errors import AuthError, RateLimitError
from ..models.account import Account
from ..services.engine_service import get_engine_service

logger = logging.getLogger("pusher.routes.auth")


def parse_bearer(authorization: Optional[str]) -> str:
    """Extract the key from 'Bearer <key>'"""
    if not authorization:
        raise AuthError("Missing or invalid Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthError("Missing or invalid Authorization header")

    return parts[1]


async def get_current_account(authorization: str = Header(None)) -> Account:
    """Dependency to get the account owning the presented SendKey"""
    engine = get_engine_service()
    return await engine.auth_service.validate(parse_bearer(authorization))


async def consume_rate_limit(request: Request, response: Response, account: Account) -> Account:
    """
    Count this request against the account's window.

    Sets the X-RateLimit-* headers on the response (and keeps them on
    request.state so error responses carry them too).
    """
    engine = get_engine_service()
    limit = Config.RATE_LIMIT
    result = await engine.auth_service.check_and_consume(account, limit)

    headers = result.headers(limit)
    request.state.rate_limit_headers = headers

    if not result.allowed:
        raise RateLimitError(limit, result.reset_at, headers=headers)

    response.headers.update(headers)
    return account


async def rate_limited_account(
    request: Request,
    response: Response,
    account: Account = Depends(get_current_account),
) -> Account:
    """Dependency: authenticated and within quota"""
    return await consume_rate_limit(request, response, account)
