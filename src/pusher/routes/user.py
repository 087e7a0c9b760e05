"""
User Routes

SendKey management, profile and account registration.
"""
import hmac
import logging

from fastapi import APIRouter, Depends, Header

from ..config import Config
from ..errors import ForbiddenError
from ..models.account import Account
from ..services.engine_service import get_engine_service
from ..utils import isoformat
from .auth import rate_limited_account

logger = logging.getLogger("pusher.routes.user")
router = APIRouter(prefix="/user", tags=["user"])


@router.get("/sendkey")
async def get_send_key(account: Account = Depends(rate_limited_account)):
    """Get the current SendKey"""
    return {
        "code": 0,
        "message": "success",
        "data": {
            "sendKey": account.send_key,
            "createdAt": isoformat(account.created_at),
        },
    }


@router.post("/sendkey")
async def regenerate_send_key(account: Account = Depends(rate_limited_account)):
    """Regenerate the SendKey; the old one stops working immediately"""
    engine = get_engine_service()
    send_key = await engine.auth_service.regenerate(account.id)
    return {
        "code": 0,
        "message": "success",
        "data": {"sendKey": send_key},
    }


@router.get("/profile")
async def get_profile(account: Account = Depends(rate_limited_account)):
    """Get account profile with the current rate-limit window"""
    limit = Config.RATE_LIMIT
    return {
        "code": 0,
        "message": "success",
        "data": {
            "id": account.id,
            "createdAt": isoformat(account.created_at),
            "rateLimit": {
                "limit": limit,
                "remaining": max(limit - account.rate_limit.count, 0),
                "resetAt": account.rate_limit.reset_at,
            },
        },
    }


@router.post("/register", status_code=201)
async def register(x_admin_token: str = Header(None)):
    """
    Create an account and return its SendKey.

    Requires X-Admin-Token matching ADMIN_TOKEN; disabled when no admin
    token is configured.
    """
    if not Config.ADMIN_TOKEN:
        raise ForbiddenError("Registration is disabled")
    if not x_admin_token or not hmac.compare_digest(x_admin_token, Config.ADMIN_TOKEN):
        raise ForbiddenError("Invalid admin token")

    engine = get_engine_service()
    account = await engine.auth_service.create_account()
    return {
        "code": 0,
        "message": "success",
        "data": {
            "id": account.id,
            "sendKey": account.send_key,
            "createdAt": isoformat(account.created_at),
        },
    }
