"""
Channel Routes

Channel management for the account UI. Credentials are validated by the
channel adapter before storing and masked in every response.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models.account import Account
from ..services.engine_service import get_engine_service
from .auth import rate_limited_account

logger = logging.getLogger("pusher.routes.channels")
router = APIRouter(prefix="/channels", tags=["channels"])


# ============================================
# Request Models
# ============================================

class CreateChannelRequest(BaseModel):
    """Create channel"""
    type: str                               # 'wechat-template', 'dingtalk', ...
    name: str
    credentials: Dict[str, Any]             # fields per /channels/types
    enabled: bool = True


class UpdateChannelRequest(BaseModel):
    """Update channel; omitted fields are unchanged"""
    name: Optional[str] = None
    enabled: Optional[bool] = None
    credentials: Optional[Dict[str, Any]] = None


# ============================================
# Routes
# ============================================

@router.get("/types")
async def list_channel_types(account: Account = Depends(rate_limited_account)):
    """Supported channel types and their credential fields"""
    engine = get_engine_service()
    return {"code": 0, "message": "success", "data": engine.registry.describe()}


@router.get("")
@router.get("/")
async def list_channels(account: Account = Depends(rate_limited_account)):
    """List the caller's channels"""
    engine = get_engine_service()
    channels = await engine.channel_service.list_channels(account.id)
    return {
        "code": 0,
        "message": "success",
        "data": [engine.channel_service.mask(c) for c in channels],
    }


@router.post("", status_code=201)
@router.post("/", status_code=201)
async def create_channel(
    request: CreateChannelRequest,
    account: Account = Depends(rate_limited_account),
):
    """Create a channel"""
    engine = get_engine_service()
    channel = await engine.channel_service.create_channel(
        account_id=account.id,
        channel_type=request.type,
        name=request.name,
        credentials=request.credentials,
        enabled=request.enabled,
    )
    return {"code": 0, "message": "success", "data": engine.channel_service.mask(channel)}


@router.get("/{channel_id}")
async def get_channel(channel_id: str, account: Account = Depends(rate_limited_account)):
    """Get one channel"""
    engine = get_engine_service()
    channel = await engine.channel_service.get_channel(account.id, channel_id)
    return {"code": 0, "message": "success", "data": engine.channel_service.mask(channel)}


@router.put("/{channel_id}")
async def update_channel(
    channel_id: str,
    request: UpdateChannelRequest,
    account: Account = Depends(rate_limited_account),
):
    """Update name, enabled flag or credentials"""
    engine = get_engine_service()
    channel = await engine.channel_service.update_channel(
        account.id,
        channel_id,
        name=request.name,
        enabled=request.enabled,
        credentials=request.credentials,
    )
    return {"code": 0, "message": "success", "data": engine.channel_service.mask(channel)}


@router.delete("/{channel_id}")
async def delete_channel(channel_id: str, account: Account = Depends(rate_limited_account)):
    """Delete a channel"""
    engine = get_engine_service()
    await engine.channel_service.delete_channel(account.id, channel_id)
    return {"code": 0, "message": "success"}
