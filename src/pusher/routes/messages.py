"""
Message History Routes

Read access to the caller's push history.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from ..errors import ErrorCodes, NotFoundError
from ..models.account import Account
from ..services.engine_service import get_engine_service
from .auth import rate_limited_account

logger = logging.getLogger("pusher.routes.messages")
router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("")
@router.get("/")
async def list_messages(
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    account: Account = Depends(rate_limited_account),
):
    """List push history, newest first"""
    engine = get_engine_service()
    page = await engine.history_service.list(account.id, limit=limit, cursor=cursor)
    return {
        "code": 0,
        "message": "success",
        "data": page.to_dict(),
    }


@router.get("/{message_id}")
async def get_message(message_id: str, account: Account = Depends(rate_limited_account)):
    """Get one push record with its delivery results"""
    engine = get_engine_service()
    record = await engine.history_service.get(account.id, message_id)
    if not record:
        raise NotFoundError("Message not found", error_code=ErrorCodes.MESSAGE_NOT_FOUND)
    return {
        "code": 0,
        "message": "success",
        "data": record.to_dict(),
    }
