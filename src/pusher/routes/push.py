"""
Push Routes

POST/GET /push with a bearer SendKey, and the webhook form
/{send_key}.send with the key in the path.

Parameters (title, desp, channel) come from the query string, a JSON
body or a urlencoded form body; for each field the query string wins.
"""
import json
import logging
from typing import Dict
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request, Response

from ..errors import ErrorCodes, ValidationError
from ..models.account import Account
from ..services.engine_service import get_engine_service
from ..services.push_service import PushRequest
from ..utils import sanitize_input
from .auth import consume_rate_limit, rate_limited_account

logger = logging.getLogger("pusher.routes.push")
router = APIRouter(tags=["push"])
webhook_router = APIRouter(tags=["push"])

PUSH_FIELDS = ("title", "desp", "channel")


async def read_push_params(request: Request) -> Dict[str, str]:
    """Merge body and query parameters; query takes precedence per field"""
    params: Dict[str, str] = {}

    if request.method == "POST":
        raw = await request.body()
        content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
        if raw:
            if content_type == "application/x-www-form-urlencoded":
                try:
                    body = dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
                except UnicodeDecodeError:
                    raise ValidationError("Request body must be JSON or a urlencoded form")
            else:
                try:
                    body = json.loads(raw)
                except ValueError:
                    raise ValidationError("Request body must be JSON or a urlencoded form")
                if not isinstance(body, dict):
                    raise ValidationError("Request body must be a JSON object")
            for name in PUSH_FIELDS:
                value = body.get(name)
                if value is None:
                    continue
                if isinstance(value, (dict, list)):
                    raise ValidationError(f"Invalid parameter {name}: must be a string")
                params[name] = str(value)

    for name in PUSH_FIELDS:
        value = request.query_params.get(name)
        if value:
            params[name] = value

    return params


async def _push(account: Account, request: Request) -> dict:
    params = await read_push_params(request)

    title = sanitize_input(params.get("title"))
    if not title:
        raise ValidationError("Missing required parameter: title", error_code=ErrorCodes.MISSING_TITLE)

    engine = get_engine_service()
    record = await engine.push_service.push(
        account.id,
        PushRequest(
            title=title,
            content=sanitize_input(params.get("desp")) or None,
            channel_id=params.get("channel") or None,
        ),
    )

    return {
        "code": 0,
        "message": "success",
        "data": {"pushId": record.id},
    }


@router.api_route("/push", methods=["GET", "POST"])
async def push(request: Request, account: Account = Depends(rate_limited_account)):
    """Push a message to the caller's enabled channels"""
    return await _push(account, request)


@webhook_router.api_route("/{send_key}.send", methods=["GET", "POST"])
async def push_by_path_key(send_key: str, request: Request, response: Response):
    """Same as /push, authenticated by the SendKey in the path"""
    engine = get_engine_service()
    account = await engine.auth_service.validate(send_key)
    account = await consume_rate_limit(request, response, account)
    return await _push(account, request)
