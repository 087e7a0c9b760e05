"""
Channel Delivery

The fixed send sequence shared by every adapter:

    1. validate parameters
    2. obtain an access token (token-managed) or skip (webhook)
    3. build the provider payload
    4. POST it
    5. interpret the provider response

Branching happens on the adapter's capability tag. Errors never escape
deliver(): they come back as a failed SendResult.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from ..errors import ChannelDeliveryError, UnsupportedChannelError
from .types import ChannelCapability, OutgoingMessage, SendResult

logger = logging.getLogger("pusher.channels.delivery")


async def deliver(adapter, message: OutgoingMessage, credentials: Dict[str, str]) -> SendResult:
    """Run one delivery attempt through `adapter`; never raises"""
    try:
        _validate_params(adapter, message, credentials)

        if adapter.capability is ChannelCapability.TOKEN_MANAGED:
            token = await obtain_token(adapter, credentials)
            payload = adapter.build_payload(message, credentials)
            url = adapter.endpoint(token, credentials)
        elif adapter.capability is ChannelCapability.WEBHOOK:
            payload = adapter.build_payload(message, credentials)
            url, payload = adapter.sign_request(credentials["webhook_url"], payload, credentials)
        else:
            raise UnsupportedChannelError(adapter.type)

        response = await adapter.client.post(url, json=payload)
        data = _read_json(adapter, response)

        if adapter.capability is ChannelCapability.TOKEN_MANAGED:
            result = parse_token_response(data)
            if not result.success and result.error_code in adapter.invalid_token_codes:
                # Next push refetches; this attempt is still reported failed
                await adapter.tokens.invalidate(adapter.token_cache_key(credentials))
        else:
            result = parse_webhook_response(data)

        if result.success:
            logger.info(f"Delivered {message.id} via {adapter.type}")
        else:
            logger.warning(f"{adapter.type} rejected {message.id}: {result.error}")
        return result

    except ChannelDeliveryError as e:
        logger.warning(f"{adapter.type} delivery failed for {message.id}: {e.message}")
        return SendResult(success=False, error=e.message, error_code=e.provider_code)
    except UnsupportedChannelError as e:
        return SendResult(success=False, error=e.message)
    except Exception as e:
        logger.error(f"{adapter.type} send error for {message.id}: {e!r}")
        return SendResult(success=False, error=str(e) or e.__class__.__name__)


async def check_credentials(adapter, credentials: Dict[str, str]) -> bool:
    """
    Decide whether credentials are acceptable for `adapter`.

    Required fields must be present. Token-managed adapters must also be
    able to obtain a token; webhook adapters need an http(s) URL.
    """
    problems = adapter.credential_errors(credentials)
    if problems:
        logger.info(f"Rejected {adapter.type} credentials: {'; '.join(problems)}")
        return False

    if adapter.capability is ChannelCapability.TOKEN_MANAGED:
        try:
            await obtain_token(adapter, credentials)
        except Exception as e:
            logger.info(f"Rejected {adapter.type} credentials: {e}")
            return False
        return True

    if adapter.capability is ChannelCapability.WEBHOOK:
        parsed = urlparse(credentials["webhook_url"])
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)

    return False


async def obtain_token(adapter, credentials: Dict[str, str]) -> str:
    """Return a cached access token or fetch and cache a new one"""
    cache_key = adapter.token_cache_key(credentials)
    cached = await adapter.tokens.get_token(cache_key)
    if cached:
        return cached

    url, params = adapter.token_request(credentials)
    response = await adapter.client.get(url, params=params)
    data = _read_json(adapter, response)

    if data.get("errcode"):
        raise ChannelDeliveryError(
            adapter.type,
            f"Failed to get access token: {data.get('errmsg')} (errcode: {data.get('errcode')})",
            provider_code=data.get("errcode"),
        )

    access_token = data.get("access_token")
    expires_in = data.get("expires_in")
    if not access_token or not expires_in:
        raise ChannelDeliveryError(adapter.type, "Invalid access token response")

    await adapter.tokens.put_token(cache_key, access_token, int(expires_in))
    logger.debug(f"Fetched new {adapter.type} access token")
    return access_token


def parse_token_response(data: Dict[str, Any]) -> SendResult:
    """Token-managed providers report success as errcode == 0"""
    errcode = data.get("errcode")
    if errcode == 0:
        msgid = data.get("msgid")
        return SendResult(success=True, external_id=str(msgid) if msgid is not None else None)
    return SendResult(
        success=False,
        error=f"{errcode}: {data.get('errmsg', 'unknown error')}",
        error_code=errcode,
    )


def parse_webhook_response(data: Dict[str, Any]) -> SendResult:
    """Webhook providers use either errcode or code; zero in either is success"""
    success = data.get("errcode") == 0 or data.get("code") == 0
    external_id = _first_present(data, "msgid", "message_id")
    if external_id is None and isinstance(data.get("data"), dict):
        external_id = _first_present(data["data"], "message_id", "msgid")
    if success:
        return SendResult(success=True, external_id=external_id)

    error_code = data.get("errcode") if data.get("errcode") is not None else data.get("code")
    error = data.get("errmsg") or data.get("msg") or "unknown error"
    return SendResult(
        success=False,
        error=f"{error_code}: {error}" if error_code is not None else error,
        error_code=error_code,
    )


def _validate_params(adapter, message: OutgoingMessage, credentials: Dict[str, str]):
    if not message.title:
        raise ChannelDeliveryError(adapter.type, "Message title is required")
    problems = adapter.credential_errors(credentials)
    if problems:
        raise ChannelDeliveryError(adapter.type, "; ".join(problems))


def _read_json(adapter, response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        raise ChannelDeliveryError(
            adapter.type, f"HTTP {response.status_code}: {response.text[:200]}"
        )
    if not isinstance(data, dict):
        raise ChannelDeliveryError(adapter.type, f"HTTP {response.status_code}: unexpected response body")
    return data


def _first_present(data: Dict[str, Any], *names: str) -> Optional[str]:
    for name in names:
        if data.get(name) is not None:
            return str(data[name])
    return None
