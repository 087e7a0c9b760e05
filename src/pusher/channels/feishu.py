"""
Feishu Adapter

Custom bot webhook of a Feishu (Lark) group.
"""
import base64
import hashlib
import hmac
import time
from typing import Any, Dict, Tuple

from .base import ChannelAdapter
from .types import ChannelCapability, ConfigField, OutgoingMessage


class FeishuAdapter(ChannelAdapter):
    """Post text messages to a Feishu bot"""

    type = "feishu"
    name = "Feishu Bot"
    capability = ChannelCapability.WEBHOOK
    fields = (
        ConfigField("webhook_url", "Bot webhook URL", required=True, sensitive=True),
        ConfigField("secret", "Signing secret", sensitive=True),
    )

    def build_payload(self, message: OutgoingMessage, credentials: Dict[str, str]) -> Dict[str, Any]:
        return {"msg_type": "text", "content": {"text": message.as_text()}}

    def sign_request(
        self, url: str, payload: Dict[str, Any], credentials: Dict[str, str]
    ) -> Tuple[str, Dict[str, Any]]:
        """Add timestamp and sign to the body when a secret is set"""
        secret = credentials.get("secret")
        if not secret:
            return url, payload

        timestamp = str(int(time.time()))
        string_to_sign = f"{timestamp}\n{secret}"
        digest = hmac.new(string_to_sign.encode("utf-8"), b"", hashlib.sha256).digest()
        signed = dict(payload)
        signed["timestamp"] = timestamp
        signed["sign"] = base64.b64encode(digest).decode("utf-8")
        return url, signed
