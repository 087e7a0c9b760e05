"""
DingTalk Adapter

Custom robot webhook of a DingTalk group.
"""
import base64
import hashlib
import hmac
import time
from typing import Any, Dict, Tuple
from urllib.parse import quote_plus

from .base import ChannelAdapter
from .types import ChannelCapability, ConfigField, OutgoingMessage


class DingTalkAdapter(ChannelAdapter):
    """Post text messages to a DingTalk robot"""

    type = "dingtalk"
    name = "DingTalk Robot"
    capability = ChannelCapability.WEBHOOK
    fields = (
        ConfigField("webhook_url", "Robot webhook URL", required=True, sensitive=True),
        ConfigField("secret", "Signing secret (SEC...)", sensitive=True),
        ConfigField("at_mobiles", "Mobiles to @, comma separated"),
        ConfigField("at_all", "Set to 'true' to @ everyone"),
    )

    def build_payload(self, message: OutgoingMessage, credentials: Dict[str, str]) -> Dict[str, Any]:
        mobiles = [m.strip() for m in (credentials.get("at_mobiles") or "").split(",") if m.strip()]
        return {
            "msgtype": "text",
            "text": {"content": message.as_text()},
            "at": {
                "atMobiles": mobiles,
                "isAtAll": (credentials.get("at_all") or "").lower() == "true",
            },
        }

    def sign_request(
        self, url: str, payload: Dict[str, Any], credentials: Dict[str, str]
    ) -> Tuple[str, Dict[str, Any]]:
        """Append timestamp and HMAC-SHA256 sign query parameters when a secret is set"""
        secret = credentials.get("secret")
        if not secret:
            return url, payload

        timestamp = str(int(time.time() * 1000))
        string_to_sign = f"{timestamp}\n{secret}"
        digest = hmac.new(secret.encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha256).digest()
        sign = quote_plus(base64.b64encode(digest).decode("utf-8"))
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}timestamp={timestamp}&sign={sign}", payload
