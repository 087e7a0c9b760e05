"""
WeChat Template Adapter

Template messages through a WeChat Official Account.
"""
import hashlib
from typing import Any, Dict, Tuple

from ..config import Config
from .base import ChannelAdapter
from .types import ChannelCapability, ConfigField, OutgoingMessage

TITLE_COLOR = "#173177"
REMARK_COLOR = "#999999"


class WeChatTemplateAdapter(ChannelAdapter):
    """Send template messages to one subscriber OpenID"""

    type = "wechat-template"
    name = "WeChat Template Message"
    capability = ChannelCapability.TOKEN_MANAGED
    fields = (
        ConfigField("app_id", "Official Account AppID", required=True),
        ConfigField("app_secret", "Official Account AppSecret", required=True, sensitive=True),
        ConfigField("template_id", "Template ID", required=True),
        ConfigField("open_id", "Recipient OpenID", required=True),
        ConfigField("url", "Link opened on tap"),
    )

    # invalid credential, invalid access_token, access_token expired
    invalid_token_codes = frozenset({40001, 40014, 42001})

    api_base = Config.WECHAT_API_BASE

    def token_request(self, credentials: Dict[str, str]) -> Tuple[str, Dict[str, str]]:
        return f"{self.api_base}/token", {
            "grant_type": "client_credential",
            "appid": credentials["app_id"],
            "secret": credentials["app_secret"],
        }

    def token_cache_key(self, credentials: Dict[str, str]) -> str:
        secret_hash = hashlib.sha256(credentials["app_secret"].encode("utf-8")).hexdigest()[:16]
        return f"{self.type}:{credentials['app_id']}:{secret_hash}"

    def endpoint(self, token: str, credentials: Dict[str, str]) -> str:
        return f"{self.api_base}/message/template/send?access_token={token}"

    def build_payload(self, message: OutgoingMessage, credentials: Dict[str, str]) -> Dict[str, Any]:
        payload = {
            "touser": credentials["open_id"],
            "template_id": credentials["template_id"],
            "data": {
                "first": {"value": message.title, "color": TITLE_COLOR},
                "keyword1": {"value": message.content or "No content", "color": TITLE_COLOR},
                "keyword2": {
                    "value": message.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                    "color": TITLE_COLOR,
                },
                "remark": {"value": "Powered by Webhook Pusher", "color": REMARK_COLOR},
            },
        }
        if credentials.get("url"):
            payload["url"] = credentials["url"]
        return payload
