"""
Work WeChat Adapter

Application messages through a WeCom (Work WeChat) corp app.
"""
import hashlib
from typing import Any, Dict, List, Tuple

from ..config import Config
from .base import ChannelAdapter
from .types import ChannelCapability, ConfigField, OutgoingMessage


class WorkWeChatAdapter(ChannelAdapter):
    """Send text messages from a corp application to users or departments"""

    type = "work-wechat"
    name = "Work WeChat Application"
    capability = ChannelCapability.TOKEN_MANAGED
    fields = (
        ConfigField("corp_id", "Corp ID", required=True),
        ConfigField("corp_secret", "Application Secret", required=True, sensitive=True),
        ConfigField("agent_id", "Application AgentId", required=True),
        ConfigField("to_user", "User IDs separated by '|' (default @all)"),
        ConfigField("to_party", "Department IDs separated by '|'"),
    )

    # invalid access_token, access_token expired
    invalid_token_codes = frozenset({40014, 42001})

    api_base = Config.WORK_WECHAT_API_BASE

    def credential_errors(self, credentials: Dict[str, str]) -> List[str]:
        problems = super().credential_errors(credentials)
        agent_id = str(credentials.get("agent_id") or "").strip()
        if agent_id and not (agent_id.isascii() and agent_id.isdigit()):
            problems.append("agent_id must be numeric")
        return problems

    def token_request(self, credentials: Dict[str, str]) -> Tuple[str, Dict[str, str]]:
        return f"{self.api_base}/gettoken", {
            "corpid": credentials["corp_id"],
            "corpsecret": credentials["corp_secret"],
        }

    def token_cache_key(self, credentials: Dict[str, str]) -> str:
        secret_hash = hashlib.sha256(credentials["corp_secret"].encode("utf-8")).hexdigest()[:16]
        return f"{self.type}:{credentials['corp_id']}:{secret_hash}"

    def endpoint(self, token: str, credentials: Dict[str, str]) -> str:
        return f"{self.api_base}/message/send?access_token={token}"

    def build_payload(self, message: OutgoingMessage, credentials: Dict[str, str]) -> Dict[str, Any]:
        payload = {
            "msgtype": "text",
            "agentid": int(credentials["agent_id"]),
            "text": {"content": message.as_text()},
        }
        to_party = credentials.get("to_party")
        to_user = credentials.get("to_user")
        if to_party:
            payload["toparty"] = to_party
        if to_user or not to_party:
            payload["touser"] = to_user or "@all"
        return payload
