"""
Channel Model

A configured delivery destination belonging to one account.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict

from ..utils import generate_id, isoformat, parse_datetime, utcnow


@dataclass
class Channel:
    """
    A delivery channel.

    credentials are validated by the adapter for `type` before the
    channel is stored; only enabled channels take part in a push.
    """
    id: str = field(default_factory=generate_id)
    account_id: str = ""
    type: str = ""                                              # 'wechat-template', 'dingtalk', ...
    name: str = ""
    enabled: bool = True
    credentials: Dict[str, str] = field(default_factory=dict)   # {"app_id": "...", ...}

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary (storage and API format)"""
        return {
            "id": self.id,
            "accountId": self.account_id,
            "type": self.type,
            "name": self.name,
            "enabled": self.enabled,
            "credentials": dict(self.credentials),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Channel":
        return cls(
            id=data["id"],
            account_id=data["accountId"],
            type=data["type"],
            name=data.get("name", ""),
            enabled=bool(data.get("enabled", True)),
            credentials=dict(data.get("credentials") or {}),
            created_at=parse_datetime(data["createdAt"]),
            updated_at=parse_datetime(data["updatedAt"]),
        )
