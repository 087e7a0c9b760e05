"""
Account Model

An account owns a SendKey, its channels and its push history.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from ..utils import generate_id, generate_send_key, isoformat, parse_datetime, utcnow


@dataclass
class RateWindow:
    """Fixed request window: requests counted so far and when the window ends"""
    count: int = 0
    reset_at: str = field(default_factory=lambda: isoformat(utcnow() + timedelta(seconds=60)))

    def to_dict(self) -> dict:
        return {"count": self.count, "resetAt": self.reset_at}

    @classmethod
    def from_dict(cls, data: dict) -> "RateWindow":
        return cls(count=int(data.get("count", 0)), reset_at=data["resetAt"])


@dataclass
class Account:
    """
    Account entity.

    send_key is globally unique; it only changes through regeneration,
    which retires the old key.
    """
    id: str = field(default_factory=generate_id)
    send_key: str = field(default_factory=generate_send_key)
    created_at: datetime = field(default_factory=utcnow)
    rate_limit: RateWindow = field(default_factory=RateWindow)

    def to_dict(self) -> dict:
        """Convert to dictionary (storage format)"""
        return {
            "id": self.id,
            "sendKey": self.send_key,
            "createdAt": isoformat(self.created_at),
            "rateLimit": self.rate_limit.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        return cls(
            id=data["id"],
            send_key=data["sendKey"],
            created_at=parse_datetime(data["createdAt"]),
            rate_limit=RateWindow.from_dict(data["rateLimit"]),
        )
