"""
Push Models

PushRecord: one push request and its per-channel outcomes.
DeliveryResult: outcome of one channel attempt.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ..utils import generate_id, isoformat, parse_datetime, utcnow


class DeliveryStatus(str, Enum):
    """Delivery status. PENDING never reaches storage."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    """Outcome of delivering one push through one channel"""
    channel_id: str
    channel_type: str
    status: DeliveryStatus = DeliveryStatus.PENDING
    error: Optional[str] = None
    external_id: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "channelId": self.channel_id,
            "channelType": self.channel_type,
            "status": self.status.value,
        }
        if self.error is not None:
            result["error"] = self.error
        if self.external_id is not None:
            result["externalId"] = self.external_id
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "DeliveryResult":
        return cls(
            channel_id=data["channelId"],
            channel_type=data["channelType"],
            status=DeliveryStatus(data["status"]),
            error=data.get("error"),
            external_id=data.get("externalId"),
        )


@dataclass
class PushRecord:
    """
    Durable record of one push.

    Written once after the fan-out completes; never updated afterwards.
    """
    id: str = field(default_factory=generate_id)
    account_id: str = ""
    title: str = ""
    content: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    delivery_results: List[DeliveryResult] = field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        """True when no result is still pending"""
        return all(r.status != DeliveryStatus.PENDING for r in self.delivery_results)

    def to_dict(self) -> dict:
        """Convert to dictionary (storage and API format)"""
        result = {
            "id": self.id,
            "accountId": self.account_id,
            "title": self.title,
            "createdAt": isoformat(self.created_at),
            "deliveryResults": [r.to_dict() for r in self.delivery_results],
        }
        if self.content is not None:
            result["content"] = self.content
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "PushRecord":
        return cls(
            id=data["id"],
            account_id=data["accountId"],
            title=data["title"],
            content=data.get("content"),
            created_at=parse_datetime(data["createdAt"]),
            delivery_results=[DeliveryResult.from_dict(r) for r in data.get("deliveryResults", [])],
        )
