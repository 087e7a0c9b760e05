"""
Channel Types

Values exchanged between the push engine and channel adapters.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ChannelCapability(str, Enum):
    """How an adapter authenticates against its provider"""
    TOKEN_MANAGED = "token_managed"     # fetch and cache an access token first
    WEBHOOK = "webhook"                 # POST straight to a configured URL


@dataclass(frozen=True)
class ConfigField:
    """One credential field an adapter expects"""
    name: str
    label: str
    required: bool = False
    sensitive: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "label": self.label,
            "required": self.required,
            "sensitive": self.sensitive,
        }


@dataclass
class OutgoingMessage:
    """What an adapter is asked to deliver"""
    id: str
    title: str
    content: Optional[str]
    created_at: datetime

    def as_text(self) -> str:
        """Title, followed by the content after a blank line when present"""
        if self.content:
            return f"{self.title}\n\n{self.content}"
        return self.title


@dataclass
class SendResult:
    """Result of a single delivery attempt"""
    success: bool
    error: Optional[str] = None
    external_id: Optional[str] = None
    error_code: Optional[int] = None
