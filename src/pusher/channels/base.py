"""
Channel Adapter

Uniform contract every channel type satisfies: config schema, credential
validation and send. Sending always goes through delivery.deliver(), which
picks the token-managed or webhook sequence from `capability`.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..storage.token_storage import TokenStorage
from .delivery import check_credentials, deliver
from .types import ChannelCapability, ConfigField, OutgoingMessage, SendResult


class ChannelAdapter(ABC):
    """
    Base for channel adapters.

    Token-managed adapters also provide token_request(), token_cache_key(),
    endpoint() and invalid_token_codes. Webhook adapters provide
    sign_request().
    """

    type: str = ""
    name: str = ""
    capability: ChannelCapability = ChannelCapability.WEBHOOK
    fields: Tuple[ConfigField, ...] = ()

    def __init__(self, client: httpx.AsyncClient, tokens: Optional[TokenStorage] = None):
        self.client = client
        self.tokens = tokens

    def get_config_schema(self) -> List[ConfigField]:
        """Credential fields in display order"""
        return list(self.fields)

    def sensitive_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.sensitive]

    def credential_errors(self, credentials: Dict[str, str]) -> List[str]:
        """Problems with the credentials; empty when acceptable"""
        return [
            f"Missing required field: {f.name}"
            for f in self.fields
            if f.required and not str(credentials.get(f.name) or "").strip()
        ]

    @abstractmethod
    def build_payload(self, message: OutgoingMessage, credentials: Dict[str, str]) -> Dict[str, Any]:
        """Provider-specific request body"""
        ...

    async def validate(self, credentials: Dict[str, str]) -> bool:
        return await check_credentials(self, credentials)

    async def send(self, message: OutgoingMessage, credentials: Dict[str, str]) -> SendResult:
        """One best-effort delivery attempt; never raises"""
        return await deliver(self, message, credentials)

    def describe(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "capability": self.capability.value,
            "fields": [f.to_dict() for f in self.fields],
        }
