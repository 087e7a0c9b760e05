"""
Token Storage

Provider access tokens cached in the KV store with a TTL.
"""
import logging
import time
from typing import Optional

from .base import JSONStorage

logger = logging.getLogger("pusher.storage.token")

TOKEN_PREFIX = "token:"

# Tokens are dropped this many seconds before the provider says they expire
EXPIRY_MARGIN_SECONDS = 300


class TokenStorage(JSONStorage):
    """Access-token cache shared by all token-managed adapters"""

    async def get_token(self, cache_key: str) -> Optional[str]:
        data = await self.get_json(f"{TOKEN_PREFIX}{cache_key}")
        if not data or data.get("expiresAt", 0) <= time.time():
            return None
        return data.get("accessToken")

    async def put_token(self, cache_key: str, access_token: str, expires_in: int):
        lifetime = max(int(expires_in) - EXPIRY_MARGIN_SECONDS, 1)
        await self.put_json(
            f"{TOKEN_PREFIX}{cache_key}",
            {"accessToken": access_token, "expiresAt": time.time() + lifetime},
            ttl=lifetime,
        )

    async def invalidate(self, cache_key: str):
        await self.kv.delete(f"{TOKEN_PREFIX}{cache_key}")
