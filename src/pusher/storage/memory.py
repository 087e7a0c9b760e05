"""
In-memory KV store.

Process-local; used for tests and single-instance deployments
(KV_BACKEND=memory).
"""
import time
from typing import Dict, List, Optional, Tuple

from .base import BaseKVStore


class MemoryKVStore(BaseKVStore):
    """Dict-backed KV store with lazy TTL expiry"""

    def __init__(self):
        # key -> (value, expires_at or None); dict keeps insertion order
        self._data: Dict[str, Tuple[bytes, Optional[float]]] = {}

    def _alive(self, key: str) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return False
        expires_at = entry[1]
        if expires_at is not None and expires_at <= time.time():
            del self._data[key]
            return False
        return True

    async def get(self, key: str) -> Optional[bytes]:
        if not self._alive(key):
            return None
        return self._data[key][0]

    async def put(self, key: str, value: bytes, ttl: Optional[int] = None):
        expires_at = time.time() + ttl if ttl else None
        self._data[key] = (bytes(value), expires_at)

    async def delete(self, key: str):
        self._data.pop(key, None)

    async def list(self, prefix: Optional[str] = None) -> List[str]:
        keys = [k for k in list(self._data) if prefix is None or k.startswith(prefix)]
        return [k for k in keys if self._alive(k)]
