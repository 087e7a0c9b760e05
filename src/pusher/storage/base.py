"""
Base Storage

Key-value transport contract and the JSON record storage built on it.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

logger = logging.getLogger("pusher.storage")


class BaseKVStore(ABC):
    """
    Key-value transport over opaque byte values.

    list() returns keys in insertion order; overwriting a key keeps its
    position. Distinct keys may be read and written concurrently.
    """

    async def init(self):
        """Open connections (no-op by default)"""

    async def close(self):
        """Release connections (no-op by default)"""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Return the value or None if absent or expired"""
        ...

    @abstractmethod
    async def put(self, key: str, value: bytes, ttl: Optional[int] = None):
        """Store a value; ttl is in seconds"""
        ...

    @abstractmethod
    async def delete(self, key: str):
        """Remove a key (absent keys are ignored)"""
        ...

    @abstractmethod
    async def list(self, prefix: Optional[str] = None) -> List[str]:
        """List live keys, optionally restricted to a prefix"""
        ...


class JSONStorage:
    """Base class for entity storages that keep JSON documents in a KV store"""

    def __init__(self, kv: BaseKVStore):
        self.kv = kv

    async def get_json(self, key: str) -> Optional[Any]:
        raw = await self.kv.get(key)
        if raw is None:
            return None
        return json.loads(raw.decode("utf-8"))

    async def put_json(self, key: str, value: Any, ttl: Optional[int] = None):
        await self.kv.put(key, json.dumps(value, ensure_ascii=False).encode("utf-8"), ttl)

    async def get_text(self, key: str) -> Optional[str]:
        raw = await self.kv.get(key)
        return raw.decode("utf-8") if raw is not None else None

    async def put_text(self, key: str, value: str, ttl: Optional[int] = None):
        await self.kv.put(key, value.encode("utf-8"), ttl)
