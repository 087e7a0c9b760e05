"""
Message Storage

Push records plus a per-account index, both append-only.
"""
import logging
from typing import List, Optional

from .base import JSONStorage
from ..models.message import PushRecord

logger = logging.getLogger("pusher.storage.message")

MESSAGE_PREFIX = "message:"
INDEX_PREFIX = "message_index:"


class MessageStorage(JSONStorage):
    """Storage for PushRecord entities"""

    async def create(self, record: PushRecord) -> PushRecord:
        """Persist a record and register it in its account's index"""
        await self.put_json(f"{MESSAGE_PREFIX}{record.id}", record.to_dict())
        await self.kv.put(f"{INDEX_PREFIX}{record.account_id}:{record.id}", b"")
        return record

    async def get_by_id(self, record_id: str) -> Optional[PushRecord]:
        data = await self.get_json(f"{MESSAGE_PREFIX}{record_id}")
        return PushRecord.from_dict(data) if data else None

    async def list_by_account(self, account_id: str) -> List[PushRecord]:
        """All of an account's records in storage order"""
        prefix = f"{INDEX_PREFIX}{account_id}:"
        records = []
        for key in await self.kv.list(prefix):
            record = await self.get_by_id(key[len(prefix):])
            if record:
                records.append(record)
        return records

    async def delete(self, record: PushRecord):
        await self.kv.delete(f"{INDEX_PREFIX}{record.account_id}:{record.id}")
        await self.kv.delete(f"{MESSAGE_PREFIX}{record.id}")
