"""
History Service

Append-only push history with account-scoped, cursor-paginated reads.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.message import PushRecord
from ..storage.message_storage import MessageStorage

logger = logging.getLogger("pusher.services.history")


@dataclass
class HistoryPage:
    """One page of history, newest first"""
    items: List[PushRecord] = field(default_factory=list)
    has_more: bool = False
    cursor: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "messages": [r.to_dict() for r in self.items],
            "hasMore": self.has_more,
        }
        if self.cursor is not None:
            result["cursor"] = self.cursor
        return result


class HistoryService:
    """Reads and writes PushRecords"""

    def __init__(self, message_storage: MessageStorage, default_limit: int = 20, max_limit: int = 100):
        self.message_storage = message_storage
        self.default_limit = default_limit
        self.max_limit = max_limit

    async def append(self, record: PushRecord) -> PushRecord:
        """
        Persist a finished push.

        Raises:
            ValueError: a delivery result is still pending
        """
        if not record.is_resolved:
            raise ValueError(f"Push {record.id} still has pending delivery results")
        return await self.message_storage.create(record)

    async def get(self, account_id: str, record_id: str) -> Optional[PushRecord]:
        """A record of this account, or None (also for other accounts' records)"""
        record = await self.message_storage.get_by_id(record_id)
        if not record or record.account_id != account_id:
            return None
        return record

    async def list(
        self, account_id: str, limit: Optional[int] = None, cursor: Optional[str] = None
    ) -> HistoryPage:
        """
        Page through an account's history, newest first.

        Equal timestamps keep storage order. The page resumes right after
        `cursor`; an unknown cursor starts from the newest record.
        """
        limit = self._clamp(limit)

        records = [
            r for r in await self.message_storage.list_by_account(account_id)
            if r.account_id == account_id
        ]
        # sorted() is stable, so ties stay in storage order
        records = sorted(records, key=lambda r: r.created_at, reverse=True)

        start = 0
        if cursor:
            for index, record in enumerate(records):
                if record.id == cursor:
                    start = index + 1
                    break

        page = records[start:start + limit]
        has_more = start + limit < len(records)
        return HistoryPage(
            items=page,
            has_more=has_more,
            cursor=page[-1].id if has_more and page else None,
        )

    async def delete(self, account_id: str, record_id: str) -> bool:
        """Administrative removal of one record"""
        record = await self.get(account_id, record_id)
        if not record:
            return False
        await self.message_storage.delete(record)
        logger.info(f"Push record deleted: {record_id}")
        return True

    def _clamp(self, limit: Optional[int]) -> int:
        if not limit or limit < 1:
            return self.default_limit
        return min(limit, self.max_limit)
