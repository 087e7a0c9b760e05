"""
Channel Storage

Channels keyed by account, listed in creation order.
"""
import logging
from typing import List, Optional

from .base import JSONStorage
from ..models.channel import Channel

logger = logging.getLogger("pusher.storage.channel")

CHANNEL_PREFIX = "channel:"


def _key(account_id: str, channel_id: str) -> str:
    return f"{CHANNEL_PREFIX}{account_id}:{channel_id}"


class ChannelStorage(JSONStorage):
    """Storage for Channel entities"""

    async def save(self, channel: Channel) -> Channel:
        await self.put_json(_key(channel.account_id, channel.id), channel.to_dict())
        return channel

    async def get(self, account_id: str, channel_id: str) -> Optional[Channel]:
        data = await self.get_json(_key(account_id, channel_id))
        return Channel.from_dict(data) if data else None

    async def list_by_account(self, account_id: str, enabled_only: bool = False) -> List[Channel]:
        """List an account's channels in creation order"""
        keys = await self.kv.list(f"{CHANNEL_PREFIX}{account_id}:")
        channels = []
        for key in keys:
            data = await self.get_json(key)
            if not data:
                continue
            channel = Channel.from_dict(data)
            if enabled_only and not channel.enabled:
                continue
            channels.append(channel)
        return channels

    async def delete(self, account_id: str, channel_id: str) -> bool:
        key = _key(account_id, channel_id)
        if await self.kv.get(key) is None:
            return False
        await self.kv.delete(key)
        return True
