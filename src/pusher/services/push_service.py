"""
Push Service

Dispatch engine: fans one push out to the account's channels concurrently
and records the outcome.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from ..channels.registry import ChannelRegistry
from ..channels.types import OutgoingMessage
from ..errors import ErrorCodes, ValidationError
from ..models.channel import Channel
from ..models.message import DeliveryResult, DeliveryStatus, PushRecord
from ..storage.channel_storage import ChannelStorage
from ..utils import generate_id, utcnow
from .history_service import HistoryService

logger = logging.getLogger("pusher.services.push")


@dataclass
class PushRequest:
    """Input of a push"""
    title: str
    content: Optional[str] = None
    channel_id: Optional[str] = None


class PushService:
    """
    Dispatch engine.

    For each push:
    1. Resolves the target channels (one explicit enabled channel, or all
       enabled channels in creation order)
    2. Sends through every target concurrently; each attempt turns its own
       failure into a failed DeliveryResult
    3. Waits for all attempts, keeping results in target order
    4. Persists the PushRecord before returning it
    """

    def __init__(
        self,
        channel_storage: ChannelStorage,
        history_service: HistoryService,
        registry: ChannelRegistry,
    ):
        self.channel_storage = channel_storage
        self.history_service = history_service
        self.registry = registry

    async def push(self, account_id: str, request: PushRequest) -> PushRecord:
        """
        Deliver a push to the account's channels.

        Channel failures are recorded, never raised. Returns the persisted
        record, whose delivery_results may be empty.

        Raises:
            ValidationError: title missing or blank
        """
        title = (request.title or "").strip()
        if not title:
            raise ValidationError("Missing required parameter: title", error_code=ErrorCodes.MISSING_TITLE)

        channels = await self._resolve_targets(account_id, request.channel_id)

        record = PushRecord(
            id=generate_id(),
            account_id=account_id,
            title=title,
            content=request.content or None,
            created_at=utcnow(),
        )
        message = OutgoingMessage(
            id=record.id,
            title=record.title,
            content=record.content,
            created_at=record.created_at,
        )

        # gather() keeps input order, so results follow target order
        record.delivery_results = list(await asyncio.gather(
            *(self._deliver(channel, message) for channel in channels)
        ))

        await self.history_service.append(record)

        succeeded = sum(1 for r in record.delivery_results if r.status == DeliveryStatus.SUCCESS)
        logger.info(
            f"Push {record.id} for account {account_id}: "
            f"{succeeded}/{len(record.delivery_results)} channels succeeded"
        )
        return record

    async def _resolve_targets(self, account_id: str, channel_id: Optional[str]) -> List[Channel]:
        if channel_id:
            channel = await self.channel_storage.get(account_id, channel_id)
            if not channel or not channel.enabled:
                logger.info(f"Channel {channel_id} not found or disabled for account {account_id}")
                return []
            return [channel]
        return await self.channel_storage.list_by_account(account_id, enabled_only=True)

    async def _deliver(self, channel: Channel, message: OutgoingMessage) -> DeliveryResult:
        """One channel attempt; always returns a resolved result"""
        result = DeliveryResult(channel_id=channel.id, channel_type=channel.type)

        adapter = self.registry.get(channel.type)
        if not adapter:
            result.status = DeliveryStatus.FAILED
            result.error = f"Unsupported channel type: {channel.type}"
            logger.warning(f"No adapter for channel {channel.id} of type '{channel.type}'")
            return result

        try:
            outcome = await adapter.send(message, channel.credentials)
            if outcome.success:
                result.status = DeliveryStatus.SUCCESS
                result.external_id = outcome.external_id or message.id
            else:
                result.status = DeliveryStatus.FAILED
                result.error = outcome.error or "Delivery failed"
                result.external_id = outcome.external_id
        except Exception as e:
            logger.error(f"Channel {channel.id} ({channel.type}) failed during send: {e!r}")
            result.status = DeliveryStatus.FAILED
            result.error = str(e) or e.__class__.__name__
            result.external_id = None
        return result
