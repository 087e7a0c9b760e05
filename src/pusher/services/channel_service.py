"""
Channel Service

Channel management for the account UI. All credential changes pass the
adapter's validate() before they are stored.
"""
import logging
from typing import Dict, List, Optional

from ..channels.registry import ChannelRegistry
from ..errors import ErrorCodes, NotFoundError, UnsupportedChannelError, ValidationError
from ..models.channel import Channel
from ..storage.channel_storage import ChannelStorage
from ..utils import mask_credential, mask_credentials, utcnow

logger = logging.getLogger("pusher.services.channel")


class ChannelService:
    """Create, read, update and delete an account's channels"""

    def __init__(self, channel_storage: ChannelStorage, registry: ChannelRegistry):
        self.channel_storage = channel_storage
        self.registry = registry

    async def list_channels(self, account_id: str, enabled_only: bool = False) -> List[Channel]:
        return await self.channel_storage.list_by_account(account_id, enabled_only)

    async def get_channel(self, account_id: str, channel_id: str) -> Channel:
        channel = await self.channel_storage.get(account_id, channel_id)
        if not channel:
            raise NotFoundError("Channel not found", error_code=ErrorCodes.CHANNEL_NOT_FOUND)
        return channel

    async def create_channel(
        self,
        account_id: str,
        channel_type: str,
        name: str,
        credentials: Dict[str, str],
        enabled: bool = True,
    ) -> Channel:
        """
        Create a channel after validating its credentials.

        Raises:
            UnsupportedChannelError: no adapter for channel_type
            ValidationError: name empty or credentials rejected
        """
        adapter = self.registry.get(channel_type)
        if not adapter:
            raise UnsupportedChannelError(channel_type)

        name = (name or "").strip()
        if not name:
            raise ValidationError("Channel name is required")

        credentials = self._normalize(credentials)
        if not await adapter.validate(credentials):
            raise ValidationError("Invalid channel credentials", error_code=ErrorCodes.INVALID_CHANNEL_CONFIG)

        channel = Channel(
            account_id=account_id,
            type=channel_type,
            name=name,
            enabled=enabled,
            credentials=credentials,
        )
        await self.channel_storage.save(channel)
        logger.info(f"Channel created: {channel.id} ({channel_type}) for account {account_id}")
        return channel

    async def update_channel(
        self,
        account_id: str,
        channel_id: str,
        name: Optional[str] = None,
        enabled: Optional[bool] = None,
        credentials: Optional[Dict[str, str]] = None,
    ) -> Channel:
        """
        Update a channel.

        Masked values echoed back for sensitive fields keep the stored
        secret. New credentials are validated before anything is written.
        """
        channel = await self.get_channel(account_id, channel_id)

        if credentials is not None:
            adapter = self.registry.get(channel.type)
            if not adapter:
                raise UnsupportedChannelError(channel.type)
            merged = self._unmask(channel, self._normalize(credentials))
            if not await adapter.validate(merged):
                raise ValidationError("Invalid channel credentials", error_code=ErrorCodes.INVALID_CHANNEL_CONFIG)
            channel.credentials = merged

        if name is not None:
            if not name.strip():
                raise ValidationError("Channel name is required")
            channel.name = name.strip()

        if enabled is not None:
            channel.enabled = enabled

        channel.updated_at = utcnow()
        await self.channel_storage.save(channel)
        logger.info(f"Channel updated: {channel.id}")
        return channel

    async def delete_channel(self, account_id: str, channel_id: str):
        if not await self.channel_storage.delete(account_id, channel_id):
            raise NotFoundError("Channel not found", error_code=ErrorCodes.CHANNEL_NOT_FOUND)
        logger.info(f"Channel deleted: {channel_id}")

    def mask(self, channel: Channel) -> dict:
        """Channel as a dict with sensitive credentials masked"""
        data = channel.to_dict()
        data["credentials"] = mask_credentials(
            channel.credentials, self.registry.sensitive_fields(channel.type)
        )
        return data

    def _unmask(self, channel: Channel, credentials: Dict[str, str]) -> Dict[str, str]:
        merged = dict(credentials)
        for field_name in self.registry.sensitive_fields(channel.type):
            stored = channel.credentials.get(field_name)
            if stored and merged.get(field_name) == mask_credential(stored):
                merged[field_name] = stored
        return merged

    @staticmethod
    def _normalize(credentials: Dict[str, str]) -> Dict[str, str]:
        if not isinstance(credentials, dict):
            raise ValidationError("credentials must be an object")
        return {str(k): "" if v is None else str(v).strip() for k, v in credentials.items()}
