"""
Channel Registry

Read-only table of adapters by channel type, built once at startup.
"""
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

import httpx

from ..storage.token_storage import TokenStorage
from .base import ChannelAdapter
from .dingtalk import DingTalkAdapter
from .feishu import FeishuAdapter
from .wechat_template import WeChatTemplateAdapter
from .work_wechat import WorkWeChatAdapter

logger = logging.getLogger("pusher.channels.registry")


class ChannelRegistry:
    """Maps channel type -> adapter; immutable after construction"""

    def __init__(self, adapters: Iterable[ChannelAdapter]):
        table: Dict[str, ChannelAdapter] = {}
        for adapter in adapters:
            if adapter.type in table:
                raise ValueError(f"Duplicate adapter for channel type '{adapter.type}'")
            table[adapter.type] = adapter
        self._adapters: Mapping[str, ChannelAdapter] = MappingProxyType(table)
        logger.info(f"Channel registry ready: {', '.join(table) or 'no adapters'}")

    def get(self, channel_type: str) -> Optional[ChannelAdapter]:
        return self._adapters.get(channel_type)

    def supported_types(self) -> List[str]:
        return list(self._adapters)

    def sensitive_fields(self, channel_type: str) -> List[str]:
        adapter = self._adapters.get(channel_type)
        return adapter.sensitive_fields() if adapter else []

    def describe(self) -> List[dict]:
        return [adapter.describe() for adapter in self._adapters.values()]

    def __contains__(self, channel_type: str) -> bool:
        return channel_type in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)


def build_default_registry(client: httpx.AsyncClient, tokens: TokenStorage) -> ChannelRegistry:
    """Registry with every built-in channel type"""
    return ChannelRegistry([
        WeChatTemplateAdapter(client, tokens),
        WorkWeChatAdapter(client, tokens),
        DingTalkAdapter(client),
        FeishuAdapter(client),
    ])
