"""
Webhook Pusher Channels

Delivery adapters: WeChat template, Work WeChat, DingTalk, Feishu.
"""
from .types import ChannelCapability, ConfigField, OutgoingMessage, SendResult
from .base import ChannelAdapter
from .delivery import deliver, check_credentials
from .wechat_template import WeChatTemplateAdapter
from .work_wechat import WorkWeChatAdapter
from .dingtalk import DingTalkAdapter
from .feishu import FeishuAdapter
from .registry import ChannelRegistry, build_default_registry

__all__ = [
    'ChannelCapability',
    'ConfigField',
    'OutgoingMessage',
    'SendResult',
    'ChannelAdapter',
    'deliver',
    'check_credentials',
    'WeChatTemplateAdapter',
    'WorkWeChatAdapter',
    'DingTalkAdapter',
    'FeishuAdapter',
    'ChannelRegistry',
    'build_default_registry',
]
