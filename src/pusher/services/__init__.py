"""
Webhook Pusher Services

Business logic services.
"""
from .engine_service import EngineService
from .auth_service import AuthService
from .channel_service import ChannelService
from .history_service import HistoryService, HistoryPage
from .push_service import PushService, PushRequest

__all__ = [
    'EngineService',
    'AuthService',
    'ChannelService',
    'HistoryService',
    'HistoryPage',
    'PushService',
    'PushRequest',
]
