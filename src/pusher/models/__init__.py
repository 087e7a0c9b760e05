"""
Webhook Pusher Data Models
"""
from .account import Account, RateWindow
from .channel import Channel
from .message import DeliveryResult, DeliveryStatus, PushRecord

__all__ = [
    'Account',
    'RateWindow',
    'Channel',
    'DeliveryResult',
    'DeliveryStatus',
    'PushRecord',
]
