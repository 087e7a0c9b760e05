"""
Webhook Pusher Storage Layer

KV transports and the entity storages built on them.
"""
from .base import BaseKVStore, JSONStorage
from .memory import MemoryKVStore
from .postgres import PostgresKVStore
from .account_storage import AccountStorage
from .channel_storage import ChannelStorage
from .message_storage import MessageStorage
from .token_storage import TokenStorage

__all__ = [
    'BaseKVStore',
    'JSONStorage',
    'MemoryKVStore',
    'PostgresKVStore',
    'AccountStorage',
    'ChannelStorage',
    'MessageStorage',
    'TokenStorage',
]
