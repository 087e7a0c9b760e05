"""
Engine Service

Main composite service that owns the KV store, storages, the channel
registry and business services. Singleton - one instance per process.
"""
import logging
from typing import Optional

import httpx

from ..channels.registry import ChannelRegistry, build_default_registry
from ..config import Config
from ..storage.account_storage import AccountStorage
from ..storage.base import BaseKVStore
from ..storage.channel_storage import ChannelStorage
from ..storage.memory import MemoryKVStore
from ..storage.message_storage import MessageStorage
from ..storage.postgres import PostgresKVStore
from ..storage.token_storage import TokenStorage
from .auth_service import AuthService
from .channel_service import ChannelService
from .history_service import HistoryService
from .push_service import PushService

logger = logging.getLogger("pusher.services.engine")

# Singleton instance
_engine_service: Optional["EngineService"] = None


def create_kv_store() -> BaseKVStore:
    """KV transport selected by Config.KV_BACKEND"""
    if Config.KV_BACKEND == "postgres":
        return PostgresKVStore(Config.get_postgres_dsn())
    if Config.KV_BACKEND != "memory":
        raise ValueError(f"Unknown KV_BACKEND '{Config.KV_BACKEND}' (expected 'memory' or 'postgres')")
    return MemoryKVStore()


class EngineService:
    """
    Composite engine service.

    Manages:
    - The KV store and the storages built on it
    - The shared HTTP client and the channel adapter registry
    - Business services
    - Graceful shutdown
    """

    def __init__(
        self,
        kv: Optional[BaseKVStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        registry: Optional[ChannelRegistry] = None,
    ):
        """Wire storages and services; collaborators may be injected"""
        self.kv = kv or create_kv_store()
        self.http_client = http_client or httpx.AsyncClient(timeout=Config.HTTP_TIMEOUT_SECONDS)

        # Initialize storages
        self.account_storage = AccountStorage(self.kv)
        self.channel_storage = ChannelStorage(self.kv)
        self.message_storage = MessageStorage(self.kv)
        self.token_storage = TokenStorage(self.kv)

        # Adapter table is fixed from here on
        self.registry = registry or build_default_registry(self.http_client, self.token_storage)

        # Initialize services (after storages)
        self.auth_service = AuthService(
            self.account_storage,
            window_seconds=Config.RATE_LIMIT_WINDOW_SECONDS,
        )
        self.channel_service = ChannelService(self.channel_storage, self.registry)
        self.history_service = HistoryService(
            self.message_storage,
            default_limit=Config.HISTORY_DEFAULT_LIMIT,
            max_limit=Config.HISTORY_MAX_LIMIT,
        )
        self.push_service = PushService(
            channel_storage=self.channel_storage,
            history_service=self.history_service,
            registry=self.registry,
        )

        self._initialized = False
        logger.info("EngineService created")

    async def initialize(self):
        """Open the KV store"""
        if self._initialized:
            logger.info("EngineService already initialized")
            return

        logger.info("Initializing EngineService...")
        await self.kv.init()

        self._initialized = True
        logger.info("EngineService initialized successfully")

    async def close(self):
        """Close all connections"""
        logger.info("Closing EngineService...")

        await self.kv.close()
        if not self.http_client.is_closed:
            await self.http_client.aclose()

        self._initialized = False
        logger.info("EngineService closed")

    @property
    def is_initialized(self) -> bool:
        """Check if service is initialized"""
        return self._initialized


def get_engine_service() -> EngineService:
    """Get or create engine service singleton"""
    global _engine_service
    if _engine_service is None:
        _engine_service = EngineService()
    return _engine_service


def set_engine_service(engine: Optional[EngineService]):
    """Replace the singleton (tests and embedding applications)"""
    global _engine_service
    _engine_service = engine


async def init_engine_service() -> EngineService:
    """Initialize and return engine service"""
    service = get_engine_service()
    await service.initialize()
    return service
