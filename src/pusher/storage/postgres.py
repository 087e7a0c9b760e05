"""
PostgreSQL KV store

KV transport backed by a single kv_store table (see migrations/).
"""
import asyncio
import logging
import os
import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import asyncpg

from .base import BaseKVStore

logger = logging.getLogger("pusher.storage.postgres")


def _like_prefix(prefix: str) -> str:
    """Escape LIKE wildcards so the prefix matches literally"""
    escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped + "%"


class PostgresKVStore(BaseKVStore):
    """KV store with an asyncpg connection pool"""

    def __init__(self, postgres_dsn: str = "postgresql://postgres@localhost/pusher"):
        self.pg_pool: Optional[asyncpg.Pool] = None
        self.pg_dsn = postgres_dsn
        self.process_id = os.getpid()
        self._initialized = False

    async def init(self):
        """Initialize storage - connect to PostgreSQL"""
        if self._initialized:
            return

        start_time = time.time()
        logger.info("Initializing PostgresKVStore...")

        try:
            await self._init_postgres()
            self._initialized = True

            duration_ms = round((time.time() - start_time) * 1000, 2)
            logger.info(f"PostgresKVStore initialized in {duration_ms}ms")
        except Exception as e:
            logger.error(f"Failed to initialize PostgresKVStore: {e}")
            raise

    async def _init_postgres(self):
        """Initialize PostgreSQL connection pool with retries"""
        max_retries = 3
        retry_delay = 1

        current_pid = os.getpid()

        # Handle process fork - need new pool
        if self.pg_pool is not None and self.process_id != current_pid:
            logger.info(f"New process detected (old: {self.process_id}, new: {current_pid}), creating new pool")
            self.pg_pool = None

        self.process_id = current_pid

        for attempt in range(1, max_retries + 1):
            try:
                self.pg_pool = await asyncpg.create_pool(
                    self.pg_dsn,
                    min_size=2,
                    max_size=10,
                    command_timeout=60
                )

                async with self.pg_pool.acquire() as conn:
                    await conn.fetchval("SELECT 1")

                logger.info(f"PostgreSQL connected (attempt {attempt}/{max_retries})")
                return

            except (OSError, asyncpg.PostgresError) as e:
                logger.error(f"PostgreSQL connection failed (attempt {attempt}/{max_retries}): {e}")
                if attempt < max_retries:
                    logger.info(f"Retrying in {retry_delay}s...")
                    await asyncio.sleep(retry_delay)

        raise ConnectionError("Failed to connect to PostgreSQL after all retries")

    async def close(self):
        """Close database connections"""
        if self.pg_pool:
            await self.pg_pool.close()
            self.pg_pool = None
            self._initialized = False
            logger.info("PostgresKVStore closed")

    async def get(self, key: str) -> Optional[bytes]:
        query = """
            SELECT value FROM kv_store
            WHERE key = $1 AND (expires_at IS NULL OR expires_at > now())
        """
        async with self.pg_pool.acquire() as conn:
            return await conn.fetchval(query, key)

    async def put(self, key: str, value: bytes, ttl: Optional[int] = None):
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl) if ttl else None
        query = """
            INSERT INTO kv_store (key, value, expires_at)
            VALUES ($1, $2, $3)
            ON CONFLICT (key) DO UPDATE
            SET value = EXCLUDED.value, expires_at = EXCLUDED.expires_at
        """
        async with self.pg_pool.acquire() as conn:
            await conn.execute(query, key, value, expires_at)

    async def delete(self, key: str):
        async with self.pg_pool.acquire() as conn:
            await conn.execute("DELETE FROM kv_store WHERE key = $1", key)

    async def list(self, prefix: Optional[str] = None) -> List[str]:
        if prefix:
            query = """
                SELECT key FROM kv_store
                WHERE key LIKE $1 ESCAPE '\\'
                  AND (expires_at IS NULL OR expires_at > now())
                ORDER BY seq
            """
            args = (_like_prefix(prefix),)
        else:
            query = """
                SELECT key FROM kv_store
                WHERE expires_at IS NULL OR expires_at > now()
                ORDER BY seq
            """
            args = ()
        async with self.pg_pool.acquire() as conn:
            rows = await conn.fetch(query, *args)
        return [row["key"] for row in rows]
