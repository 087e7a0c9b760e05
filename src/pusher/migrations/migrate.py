"""
Database Migration Runner

Applies the SQL files in this directory in name order.

    python -m src.pusher.migrations.migrate
"""
import asyncio
import logging
import sys
from pathlib import Path

import asyncpg

from ..config import Config

logger = logging.getLogger("pusher.migrations")


async def run_migrations(dsn: str) -> int:
    """Run all SQL migrations in order; returns the number of failures"""
    migrations_dir = Path(__file__).parent
    failures = 0

    logger.info("Connecting to database...")
    conn = await asyncpg.connect(dsn)
    try:
        for sql_file in sorted(migrations_dir.glob("*.sql")):
            logger.info(f"Running migration: {sql_file.name}")
            sql = sql_file.read_text(encoding="utf-8")
            try:
                await conn.execute(sql)
                logger.info(f"  {sql_file.name} completed")
            except asyncpg.PostgresError as e:
                failures += 1
                logger.error(f"  Error in {sql_file.name}: {e}")
                # Continue with other migrations
    finally:
        await conn.close()

    logger.info("Migrations complete")
    return failures


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    try:
        failures = asyncio.run(run_migrations(Config.get_postgres_dsn()))
    except (OSError, asyncpg.PostgresError) as e:
        logger.error(f"Connection failed: {e}")
        sys.exit(1)
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
