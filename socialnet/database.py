"""Connection pool and schema migrations for the Postgres credential store."""

from pathlib import Path
from typing import Optional

import asyncpg
import structlog

from socialnet.config import get_settings

logger = structlog.get_logger(__name__)

# Process-wide pool, created in the app lifespan
_pool: Optional[asyncpg.Pool] = None

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"

MIGRATIONS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    name TEXT PRIMARY KEY,
    applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


async def get_pool() -> asyncpg.Pool:
    """Return the shared pool.

    Raises:
        RuntimeError: If init_database() has not run
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_database() first.")
    return _pool


async def init_database() -> asyncpg.Pool:
    """Create the shared pool from settings. Calling it twice is harmless."""
    global _pool

    if _pool is not None:
        return _pool

    settings = get_settings()

    try:
        _pool = await asyncpg.create_pool(
            settings.postgres_url,
            min_size=settings.postgres_pool_min_size,
            max_size=settings.postgres_pool_max_size,
            command_timeout=settings.postgres_command_timeout,
        )
    except (OSError, asyncpg.PostgresError) as e:
        logger.error("database_pool_creation_failed", error=str(e))
        raise

    logger.info(
        "database_pool_created",
        min_size=settings.postgres_pool_min_size,
        max_size=settings.postgres_pool_max_size,
    )
    return _pool


async def close_database() -> None:
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("database_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply pending ``*.sql`` files in filename order.

    Each file runs in its own transaction together with its row in
    ``schema_migrations``, so a failed file leaves no trace and is retried
    on the next start.

    Returns:
        Names of the files applied by this call
    """
    if not migrations_dir.exists():
        logger.warning("migrations_directory_not_found", path=str(migrations_dir))
        return []

    migration_files = sorted(migrations_dir.glob("*.sql"))
    applied: list[str] = []

    pool = await get_pool()

    async with pool.acquire() as conn:
        await conn.execute(MIGRATIONS_TABLE_SQL)
        done = {row["name"] for row in await conn.fetch("SELECT name FROM schema_migrations")}

        for migration_file in migration_files:
            if migration_file.name in done:
                continue

            try:
                async with conn.transaction():
                    await conn.execute(migration_file.read_text())
                    await conn.execute(
                        "INSERT INTO schema_migrations (name) VALUES ($1)",
                        migration_file.name,
                    )
            except asyncpg.PostgresError as e:
                logger.error("migration_failed", file=migration_file.name, error=str(e))
                raise

            logger.info("migration_applied", file=migration_file.name)
            applied.append(migration_file.name)

    if not applied:
        logger.info("migrations_up_to_date", known=len(done))
    return applied


async def health_check() -> bool:
    """True when a pooled connection answers ``SELECT 1``."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except (RuntimeError, OSError, asyncpg.PostgresError) as e:
        logger.error("database_health_check_failed", error=str(e))
        return False
