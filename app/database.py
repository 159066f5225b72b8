"""
Database connection and session management
Using SQLModel with an async driver (asyncpg for PostgreSQL, aiosqlite locally)
"""
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from typing import AsyncGenerator, Optional
import json
import ssl
import os
import logging
from app.config import DATABASE_URL, DB_SSL_CERT_PATH, DEBUG, MODE

logger = logging.getLogger(__name__)

# Convert postgresql:// to postgresql+asyncpg:// for async operations
async_database_url = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")
is_sqlite = async_database_url.startswith("sqlite")

# SSL configuration for asyncpg
# asyncpg accepts: ssl.SSLContext, True, False, 'require', or a dict
ssl_config: Optional[ssl.SSLContext] = None

if DB_SSL_CERT_PATH and not is_sqlite:
    try:
        if os.path.exists(DB_SSL_CERT_PATH) and os.path.getsize(DB_SSL_CERT_PATH) > 0:
            logger.info(f"Loading SSL certificate from: {DB_SSL_CERT_PATH}")
            ssl_config = ssl.create_default_context(cafile=DB_SSL_CERT_PATH)
            # Managed databases are reached through a pooler hostname
            ssl_config.check_hostname = False
            ssl_config.verify_mode = ssl.CERT_REQUIRED
        else:
            logger.warning(f"SSL certificate file missing or empty: {DB_SSL_CERT_PATH}")
    except (OSError, ssl.SSLError) as e:
        logger.error(f"Failed to create SSL context: {e}", exc_info=True)
        ssl_config = None

if is_sqlite:
    engine_kwargs = {
        "connect_args": {"check_same_thread": False},
        # Keep non-ASCII tags searchable in the stored JSON text
        "json_serializer": lambda obj: json.dumps(obj, ensure_ascii=False),
    }
else:
    connect_args = {
        "command_timeout": 30,
        # pgbouncer (transaction pooling) does not support prepared statements
        "statement_cache_size": 0,
        "server_settings": {
            "application_name": "content_api"
        }
    }
    if ssl_config:
        connect_args["ssl"] = ssl_config
        logger.info("SSL enabled for database connections")
    else:
        logger.warning("SSL not configured - database connections will be unencrypted")

    engine_kwargs = {
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_timeout": 30,
        "pool_size": 10,
        "max_overflow": 20,
        "connect_args": connect_args,
    }

async_engine = create_async_engine(
    async_database_url,
    echo=DEBUG,
    future=True,
    **engine_kwargs,
)

logger.info(f"Database engine created (mode: {MODE}, SSL: {'enabled' if ssl_config else 'disabled'})")
logger.info(f"Database URL: {async_database_url.split('@')[0].split('://')[0]}://***")

# Create async session factory
AsyncSessionLocal = sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get async database session
    Usage: async def endpoint(session: AsyncSession = Depends(get_async_session))
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """
    Initialize database - create all tables
    Call this on application startup
    """
    async with async_engine.begin() as conn:
        # Import all models here so SQLModel can create tables
        from app.apps.blog.models import BlogPost  # noqa: F401

        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ensured")


async def close_db():
    """
    Close database connections
    Call this on application shutdown
    """
    await async_engine.dispose()
    logger.info("Database connections closed")
