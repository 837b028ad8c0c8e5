import os
import sys
import asyncio
import logging
import atexit
from typing import Any, Awaitable, Callable, Dict, TypeVar, cast

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from sqlalchemy.engine import make_url
from dotenv import load_dotenv
from remindbot.config import get_settings

load_dotenv()
logger = logging.getLogger("database")

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

_settings = get_settings()
# Detect pytest reliably during collection and execution
_is_pytest = bool(os.getenv("PYTEST_CURRENT_TEST")) or ("pytest" in sys.modules)

# Tests always use SQLite.
TEST_SQLITE_URL = "sqlite+aiosqlite:///./test.db"
_CURRENT_DB_URL: str | None = None


def _detect_driver(url: str) -> str:
    try:
        return make_url(url).drivername
    except Exception:
        return url.split(":", 1)[0]


# ---------------------------------------------------------------------------
# Engine Setup
# ---------------------------------------------------------------------------

def _make_engine() -> AsyncEngine:
    if _is_pytest:
        url = TEST_SQLITE_URL
    else:
        url = str(_settings.database_url or "").strip()
        if not url:
            raise RuntimeError("DATABASE_URL is required (e.g. postgresql+asyncpg://... or sqlite+aiosqlite://...).")

    driver = _detect_driver(url)
    if driver in ("sqlite", "postgresql"):
        raise RuntimeError(f"DATABASE_URL must use an async driver, got '{driver}'.")

    engine_kwargs: Dict[str, Any] = {
        "echo": False,
        "future": True,
        "pool_pre_ping": True,
    }
    if driver.startswith("postgresql+"):
        engine_kwargs["pool_size"] = 10
        engine_kwargs["max_overflow"] = 5

    # Tests: no pooling, no pre_ping, connections never outlive an event loop
    if _is_pytest:
        engine_kwargs["poolclass"] = NullPool
        engine_kwargs["pool_pre_ping"] = False
        engine_kwargs.pop("pool_size", None)
        engine_kwargs.pop("max_overflow", None)

    global _CURRENT_DB_URL
    _CURRENT_DB_URL = url

    return create_async_engine(url, **engine_kwargs)


try:
    async_engine: AsyncEngine = _make_engine()
except Exception as e:
    logger.critical("Failed to initialize async engine: %s", e)
    raise RuntimeError("Database engine initialization failed") from e

AsyncSessionLocal = async_sessionmaker(bind=async_engine, expire_on_commit=False)
_initialized: bool = False


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------

def get_database_dsn(hide_password: bool = True) -> str:
    """Return the configured DB DSN string."""
    url_str = _CURRENT_DB_URL or ""
    try:
        url = make_url(cast(str, url_str))
        return url.render_as_string(hide_password=hide_password)
    except Exception:
        return url_str


async def write(fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run ``fn`` against a fresh session inside a single transaction.

    The transaction commits when ``fn`` returns and rolls back if it raises.
    """
    async with AsyncSessionLocal() as session:
        async with session.begin():
            return await fn(session)


async def init_db_async():
    """Initialize database tables on startup."""
    from remindbot.models import models

    try:
        global _initialized
        if _is_pytest and _initialized:
            return
        if _is_pytest:
            global async_engine, AsyncSessionLocal
            try:
                await async_engine.dispose()
            except Exception:
                pass
            async_engine = _make_engine()
            AsyncSessionLocal = async_sessionmaker(bind=async_engine, expire_on_commit=False)

        async with async_engine.begin() as conn:
            await conn.run_sync(models.Base.metadata.create_all)
        logger.info("Database initialized successfully.")
        _initialized = True
    except Exception as e:
        logger.critical("Database initialization failed: %s", e)
        raise RuntimeError("Failed to initialize database") from e


async def shutdown_db_async():
    """Dispose the async engine cleanly."""
    try:
        await async_engine.dispose()
        logger.info("Database connection pool closed.")
    except Exception as e:
        logger.error("Error shutting down database engine: %s", e)
        raise


def _dispose_engine_at_exit():
    """Safety cleanup for interpreter shutdown."""
    try:
        loop = asyncio.new_event_loop()
        loop.run_until_complete(async_engine.dispose())
        loop.close()
    except Exception:
        pass  # swallow shutdown noise


atexit.register(_dispose_engine_at_exit)
