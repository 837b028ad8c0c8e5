# main.py
import asyncio
import logging
import discord
from fastapi import FastAPI
from contextlib import asynccontextmanager
from remindbot import database
from remindbot.config import get_settings
from remindbot.routes import router

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[
        logging.StreamHandler(),
    ],
)
logging.getLogger("discord").setLevel(logging.WARNING)
logger = logging.getLogger("main")
logger.info("Application starting...")


def create_discord_client() -> discord.Client:
    return discord.Client(intents=discord.Intents.default())


async def _start_dispatch_when_ready(client: discord.Client, dispatcher) -> None:
    """Channel lookups only work from the gateway cache, so wait for READY first."""
    from remindbot.features.reminders import start_reminder_scheduler

    await client.wait_until_ready()
    logger.info("Discord client ready as %s, starting reminder scheduler...", client.user)
    try:
        await start_reminder_scheduler(dispatcher)
    except Exception as e:
        logger.error("Failed to start reminder scheduler: %s", e)


async def _run_discord_client(client: discord.Client, token: str, dispatch_start: asyncio.Task) -> None:
    """Keep the gateway connection alive; a login or connection failure stops dispatch startup."""
    try:
        await client.start(token)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.critical("Discord client failed, reminders will not be delivered: %s", e)
        dispatch_start.cancel()


# ---------------------------------------------------------------------------
# App lifespan (startup/shutdown)
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown tasks."""
    settings = get_settings()

    logger.info("Startup: initializing database...")
    try:
        await database.init_db_async()
        dsn = database.get_database_dsn()
        logger.info("Connected to database: %s", dsn)
    except Exception as e:
        logger.critical("Database initialization failed: %s", e)
        raise  # fail fast, the dispatcher is useless without its store

    client = None
    background: list[asyncio.Task] = []
    app.state.dispatcher = None
    app.state.background_tasks = background
    if settings.discord_token:
        from remindbot.features.reminders import ReminderDispatcher

        client = create_discord_client()
        dispatcher = ReminderDispatcher(
            client,
            logger=logging.getLogger("reminder_dispatcher"),
            interval_seconds=settings.reminder_dispatch_interval_seconds,
        )
        app.state.dispatcher = dispatcher
        logger.info("Startup: logging in to Discord...")
        dispatch_start = asyncio.create_task(_start_dispatch_when_ready(client, dispatcher), name="dispatch-start")
        background.append(
            asyncio.create_task(
                _run_discord_client(client, settings.discord_token, dispatch_start), name="discord-client"
            )
        )
        background.append(dispatch_start)
    else:
        logger.info("Reminder dispatcher disabled (DISCORD_TOKEN not set)")

    yield  # app runs during this block

    if app.state.dispatcher is not None:
        logger.info("Shutdown: stopping reminder scheduler...")
        try:
            from remindbot.features.reminders import stop_reminder_scheduler, is_scheduler_running
            if is_scheduler_running():
                await stop_reminder_scheduler()
            await app.state.dispatcher.drain()
            logger.info("Reminder scheduler stopped")
        except Exception as e:
            logger.error("Error stopping reminder scheduler: %s", e)

    if client is not None:
        logger.info("Shutdown: closing Discord client...")
        try:
            await client.close()
        except Exception as e:
            logger.error("Error closing Discord client: %s", e)
    for task in background:
        task.cancel()
    await asyncio.gather(*background, return_exceptions=True)

    logger.info("Shutdown: closing database connection pool...")
    try:
        await database.shutdown_db_async()
        logger.info("Cleanup complete.")
    except Exception as e:
        logger.error("Error during shutdown cleanup: %s", e)


# ---------------------------------------------------------------------------
# FastAPI Application
# ---------------------------------------------------------------------------
app = FastAPI(
    title="remindbot - Discord reminder dispatcher",
    version="1.0.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Base Routes
# ---------------------------------------------------------------------------

@app.get("/", tags=["Health"])
async def root():
    """Basic health check to verify the service is running."""
    return {"status": "ok", "message": "remindbot is running."}


app.include_router(router)
