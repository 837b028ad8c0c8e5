import os
import asyncio
import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

# Ensure .env is loaded, then FORCE SQLite for tests regardless of .env
load_dotenv()
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
# The HTTP tests never log in to Discord
os.environ["DISCORD_TOKEN"] = ""


# Initialize the database schema once per test session to avoid per-test engine churn
@pytest.fixture(scope="session", autouse=True)
def _init_db_once():
    # Ensure a clean SQLite database file for each test session to avoid cross-test pollution
    try:
        db_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "test.db"))
        if os.path.exists(db_path):
            os.remove(db_path)
    except Exception:
        pass

    # Delay import until after environment is configured
    from remindbot import database
    asyncio.run(database.init_db_async())
    yield


@pytest.fixture()
def client():
    from remindbot.main import app
    with TestClient(app) as c:
        yield c
