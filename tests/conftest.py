# tests/conftest.py
#
# Module-level sys.modules patch runs during collection, before any test file
# imports imposterbot modules, so config.py's FileNotFoundError is never triggered.
import pathlib
import sys
import tempfile
from contextlib import asynccontextmanager
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# ── Patch settings before any imposterbot import ─────────────────────────────
_mock_settings = MagicMock()
_mock_settings.DB_USER = "test"
_mock_settings.DB_PASSWORD = "test"
_mock_settings.DB_HOST = "localhost"
_mock_settings.DB_PORT = 5432
_mock_settings.DB_NAME = "test"
_mock_settings.DATA_DIRECTORY = pathlib.Path(tempfile.gettempdir()) / "imposterbot-tests"
_mock_settings.MEDIA_DOWNLOAD_TIMEOUT_SECONDS = 5.0
_mock_settings.LOG_LEVEL = "DEBUG"
_mock_settings.SENTRY_DSN = None
_mock_settings.BOT_LOGS_WEBHOOK_URL = None

_config_mod = MagicMock()
_config_mod.settings = _mock_settings
sys.modules["imposterbot.core.config"] = _config_mod

# ── Safe to import imposterbot after the patch ───────────────────────────────
from imposterbot.core.db import Base  # noqa: E402
import imposterbot.core.models  # noqa: E402,F401
from imposterbot.core.notifications.renderer import RenderContext  # noqa: E402
from imposterbot.core.notifications.types import EventType  # noqa: E402

GUILD_ID = 123456789012345678


@pytest.fixture
def mock_settings():
    return _mock_settings


@pytest.fixture
def guild_id():
    return GUILD_ID


@pytest.fixture
def content_root(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def guild_dir(content_root):
    path = content_root / "user_content" / str(GUILD_ID)
    path.mkdir(parents=True)
    return path


@pytest.fixture
def join_context():
    return RenderContext(
        event_type=EventType.JOIN,
        name="amogus",
        mention="<@42>",
        avatar_url="https://cdn.example.com/avatars/42.png",
        member_count=120,
        online_member_count=37,
    )


@pytest.fixture
def leave_context():
    return RenderContext(
        event_type=EventType.LEAVE,
        name="amogus",
        mention="<@42>",
        avatar_url="https://cdn.example.com/avatars/42.png",
        member_count=119,
        online_member_count=None,
    )


# ── SQLite in-memory DB fixtures (integration tests) ─────────────────────────

@pytest.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def get_session_fn(db_engine):
    """Returns a get_session replacement that uses the test SQLite engine."""
    factory = async_sessionmaker(db_engine, expire_on_commit=False, class_=AsyncSession)

    @asynccontextmanager
    async def _get_session():
        async with factory() as session:
            yield session

    return _get_session
