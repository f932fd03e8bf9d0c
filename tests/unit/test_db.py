# tests/unit/test_db.py
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from imposterbot.core.db import get_session
from imposterbot.core.notifications.errors import StoreFailure
from imposterbot.core.notifications.store import NotificationStore
from imposterbot.core.notifications.types import EventType


def _session():
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.close = AsyncMock()
    return db


async def test_get_session_commits_and_closes():
    db = _session()
    with patch("imposterbot.core.db.SessionLocal", MagicMock(return_value=db)):
        async with get_session() as session:
            assert session is db

    db.commit.assert_awaited_once()
    db.rollback.assert_not_awaited()
    db.close.assert_awaited_once()


async def test_store_error_through_get_session_rolls_back():
    db = _session()
    db.get = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))
    with patch("imposterbot.core.db.SessionLocal", MagicMock(return_value=db)):
        with pytest.raises(StoreFailure):
            await NotificationStore(get_session).find(1, EventType.JOIN)

    db.rollback.assert_awaited_once()
    db.commit.assert_not_awaited()
    db.close.assert_awaited_once()
