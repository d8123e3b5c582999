"""DatabaseHelper wiring."""

import pytest
from sqlalchemy import text

from app.core.database import DatabaseHelper


@pytest.mark.asyncio
async def test_helper_defaults_to_quiet_engine(tmp_path):
    helper = DatabaseHelper(url=f"sqlite+aiosqlite:///{tmp_path / 'helper.db'}")
    try:
        assert helper.engine.echo is False

        sessions = helper.session_getter()
        session = await sessions.__anext__()
        assert await session.scalar(text("SELECT 1")) == 1
        await sessions.aclose()
    finally:
        await helper.dispose()
