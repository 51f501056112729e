"""Shared fixtures: a fresh SQLite database per test, plus an HTTP client bound to it."""

from datetime import date

import httpx
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasktrack.models.database import Base, create_engine, get_session

# All models must be imported so Base.metadata knows about them
from tasktrack.models.tag import Tag, TodoTag  # noqa: F401
from tasktrack.models.todo import Subtask, Todo  # noqa: F401
from tasktrack.services.subtask_service import create_subtask
from tasktrack.services.tag_service import add_tag_to_todo, create_tag
from tasktrack.services.todo_service import create_todo, update_todo
from tasktrack.web.app import create_app


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(engine):
    """httpx client talking to the app in-process; each request gets its own session."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _get_session():
        async with session_factory() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_session] = _get_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def sample_todos(db_session: AsyncSession):
    """Four todos with mixed status, priority, due dates, tags and subtasks."""
    groceries = await create_todo(db_session, "Buy groceries", due_date=date(2026, 3, 1), priority="high")
    report = await create_todo(db_session, "Write report", due_date=date(2026, 3, 20), priority="low")
    call = await create_todo(db_session, "Call plumber", priority="medium")
    taxes = await create_todo(db_session, "File taxes", due_date=date(2026, 2, 1), priority="high")
    await update_todo(db_session, taxes.id, completed=True)

    home = await create_tag(db_session, "home")
    urgent = await create_tag(db_session, "urgent", "#ef4444")
    await add_tag_to_todo(db_session, groceries.id, home.id)
    await add_tag_to_todo(db_session, groceries.id, urgent.id)
    await add_tag_to_todo(db_session, call.id, home.id)
    await add_tag_to_todo(db_session, taxes.id, urgent.id)

    await create_subtask(db_session, groceries.id, "Milk")
    await create_subtask(db_session, groceries.id, "Eggs")

    return {
        "groceries": groceries,
        "report": report,
        "call": call,
        "taxes": taxes,
        "home": home,
        "urgent": urgent,
    }
