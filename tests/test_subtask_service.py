"""Tests for subtask_service: scoping to the parent todo, partial updates."""

import pytest

from tasktrack.errors import ValidationError
from tasktrack.services.subtask_service import (
    create_subtask,
    delete_subtask,
    list_subtasks,
    update_subtask,
)
from tasktrack.services.todo_service import create_todo


@pytest.mark.asyncio
async def test_create_and_list_in_creation_order(db_session):
    todo = await create_todo(db_session, "Pack for trip")
    await create_subtask(db_session, todo.id, "  Passport ")
    await create_subtask(db_session, todo.id, "Charger")

    subtasks = await list_subtasks(db_session, todo.id)
    assert [s.title for s in subtasks] == ["Passport", "Charger"]
    assert all(s.completed is False for s in subtasks)


@pytest.mark.asyncio
async def test_list_for_missing_todo(db_session):
    assert await list_subtasks(db_session, 999) is None


@pytest.mark.asyncio
async def test_list_for_todo_without_subtasks(db_session):
    todo = await create_todo(db_session, "Empty")
    assert await list_subtasks(db_session, todo.id) == []


@pytest.mark.asyncio
async def test_create_for_missing_todo(db_session):
    assert await create_subtask(db_session, 999, "Orphan") is None


@pytest.mark.asyncio
async def test_create_rejects_blank_title(db_session):
    todo = await create_todo(db_session, "Pack for trip")
    with pytest.raises(ValidationError):
        await create_subtask(db_session, todo.id, "  ")


@pytest.mark.asyncio
async def test_update_is_partial(db_session):
    todo = await create_todo(db_session, "Pack for trip")
    subtask = await create_subtask(db_session, todo.id, "Passport")

    updated = await update_subtask(db_session, todo.id, subtask.id, completed=True)
    assert updated.completed is True
    assert updated.title == "Passport"

    renamed = await update_subtask(db_session, todo.id, subtask.id, title=" Visa ")
    assert renamed.title == "Visa"
    assert renamed.completed is True


@pytest.mark.asyncio
async def test_update_under_wrong_todo(db_session):
    trip = await create_todo(db_session, "Pack for trip")
    other = await create_todo(db_session, "Other")
    subtask = await create_subtask(db_session, trip.id, "Passport")

    assert await update_subtask(db_session, other.id, subtask.id, completed=True) is None
    assert await update_subtask(db_session, other.id, subtask.id, title="") is None


@pytest.mark.asyncio
async def test_delete_is_scoped(db_session):
    trip = await create_todo(db_session, "Pack for trip")
    other = await create_todo(db_session, "Other")
    subtask = await create_subtask(db_session, trip.id, "Passport")

    assert await delete_subtask(db_session, other.id, subtask.id) is False
    assert await delete_subtask(db_session, trip.id, subtask.id) is True
    assert await delete_subtask(db_session, trip.id, subtask.id) is False
