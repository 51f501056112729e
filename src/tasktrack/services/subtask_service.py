"""Subtask CRUD, always scoped to the owning todo."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.errors import ValidationError
from tasktrack.models.todo import Subtask, Todo
from tasktrack.services.todo_service import clean_title

logger = logging.getLogger(__name__)


async def todo_exists(session: AsyncSession, todo_id: int) -> bool:
    result = await session.execute(select(Todo.id).where(Todo.id == todo_id))
    return result.scalar_one_or_none() is not None


async def list_subtasks(session: AsyncSession, todo_id: int) -> list[Subtask] | None:
    """Subtasks in creation order, or None when the todo does not exist."""
    if not await todo_exists(session, todo_id):
        return None
    stmt = (
        select(Subtask)
        .where(Subtask.todo_id == todo_id)
        .order_by(Subtask.created_at.asc(), Subtask.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_subtask(session: AsyncSession, todo_id: int, title: Any) -> Subtask | None:
    title = clean_title(title)
    if not await todo_exists(session, todo_id):
        return None
    subtask = Subtask(todo_id=todo_id, title=title)
    session.add(subtask)
    await session.commit()
    await session.refresh(subtask)
    return subtask


async def _get_scoped(session: AsyncSession, todo_id: int, subtask_id: int) -> Subtask | None:
    result = await session.execute(
        select(Subtask).where(Subtask.id == subtask_id, Subtask.todo_id == todo_id)
    )
    return result.scalar_one_or_none()


async def update_subtask(
    session: AsyncSession,
    todo_id: int,
    subtask_id: int,
    **fields: Any,
) -> Subtask | None:
    unknown = set(fields) - {"title", "completed"}
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

    subtask = await _get_scoped(session, todo_id, subtask_id)
    if not subtask:
        return None
    if "title" in fields:
        fields["title"] = clean_title(fields["title"])
    if "completed" in fields and not isinstance(fields["completed"], bool):
        raise ValidationError("completed must be a boolean")
    for key, value in fields.items():
        setattr(subtask, key, value)
    await session.commit()
    await session.refresh(subtask)
    return subtask


async def delete_subtask(session: AsyncSession, todo_id: int, subtask_id: int) -> bool:
    subtask = await _get_scoped(session, todo_id, subtask_id)
    if not subtask:
        return False
    await session.delete(subtask)
    await session.commit()
    logger.info("Deleted subtask #%d of todo #%d", subtask_id, todo_id)
    return True
