import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from tasktrack.errors import ConflictError, NotFoundError, ValidationError
from tasktrack.models.tag import MAX_TAG_NAME_LENGTH, Tag, TodoTag
from tasktrack.models.todo import Todo

logger = logging.getLogger(__name__)


# ── Tags ───────────────────────────────────────────────────


async def list_tags(session: AsyncSession) -> list[Tag]:
    result = await session.execute(select(Tag).order_by(Tag.name.asc()))
    return list(result.scalars().all())


async def create_tag(session: AsyncSession, name: Any, color: str | None = None) -> Tag:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required")
    name = name.strip()
    if len(name) > MAX_TAG_NAME_LENGTH:
        raise ValidationError(f"Name must be {MAX_TAG_NAME_LENGTH} characters or less")

    tag = Tag(name=name, color=color or settings.default_tag_color)
    session.add(tag)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Tag already exists") from exc
    await session.refresh(tag)
    logger.info("Created tag #%d (%s)", tag.id, tag.name)
    return tag


# ── Todo ↔ Tag links ───────────────────────────────────────


async def todo_tags(session: AsyncSession, todo_id: int) -> list[Tag]:
    stmt = (
        select(Tag)
        .join(TodoTag, TodoTag.tag_id == Tag.id)
        .where(TodoTag.todo_id == todo_id)
        .order_by(Tag.name.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def add_tag_to_todo(session: AsyncSession, todo_id: int, tag_id: Any) -> list[Tag]:
    """Link a tag to a todo and return the todo's tags.

    Re-adding an existing link is a no-op.
    """
    if not isinstance(tag_id, int) or isinstance(tag_id, bool):
        raise ValidationError("tag_id is required and must be a number")
    if await session.get(Todo, todo_id) is None:
        raise NotFoundError("Todo not found")
    if await session.get(Tag, tag_id) is None:
        raise NotFoundError("Tag not found")

    if await session.get(TodoTag, (todo_id, tag_id)) is None:
        session.add(TodoTag(todo_id=todo_id, tag_id=tag_id))
        try:
            await session.commit()
        except IntegrityError:
            # linked concurrently; the pair exists either way
            await session.rollback()
    return await todo_tags(session, todo_id)


async def remove_tag_from_todo(session: AsyncSession, todo_id: int, tag_id: int) -> bool:
    result = await session.execute(
        delete(TodoTag).where(TodoTag.todo_id == todo_id, TodoTag.tag_id == tag_id)
    )
    await session.commit()
    return result.rowcount > 0
