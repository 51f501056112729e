import logging
from datetime import date
from typing import Any

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.errors import ReorderError, ValidationError
from tasktrack.models.tag import Tag, TodoTag
from tasktrack.models.todo import PRIORITIES, Todo
from tasktrack.services.todo_query import TodoQuery

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("title", "completed", "due_date", "priority", "notes")


# ── Validation ─────────────────────────────────────────────


def clean_title(title: Any) -> str:
    """Return the trimmed title, or raise if it is missing, blank or not a string."""
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    return title.strip()


def _check_priority(priority: Any) -> None:
    if priority is not None and priority not in PRIORITIES:
        raise ValidationError(f"priority must be one of: {', '.join(PRIORITIES)}")


# ── Todo CRUD ──────────────────────────────────────────────


async def list_todos(session: AsyncSession, query: TodoQuery | None = None) -> list[Todo]:
    stmt = (query or TodoQuery()).statement()
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_todo(session: AsyncSession, todo_id: int) -> Todo | None:
    return await session.get(Todo, todo_id)


async def create_todo(
    session: AsyncSession,
    title: Any,
    due_date: date | None = None,
    priority: str | None = "medium",
    notes: str | None = None,
) -> Todo:
    title = clean_title(title)
    _check_priority(priority)
    todo = Todo(
        title=title,
        due_date=due_date,
        priority=priority if priority is not None else "medium",
        notes=notes,
    )
    session.add(todo)
    await session.commit()
    await session.refresh(todo)
    logger.info("Created todo #%d", todo.id)
    return todo


async def update_todo(session: AsyncSession, todo_id: int, **fields: Any) -> Todo | None:
    """Apply a partial update. Only the given fields change."""
    unknown = set(fields) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

    todo = await session.get(Todo, todo_id)
    if not todo:
        return None
    if "title" in fields:
        fields["title"] = clean_title(fields["title"])
    if "completed" in fields and not isinstance(fields["completed"], bool):
        raise ValidationError("completed must be a boolean")
    if "priority" in fields:
        _check_priority(fields["priority"])
    for key, value in fields.items():
        setattr(todo, key, value)
    await session.commit()
    await session.refresh(todo)
    return todo


async def delete_todo(session: AsyncSession, todo_id: int) -> bool:
    """Delete a todo; its subtasks and tag links go with it via ON DELETE CASCADE."""
    result = await session.execute(delete(Todo).where(Todo.id == todo_id))
    await session.commit()
    if result.rowcount == 0:
        return False
    logger.info("Deleted todo #%d", todo_id)
    return True


# ── Reorder ────────────────────────────────────────────────


def _is_whole_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int)


def validate_orders(orders: Any) -> list[tuple[int, int]]:
    if not isinstance(orders, list) or not orders:
        raise ValidationError("orders must be a non-empty array")
    pairs = []
    for entry in orders:
        if (
            not isinstance(entry, dict)
            or not _is_whole_number(entry.get("id"))
            or not _is_whole_number(entry.get("position"))
        ):
            raise ValidationError("Each order must have a whole-number id and position")
        pairs.append((int(entry["id"]), int(entry["position"])))
    return pairs


async def reorder_todos(session: AsyncSession, orders: Any) -> None:
    """Apply every position update in one transaction, or none of them."""
    pairs = validate_orders(orders)
    try:
        for todo_id, position in pairs:
            await session.execute(
                update(Todo).where(Todo.id == todo_id).values(position=position)
            )
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Reorder of %d todos rolled back", len(pairs))
        raise ReorderError("Failed to reorder todos") from exc
    logger.info("Reordered %d todos", len(pairs))


# ── Tags & stats ───────────────────────────────────────────


async def tags_for_todos(session: AsyncSession, todo_ids: list[int]) -> dict[int, list[Tag]]:
    """Map each todo id to its tags, sorted by name."""
    tags: dict[int, list[Tag]] = {todo_id: [] for todo_id in todo_ids}
    if not todo_ids:
        return tags
    stmt = (
        select(TodoTag.todo_id, Tag)
        .join(Tag, Tag.id == TodoTag.tag_id)
        .where(TodoTag.todo_id.in_(todo_ids))
        .order_by(Tag.name.asc())
    )
    result = await session.execute(stmt)
    for todo_id, tag in result.all():
        tags[todo_id].append(tag)
    return tags


async def get_stats(session: AsyncSession, today: date | None = None) -> dict:
    today = today or date.today()
    overdue = case(
        (
            (Todo.completed.is_(False)) & (Todo.due_date.is_not(None)) & (Todo.due_date < today),
            1,
        ),
        else_=0,
    )
    total, completed, overdue_count = (
        await session.execute(
            select(
                func.count(Todo.id),
                func.coalesce(func.sum(case((Todo.completed.is_(True), 1), else_=0)), 0),
                func.coalesce(func.sum(overdue), 0),
            )
        )
    ).one()

    by_priority = {name: 0 for name in ("high", "medium", "low")}
    rows = await session.execute(
        select(Todo.priority, func.count(Todo.id))
        .where(Todo.priority.is_not(None))
        .group_by(Todo.priority)
    )
    for priority, count in rows.all():
        if priority in by_priority:
            by_priority[priority] = count

    return {
        "total": total,
        "completed": completed,
        "active": total - completed,
        "overdue": overdue_count,
        "by_priority": by_priority,
    }
