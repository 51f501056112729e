"""JSON and CSV export of every todo with its subtasks."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.models.todo import Subtask, Todo
from tasktrack.web.schemas import SubtaskRead, TodoRead

CSV_COLUMNS = (
    "todo_id",
    "todo_title",
    "todo_completed",
    "todo_due_date",
    "todo_priority",
    "subtask_id",
    "subtask_title",
    "subtask_completed",
)
CSV_FILENAME = "todos-export.csv"


def todo_to_dict(todo: Todo) -> dict[str, Any]:
    """The API shape of a todo, without its tags."""
    return TodoRead.model_validate(todo).model_dump(mode="json", exclude={"tags"})


def subtask_to_dict(subtask: Subtask) -> dict[str, Any]:
    return SubtaskRead.model_validate(subtask).model_dump(mode="json")


async def export_json(session: AsyncSession) -> list[dict[str, Any]]:
    todos = (await session.execute(select(Todo).order_by(Todo.id.asc()))).scalars().all()
    subtasks = (await session.execute(select(Subtask).order_by(Subtask.id.asc()))).scalars().all()

    by_todo: dict[int, list[dict[str, Any]]] = {}
    for subtask in subtasks:
        by_todo.setdefault(subtask.todo_id, []).append(subtask_to_dict(subtask))

    return [{**todo_to_dict(todo), "subtasks": by_todo.get(todo.id, [])} for todo in todos]


# ── CSV ────────────────────────────────────────────────────


def quote(value: Any) -> str:
    """Double-quote a string field, doubling any quotes inside it."""
    return '"' + str(value).replace('"', '""') + '"'


def _plain(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def csv_row(row: Any) -> str:
    has_subtask = row.subtask_id is not None
    return ",".join(
        [
            _plain(row.todo_id),
            quote(row.todo_title),
            _plain(row.todo_completed),
            _plain(row.todo_due_date),
            quote(row.todo_priority) if row.todo_priority is not None else "",
            _plain(row.subtask_id),
            quote(row.subtask_title) if has_subtask else "",
            _plain(row.subtask_completed) if has_subtask else "",
        ]
    )


async def export_csv(session: AsyncSession) -> str:
    """One line per (todo, subtask) pair; todos without subtasks get one line."""
    stmt = (
        select(
            Todo.id.label("todo_id"),
            Todo.title.label("todo_title"),
            Todo.completed.label("todo_completed"),
            Todo.due_date.label("todo_due_date"),
            Todo.priority.label("todo_priority"),
            Subtask.id.label("subtask_id"),
            Subtask.title.label("subtask_title"),
            Subtask.completed.label("subtask_completed"),
        )
        .select_from(Todo)
        .outerjoin(Subtask, Subtask.todo_id == Todo.id)
        .order_by(Todo.id.asc(), Subtask.id.asc())
    )
    rows = (await session.execute(stmt)).all()
    return "\n".join([",".join(CSV_COLUMNS), *(csv_row(row) for row in rows)])
