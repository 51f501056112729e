"""Query builder for the todo list.

Every supported filter is a named predicate that turns one query parameter
into a WHERE clause. Filters that are absent contribute nothing; the rest are
combined with AND. Sort keys map to fixed ORDER BY lists.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import ColumnElement, Select, and_, case, select

from tasktrack.errors import ValidationError
from tasktrack.models.tag import Tag, TodoTag
from tasktrack.models.todo import PRIORITIES, Todo

STATUSES = ("active", "completed", "overdue")
SORTS = ("newest", "due_date", "priority")

_PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


# ── Predicates ─────────────────────────────────────────────


def search_clause(query: "TodoQuery") -> ColumnElement[bool]:
    return Todo.title.icontains(query.search, autoescape=True)


def status_clause(query: "TodoQuery") -> ColumnElement[bool]:
    if query.status == "active":
        return Todo.completed.is_(False)
    if query.status == "completed":
        return Todo.completed.is_(True)
    # overdue
    return and_(
        Todo.completed.is_(False),
        Todo.due_date.is_not(None),
        Todo.due_date < query.reference_date,
    )


def priority_clause(query: "TodoQuery") -> ColumnElement[bool]:
    return Todo.priority == query.priority


def tags_clause(query: "TodoQuery") -> ColumnElement[bool]:
    """A todo must carry every requested tag."""
    return and_(
        *(
            Todo.id.in_(
                select(TodoTag.todo_id)
                .join(Tag, Tag.id == TodoTag.tag_id)
                .where(Tag.name == name)
            )
            for name in query.tags
        )
    )


PREDICATES: dict[str, Callable[["TodoQuery"], ColumnElement[bool]]] = {
    "search": search_clause,
    "status": status_clause,
    "priority": priority_clause,
    "tags": tags_clause,
}


# ── Query ──────────────────────────────────────────────────


@dataclass
class TodoQuery:
    search: str | None = None
    status: str | None = None
    priority: str | None = None
    tags: list[str] = field(default_factory=list)
    sort: str | None = None
    today: date | None = None

    def __post_init__(self) -> None:
        self.search = (self.search or "").strip() or None
        self.status = self.status or None
        self.priority = self.priority or None
        self.sort = self.sort or None
        if self.status is not None and self.status not in STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(STATUSES)}")
        if self.priority is not None and self.priority not in PRIORITIES:
            raise ValidationError(f"priority must be one of: {', '.join(PRIORITIES)}")
        if self.sort is not None and self.sort not in SORTS:
            raise ValidationError(f"sort must be one of: {', '.join(SORTS)}")

        names: list[str] = []
        for raw in self.tags:
            for name in raw.split(","):
                name = name.strip()
                if name and name not in names:
                    names.append(name)
        self.tags = names

    @property
    def reference_date(self) -> date:
        return self.today or date.today()

    def active_filters(self) -> list[str]:
        return [name for name in PREDICATES if getattr(self, name)]

    def conditions(self) -> list[ColumnElement[bool]]:
        return [PREDICATES[name](self) for name in self.active_filters()]

    def order_by(self) -> list:
        newest = [Todo.created_at.desc(), Todo.id.desc()]
        if self.sort == "newest":
            return newest
        if self.sort == "due_date":
            return [Todo.due_date.asc().nulls_last(), *newest]
        if self.sort == "priority":
            rank = case(_PRIORITY_RANK, value=Todo.priority, else_=len(_PRIORITY_RANK))
            return [rank.asc(), *newest]
        return [Todo.position.asc().nulls_last(), *newest]

    def statement(self) -> Select:
        return select(Todo).where(*self.conditions()).order_by(*self.order_by())
