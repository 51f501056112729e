"""Shapes of the JSON the API returns."""

from typing import Literal, TypedDict

Priority = Literal["low", "medium", "high"]


class Tag(TypedDict):
    id: int
    name: str
    color: str


class Todo(TypedDict):
    id: int
    title: str
    completed: bool
    due_date: str | None
    priority: Priority | None
    notes: str | None
    position: int | None
    created_at: str
    updated_at: str
    tags: list[Tag]


class Subtask(TypedDict):
    id: int
    todo_id: int
    title: str
    completed: bool
    created_at: str
    updated_at: str


class PriorityCounts(TypedDict):
    high: int
    medium: int
    low: int


class TodoStats(TypedDict):
    total: int
    completed: int
    active: int
    overdue: int
    by_priority: PriorityCounts


class ReorderEntry(TypedDict):
    id: int
    position: int
