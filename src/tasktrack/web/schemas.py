"""Request bodies and response models for the JSON API.

Titles, names and ids arrive as ``Any`` on purpose: the services own those
checks so that a wrong type and a blank string produce the same 400 message.
"""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

Priority = Literal["low", "medium", "high"]


# ── Requests ───────────────────────────────────────────────


class TodoCreate(BaseModel):
    title: Any = None
    due_date: date | None = None
    priority: Priority | None = None
    notes: str | None = None


class TodoUpdate(BaseModel):
    title: Any = None
    completed: Any = None
    due_date: date | None = None
    priority: Priority | None = None
    notes: str | None = None


class ReorderRequest(BaseModel):
    orders: Any = None


class SubtaskCreate(BaseModel):
    title: Any = None


class SubtaskUpdate(BaseModel):
    title: Any = None
    completed: Any = None


class TagCreate(BaseModel):
    name: Any = None
    color: str | None = None


class TodoTagCreate(BaseModel):
    tag_id: Any = None


# ── Responses ──────────────────────────────────────────────


class TagRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


class TodoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    completed: bool
    due_date: date | None
    priority: Priority | None
    notes: str | None
    position: int | None
    created_at: datetime
    updated_at: datetime
    tags: list[TagRead] = []


class SubtaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    todo_id: int
    title: str
    completed: bool
    created_at: datetime
    updated_at: datetime


class PriorityCounts(BaseModel):
    high: int
    medium: int
    low: int


class TodoStats(BaseModel):
    total: int
    completed: int
    active: int
    overdue: int
    by_priority: PriorityCounts
