"""Optimistic changes as explicit command objects.

A command changes the local list first (``apply``), then asks the server to
agree (``confirm``). If the server refuses, ``compensate`` undoes the local
change. The store decides when each step runs.
"""

from dataclasses import dataclass, field

from tasktrack.client.api import TodoApiClient
from tasktrack.client.types import ReorderEntry, Todo


class OptimisticCommand:
    def apply(self, todos: list[Todo]) -> list[Todo]:
        raise NotImplementedError

    async def confirm(self, api: TodoApiClient) -> None:
        raise NotImplementedError

    def compensate(self, todos: list[Todo]) -> list[Todo]:
        raise NotImplementedError


@dataclass
class DeleteCommand(OptimisticCommand):
    todo: Todo
    index: int = 0

    def apply(self, todos: list[Todo]) -> list[Todo]:
        for i, item in enumerate(todos):
            if item["id"] == self.todo["id"]:
                self.index = i
                return todos[:i] + todos[i + 1 :]
        return list(todos)

    async def confirm(self, api: TodoApiClient) -> None:
        await api.delete_todo(self.todo["id"])

    def compensate(self, todos: list[Todo]) -> list[Todo]:
        if any(item["id"] == self.todo["id"] for item in todos):
            return list(todos)
        index = min(self.index, len(todos))
        return todos[:index] + [self.todo] + todos[index:]


@dataclass
class ReorderCommand(OptimisticCommand):
    """Move one todo to ``new_index`` and persist positions 0..n-1."""

    todo_id: int
    new_index: int
    previous: list[Todo] = field(default_factory=list)
    orders: list[ReorderEntry] = field(default_factory=list)

    def apply(self, todos: list[Todo]) -> list[Todo]:
        self.previous = list(todos)
        moved = next((t for t in todos if t["id"] == self.todo_id), None)
        if moved is None:
            return list(todos)
        reordered = [t for t in todos if t["id"] != self.todo_id]
        index = max(0, min(self.new_index, len(reordered)))
        reordered.insert(index, moved)
        self.orders = [{"id": t["id"], "position": i} for i, t in enumerate(reordered)]
        return [{**t, "position": i} for i, t in enumerate(reordered)]

    async def confirm(self, api: TodoApiClient) -> None:
        if self.orders:
            await api.reorder_todos(self.orders)

    def compensate(self, todos: list[Todo]) -> list[Todo]:
        return list(self.previous)
