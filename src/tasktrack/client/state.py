"""Client-side state container for the todo list.

The store mirrors the server's list for the current filters and applies
changes optimistically. Listeners are called after every state change;
a renderer subscribes once and redraws from ``store`` each time.
"""

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any

from config.settings import settings
from tasktrack.client.api import ApiError, TodoApiClient, TodoFilters
from tasktrack.client.commands import DeleteCommand, ReorderCommand
from tasktrack.client.types import Todo, TodoStats
from tasktrack.scheduler.timers import TimerScheduler

logger = logging.getLogger(__name__)

REFRESH_JOB = "refresh"


def _undo_job(notice_id: int) -> str:
    return f"undo-{notice_id}"


@dataclass
class DeleteNotice:
    """A pending delete the user can still undo."""

    id: int
    command: DeleteCommand
    expires_at: datetime

    @property
    def todo(self) -> Todo:
        return self.command.todo

    @property
    def message(self) -> str:
        return f'Deleted "{self.todo["title"]}"'


class TodoStore:
    def __init__(
        self,
        api: TodoApiClient,
        timers: TimerScheduler,
        *,
        undo_window: float | None = None,
        debounce: float | None = None,
    ) -> None:
        self.api = api
        self.timers = timers
        self.undo_window = settings.undo_window_seconds if undo_window is None else undo_window
        self.debounce = settings.search_debounce_seconds if debounce is None else debounce

        self.todos: list[Todo] = []
        self.filters = TodoFilters()
        self.selected: set[int] = set()
        self.notices: dict[int, DeleteNotice] = {}
        self.error: str | None = None
        self.loading = False

        self._listeners: list[Callable[["TodoStore"], None]] = []
        self._notice_ids = itertools.count(1)

    # ── Listeners ──────────────────────────────────────────

    def subscribe(self, listener: Callable[["TodoStore"], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Store listener failed")

    def _fail(self, message: str, exc: ApiError) -> None:
        logger.warning("%s (%s)", message, exc)
        self.error = message
        self._emit()

    def clear_error(self) -> None:
        self.error = None
        self._emit()

    # ── Loading & filters ──────────────────────────────────

    def _pending_delete_ids(self) -> set[int]:
        return {notice.todo["id"] for notice in self.notices.values()}

    async def load(self) -> None:
        """Fetch the list for the current filters. The last fetch to finish wins."""
        self.loading = True
        self.error = None
        self._emit()
        try:
            todos = await self.api.list_todos(self.filters)
        except ApiError as exc:
            self.loading = False
            self._fail("Failed to load todos", exc)
            return
        hidden = self._pending_delete_ids()
        self.todos = [t for t in todos if t["id"] not in hidden]
        self.selected &= {t["id"] for t in self.todos}
        self.loading = False
        self._emit()

    def set_filters(self, **changes: Any) -> None:
        """Change search/status/priority/tags/sort and schedule a debounced refetch."""
        self.filters = replace(self.filters, **changes)
        self.timers.schedule(REFRESH_JOB, self.debounce, self.load)
        self._emit()

    def set_search(self, text: str) -> None:
        self.set_filters(search=text)

    def toggle_tag_filter(self, name: str) -> None:
        tags = list(self.filters.tags)
        if name in tags:
            tags.remove(name)
        else:
            tags.append(name)
        self.set_filters(tags=tags)

    def reset_filters(self) -> None:
        self.filters = TodoFilters()
        self.timers.schedule(REFRESH_JOB, self.debounce, self.load)
        self._emit()

    # ── Todo changes ───────────────────────────────────────

    def _replace(self, todo: Todo) -> None:
        self.todos = [todo if t["id"] == todo["id"] else t for t in self.todos]

    def find(self, todo_id: int) -> Todo | None:
        return next((t for t in self.todos if t["id"] == todo_id), None)

    async def add_todo(
        self,
        title: str,
        due_date: str | None = None,
        priority: str | None = None,
    ) -> Todo | None:
        try:
            todo = await self.api.create_todo(title, due_date=due_date, priority=priority)
        except ApiError as exc:
            self._fail("Failed to add todo", exc)
            return None
        self.error = None
        self.todos = [todo, *self.todos]
        self._emit()
        return todo

    async def update_todo(self, todo_id: int, **fields: Any) -> Todo | None:
        try:
            todo = await self.api.update_todo(todo_id, **fields)
        except ApiError as exc:
            self._fail("Failed to update todo", exc)
            return None
        self.error = None
        self._replace(todo)
        self._emit()
        return todo

    async def toggle_todo(self, todo_id: int) -> Todo | None:
        todo = self.find(todo_id)
        if todo is None:
            return None
        return await self.update_todo(todo_id, completed=not todo["completed"])

    # ── Delete with undo ───────────────────────────────────

    def request_delete(self, todo_id: int) -> DeleteNotice | None:
        """Hide the todo now; the server delete runs when the notice expires or is dismissed."""
        todo = self.find(todo_id)
        if todo is None:
            return None
        command = DeleteCommand(todo)
        self.todos = command.apply(self.todos)
        self.selected.discard(todo_id)

        notice = DeleteNotice(
            id=next(self._notice_ids),
            command=command,
            expires_at=datetime.now() + timedelta(seconds=self.undo_window),
        )
        self.notices[notice.id] = notice
        self.timers.schedule(_undo_job(notice.id), self.undo_window, self._finalize, notice.id)
        self._emit()
        return notice

    def undo(self, notice_id: int) -> bool:
        """Put the todo back. False if the delete already went out."""
        notice = self.notices.pop(notice_id, None)
        if notice is None:
            return False
        self.timers.cancel(_undo_job(notice_id))
        self.todos = notice.command.compensate(self.todos)
        self._emit()
        return True

    async def dismiss(self, notice_id: int) -> None:
        """Close the notice early and delete on the server right away."""
        self.timers.cancel(_undo_job(notice_id))
        await self._finalize(notice_id)

    async def _finalize(self, notice_id: int) -> None:
        # Expiry and dismissal both land here; whichever pops the notice first wins.
        notice = self.notices.pop(notice_id, None)
        if notice is None:
            return
        self._emit()
        try:
            await notice.command.confirm(self.api)
        except ApiError as exc:
            if exc.status_code == 404:
                return
            self.todos = notice.command.compensate(self.todos)
            self._fail("Failed to delete todo", exc)

    # ── Reorder ────────────────────────────────────────────

    async def move(self, todo_id: int, new_index: int) -> bool:
        """Move a todo within the visible list and persist the new positions."""
        command = ReorderCommand(todo_id, new_index)
        self.todos = command.apply(self.todos)
        self._emit()
        try:
            await command.confirm(self.api)
        except ApiError as exc:
            logger.warning("Reorder failed, reloading (%s)", exc)
            await self.load()
            if self.error:
                self.todos = command.compensate(self.todos)
            self.error = "Failed to reorder todos"
            self._emit()
            return False
        return True

    # ── Selection & bulk ───────────────────────────────────

    def toggle_selected(self, todo_id: int) -> None:
        if todo_id in self.selected:
            self.selected.discard(todo_id)
        elif self.find(todo_id) is not None:
            self.selected.add(todo_id)
        self._emit()

    def select_all(self) -> None:
        self.selected = {t["id"] for t in self.todos}
        self._emit()

    def clear_selection(self) -> None:
        self.selected = set()
        self._emit()

    def _selected_in_order(self) -> list[int]:
        return [t["id"] for t in self.todos if t["id"] in self.selected]

    def bulk_delete(self) -> list[DeleteNotice]:
        """Queue one independent, undoable delete per selected todo."""
        notices = [self.request_delete(todo_id) for todo_id in self._selected_in_order()]
        self.clear_selection()
        return [n for n in notices if n is not None]

    async def bulk_set_priority(self, priority: str) -> list[int]:
        """Update each selected todo in turn. Returns the ids that failed.

        Not atomic: earlier updates stay applied when a later one fails.
        """
        ids = self._selected_in_order()
        failed: list[int] = []
        for todo_id in ids:
            try:
                todo = await self.api.update_todo(todo_id, priority=priority)
            except ApiError as exc:
                logger.warning("Priority update of todo #%d failed (%s)", todo_id, exc)
                failed.append(todo_id)
                continue
            self._replace(todo)
        if failed:
            self.error = f"Failed to update {len(failed)} of {len(ids)} todos"
        self._emit()
        return failed

    # ── Stats ──────────────────────────────────────────────

    async def fetch_stats(self) -> TodoStats | None:
        try:
            return await self.api.get_stats()
        except ApiError as exc:
            self._fail("Failed to load stats", exc)
            return None
