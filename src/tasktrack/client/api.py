"""Async HTTP client for the tasktrack API, one method per endpoint."""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from config.settings import settings
from tasktrack.client.types import ReorderEntry, Subtask, Tag, Todo, TodoStats

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed API call. ``status_code`` is 0 when no response arrived."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass
class TodoFilters:
    search: str = ""
    status: str | None = None
    priority: str | None = None
    tags: list[str] = field(default_factory=list)
    sort: str | None = None

    def to_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if self.search.strip():
            params.append(("search", self.search.strip()))
        if self.status:
            params.append(("status", self.status))
        if self.priority:
            params.append(("priority", self.priority))
        params.extend(("tag", name) for name in self.tags)
        if self.sort:
            params.append(("sort", self.sort))
        return params


class TodoApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.api_base_url).rstrip("/"),
            timeout=timeout or settings.http_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "TodoApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(0, "Network error") from exc
        if resp.is_error:
            try:
                message = resp.json().get("error") or resp.reason_phrase
            except ValueError:
                message = resp.reason_phrase
            raise ApiError(resp.status_code, message)
        return resp

    # ── Todos ──────────────────────────────────────────────

    async def list_todos(self, filters: TodoFilters | None = None) -> list[Todo]:
        params = filters.to_params() if filters else []
        return (await self._request("GET", "/todos", params=params)).json()

    async def get_todo(self, todo_id: int) -> Todo:
        return (await self._request("GET", f"/todos/{todo_id}")).json()

    async def create_todo(
        self,
        title: str,
        due_date: str | None = None,
        priority: str | None = None,
        notes: str | None = None,
    ) -> Todo:
        payload: dict[str, Any] = {"title": title}
        if due_date is not None:
            payload["due_date"] = due_date
        if priority is not None:
            payload["priority"] = priority
        if notes is not None:
            payload["notes"] = notes
        return (await self._request("POST", "/todos", json=payload)).json()

    async def update_todo(self, todo_id: int, **fields: Any) -> Todo:
        return (await self._request("PUT", f"/todos/{todo_id}", json=fields)).json()

    async def delete_todo(self, todo_id: int) -> None:
        await self._request("DELETE", f"/todos/{todo_id}")

    async def reorder_todos(self, orders: list[ReorderEntry]) -> None:
        await self._request("PUT", "/todos/reorder", json={"orders": orders})

    async def get_stats(self) -> TodoStats:
        return (await self._request("GET", "/stats")).json()

    # ── Subtasks ───────────────────────────────────────────

    async def list_subtasks(self, todo_id: int) -> list[Subtask]:
        return (await self._request("GET", f"/todos/{todo_id}/subtasks")).json()

    async def create_subtask(self, todo_id: int, title: str) -> Subtask:
        resp = await self._request("POST", f"/todos/{todo_id}/subtasks", json={"title": title})
        return resp.json()

    async def update_subtask(self, todo_id: int, subtask_id: int, **fields: Any) -> Subtask:
        resp = await self._request("PUT", f"/todos/{todo_id}/subtasks/{subtask_id}", json=fields)
        return resp.json()

    async def delete_subtask(self, todo_id: int, subtask_id: int) -> None:
        await self._request("DELETE", f"/todos/{todo_id}/subtasks/{subtask_id}")

    # ── Tags ───────────────────────────────────────────────

    async def list_tags(self) -> list[Tag]:
        return (await self._request("GET", "/tags")).json()

    async def create_tag(self, name: str, color: str | None = None) -> Tag:
        payload: dict[str, Any] = {"name": name}
        if color:
            payload["color"] = color
        return (await self._request("POST", "/tags", json=payload)).json()

    async def add_tag_to_todo(self, todo_id: int, tag_id: int) -> list[Tag]:
        resp = await self._request("POST", f"/todos/{todo_id}/tags", json={"tag_id": tag_id})
        return resp.json()

    async def remove_tag_from_todo(self, todo_id: int, tag_id: int) -> None:
        await self._request("DELETE", f"/todos/{todo_id}/tags/{tag_id}")

    # ── Export & health ────────────────────────────────────

    async def export_json(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/export/json")).json()

    async def export_csv(self) -> str:
        return (await self._request("GET", "/export/csv")).text

    async def health(self) -> dict[str, str]:
        return (await self._request("GET", "/health")).json()
