"""JSON API endpoints, mounted under /api."""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.errors import NotFoundError
from tasktrack.models.database import get_session
from tasktrack.models.tag import Tag
from tasktrack.models.todo import Todo
from tasktrack.services import export_service, subtask_service, tag_service, todo_service
from tasktrack.services.todo_query import TodoQuery
from tasktrack.web import schemas

router = APIRouter()
health_router = APIRouter()
logger = logging.getLogger(__name__)


def _todo_read(todo: Todo, tags: list[Tag]) -> schemas.TodoRead:
    return schemas.TodoRead.model_validate(todo).model_copy(
        update={"tags": [schemas.TagRead.model_validate(tag) for tag in tags]}
    )


async def _with_tags(session: AsyncSession, todo: Todo) -> schemas.TodoRead:
    tags = await tag_service.todo_tags(session, todo.id)
    return _todo_read(todo, tags)


@health_router.get("/health")
@router.get("/health")
async def health():
    return {"status": "ok"}


# ── Todos ──────────────────────────────────────────────────


@router.get("/todos", response_model=list[schemas.TodoRead])
async def list_todos(
    search: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    priority: str | None = None,
    tag: list[str] | None = Query(None),
    sort: str | None = None,
    session: AsyncSession = Depends(get_session),
):
    query = TodoQuery(search=search, status=status_filter, priority=priority, tags=tag or [], sort=sort)
    todos = await todo_service.list_todos(session, query)
    tags = await todo_service.tags_for_todos(session, [t.id for t in todos])
    return [_todo_read(t, tags[t.id]) for t in todos]


@router.put("/todos/reorder")
async def reorder_todos(body: schemas.ReorderRequest, session: AsyncSession = Depends(get_session)):
    await todo_service.reorder_todos(session, body.orders)
    return {"success": True}


@router.get("/todos/{todo_id}", response_model=schemas.TodoRead)
async def get_todo(todo_id: int, session: AsyncSession = Depends(get_session)):
    todo = await todo_service.get_todo(session, todo_id)
    if not todo:
        raise NotFoundError("Todo not found")
    return await _with_tags(session, todo)


@router.post("/todos", response_model=schemas.TodoRead, status_code=status.HTTP_201_CREATED)
async def create_todo(body: schemas.TodoCreate, session: AsyncSession = Depends(get_session)):
    todo = await todo_service.create_todo(
        session,
        body.title,
        due_date=body.due_date,
        priority=body.priority,
        notes=body.notes,
    )
    return _todo_read(todo, [])


@router.put("/todos/{todo_id}", response_model=schemas.TodoRead)
async def update_todo(
    todo_id: int,
    body: schemas.TodoUpdate,
    session: AsyncSession = Depends(get_session),
):
    todo = await todo_service.update_todo(session, todo_id, **body.model_dump(exclude_unset=True))
    if not todo:
        raise NotFoundError("Todo not found")
    return await _with_tags(session, todo)


@router.delete("/todos/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_todo(todo_id: int, session: AsyncSession = Depends(get_session)):
    if not await todo_service.delete_todo(session, todo_id):
        raise NotFoundError("Todo not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats", response_model=schemas.TodoStats)
async def get_stats(session: AsyncSession = Depends(get_session)):
    return await todo_service.get_stats(session)


# ── Subtasks ───────────────────────────────────────────────


@router.get("/todos/{todo_id}/subtasks", response_model=list[schemas.SubtaskRead])
async def list_subtasks(todo_id: int, session: AsyncSession = Depends(get_session)):
    subtasks = await subtask_service.list_subtasks(session, todo_id)
    if subtasks is None:
        raise NotFoundError("Todo not found")
    return subtasks


@router.post(
    "/todos/{todo_id}/subtasks",
    response_model=schemas.SubtaskRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_subtask(
    todo_id: int,
    body: schemas.SubtaskCreate,
    session: AsyncSession = Depends(get_session),
):
    subtask = await subtask_service.create_subtask(session, todo_id, body.title)
    if not subtask:
        raise NotFoundError("Todo not found")
    return subtask


@router.put("/todos/{todo_id}/subtasks/{subtask_id}", response_model=schemas.SubtaskRead)
async def update_subtask(
    todo_id: int,
    subtask_id: int,
    body: schemas.SubtaskUpdate,
    session: AsyncSession = Depends(get_session),
):
    subtask = await subtask_service.update_subtask(
        session, todo_id, subtask_id, **body.model_dump(exclude_unset=True)
    )
    if not subtask:
        raise NotFoundError("Subtask not found")
    return subtask


@router.delete("/todos/{todo_id}/subtasks/{subtask_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subtask(todo_id: int, subtask_id: int, session: AsyncSession = Depends(get_session)):
    if not await subtask_service.delete_subtask(session, todo_id, subtask_id):
        raise NotFoundError("Subtask not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Tags ───────────────────────────────────────────────────


@router.get("/tags", response_model=list[schemas.TagRead])
async def list_tags(session: AsyncSession = Depends(get_session)):
    return await tag_service.list_tags(session)


@router.post("/tags", response_model=schemas.TagRead, status_code=status.HTTP_201_CREATED)
async def create_tag(body: schemas.TagCreate, session: AsyncSession = Depends(get_session)):
    return await tag_service.create_tag(session, body.name, body.color)


@router.post(
    "/todos/{todo_id}/tags",
    response_model=list[schemas.TagRead],
    status_code=status.HTTP_201_CREATED,
)
async def add_tag_to_todo(
    todo_id: int,
    body: schemas.TodoTagCreate,
    session: AsyncSession = Depends(get_session),
):
    return await tag_service.add_tag_to_todo(session, todo_id, body.tag_id)


@router.delete("/todos/{todo_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tag_from_todo(todo_id: int, tag_id: int, session: AsyncSession = Depends(get_session)):
    if not await tag_service.remove_tag_from_todo(session, todo_id, tag_id):
        raise NotFoundError("Tag not associated with this todo")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Export ─────────────────────────────────────────────────


@router.get("/export/json")
async def export_json(session: AsyncSession = Depends(get_session)):
    return await export_service.export_json(session)


@router.get("/export/csv")
async def export_csv(session: AsyncSession = Depends(get_session)):
    body = await export_service.export_csv(session)
    logger.info("CSV export generated (%d bytes)", len(body))
    return Response(
        content=body,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{export_service.CSV_FILENAME}"',
        },
    )
