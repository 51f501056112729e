"""Tests for export_service: nested JSON and flattened CSV."""

import pytest

from tasktrack.services.export_service import CSV_COLUMNS, export_csv, export_json, quote
from tasktrack.services.subtask_service import create_subtask
from tasktrack.services.todo_service import create_todo


def test_quote_doubles_inner_quotes():
    assert quote('Todo, with "quotes"') == '"Todo, with ""quotes"""'
    assert quote("plain") == '"plain"'


@pytest.mark.asyncio
async def test_export_json_nests_subtasks(sample_todos, db_session):
    data = await export_json(db_session)

    assert [t["title"] for t in data] == [
        "Buy groceries",
        "Write report",
        "Call plumber",
        "File taxes",
    ]
    assert [s["title"] for s in data[0]["subtasks"]] == ["Milk", "Eggs"]
    assert data[0]["due_date"] == "2026-03-01"
    assert data[1]["subtasks"] == []


@pytest.mark.asyncio
async def test_export_csv_header(db_session):
    csv = await export_csv(db_session)
    assert csv == ",".join(CSV_COLUMNS)
    assert CSV_COLUMNS == (
        "todo_id",
        "todo_title",
        "todo_completed",
        "todo_due_date",
        "todo_priority",
        "subtask_id",
        "subtask_title",
        "subtask_completed",
    )


@pytest.mark.asyncio
async def test_export_csv_todo_without_subtasks_has_one_row(db_session):
    todo = await create_todo(db_session, "Solo")

    lines = (await export_csv(db_session)).split("\n")

    assert lines[1:] == [f'{todo.id},"Solo",false,,"medium",,,']


@pytest.mark.asyncio
async def test_export_csv_one_row_per_subtask(db_session):
    todo = await create_todo(db_session, "Parent")
    first = await create_subtask(db_session, todo.id, "First")
    second = await create_subtask(db_session, todo.id, "Second")

    lines = (await export_csv(db_session)).split("\n")

    assert lines[1:] == [
        f'{todo.id},"Parent",false,,"medium",{first.id},"First",false',
        f'{todo.id},"Parent",false,,"medium",{second.id},"Second",false',
    ]


@pytest.mark.asyncio
async def test_export_csv_escapes_titles(db_session):
    await create_todo(db_session, 'Todo, with "quotes"')

    csv = await export_csv(db_session)

    assert '"Todo, with ""quotes"""' in csv
