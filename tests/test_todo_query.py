"""Tests for the todo list query builder: each predicate alone, then combined."""

from datetime import date

import pytest

from tasktrack.errors import ValidationError
from tasktrack.services.todo_query import PREDICATES, TodoQuery
from tasktrack.services.todo_service import create_todo, list_todos, update_todo

TODAY = date(2026, 3, 10)


async def _titles(session, **filters) -> list[str]:
    todos = await list_todos(session, TodoQuery(today=TODAY, **filters))
    return [t.title for t in todos]


# ── Construction ──────────────────────────────────────────


def test_empty_query_has_no_conditions():
    query = TodoQuery()
    assert query.active_filters() == []
    assert query.conditions() == []


def test_blank_search_is_ignored():
    assert TodoQuery(search="   ").search is None


def test_tags_are_split_trimmed_and_deduplicated():
    query = TodoQuery(tags=["home, urgent", " home", ""])
    assert query.tags == ["home", "urgent"]


def test_active_filters_follow_given_values():
    query = TodoQuery(search="milk", priority="high", tags=["home"])
    assert query.active_filters() == ["search", "priority", "tags"]
    assert len(query.conditions()) == 3


@pytest.mark.parametrize(
    "kwargs",
    [{"status": "done"}, {"priority": "urgent"}, {"sort": "alphabetical"}],
)
def test_unknown_values_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        TodoQuery(**kwargs)


def test_predicate_registry_is_explicit():
    assert set(PREDICATES) == {"search", "status", "priority", "tags"}


# ── Predicates ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_search_is_case_insensitive_substring(sample_todos, db_session):
    assert await _titles(db_session, search="GROCER") == ["Buy groceries"]
    assert await _titles(db_session, search="ER") == ["Call plumber", "Buy groceries"]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(db_session):
    await create_todo(db_session, "100% done")
    await create_todo(db_session, "100 done")
    assert await _titles(db_session, search="100%") == ["100% done"]


@pytest.mark.asyncio
async def test_status_active_and_completed(sample_todos, db_session):
    active = await _titles(db_session, status="active")
    completed = await _titles(db_session, status="completed")

    assert sorted(active) == ["Buy groceries", "Call plumber", "Write report"]
    assert completed == ["File taxes"]


@pytest.mark.asyncio
async def test_status_overdue(sample_todos, db_session):
    # File taxes is past due but completed; Write report is due after TODAY
    assert await _titles(db_session, status="overdue") == ["Buy groceries"]


@pytest.mark.asyncio
async def test_overdue_excludes_due_today(db_session):
    await create_todo(db_session, "Due today", due_date=TODAY)
    assert await _titles(db_session, status="overdue") == []


@pytest.mark.asyncio
async def test_priority_filter(sample_todos, db_session):
    assert sorted(await _titles(db_session, priority="high")) == ["Buy groceries", "File taxes"]
    assert await _titles(db_session, priority="low") == ["Write report"]


@pytest.mark.asyncio
async def test_single_tag_filter(sample_todos, db_session):
    assert sorted(await _titles(db_session, tags=["home"])) == ["Buy groceries", "Call plumber"]


@pytest.mark.asyncio
async def test_multiple_tags_require_all(sample_todos, db_session):
    # Call plumber has only home, File taxes has only urgent
    assert await _titles(db_session, tags=["home", "urgent"]) == ["Buy groceries"]


@pytest.mark.asyncio
async def test_unknown_tag_matches_nothing(sample_todos, db_session):
    assert await _titles(db_session, tags=["home", "garden"]) == []


@pytest.mark.asyncio
async def test_filters_combine_with_and(sample_todos, db_session):
    assert await _titles(db_session, search="call", status="active", priority="medium") == [
        "Call plumber"
    ]
    assert await _titles(db_session, search="call", priority="high") == []


# ── Ordering ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_default_order_is_newest_first_without_positions(sample_todos, db_session):
    assert await _titles(db_session) == [
        "File taxes",
        "Call plumber",
        "Write report",
        "Buy groceries",
    ]


@pytest.mark.asyncio
async def test_sort_due_date_nulls_last(sample_todos, db_session):
    assert await _titles(db_session, sort="due_date") == [
        "File taxes",
        "Buy groceries",
        "Write report",
        "Call plumber",
    ]


@pytest.mark.asyncio
async def test_sort_priority_high_to_low_then_unset(sample_todos, db_session):
    unset = await create_todo(db_session, "No priority")
    await update_todo(db_session, unset.id, priority=None)

    titles = await _titles(db_session, sort="priority")

    assert titles[:2] == ["File taxes", "Buy groceries"]
    assert titles[2:] == ["Call plumber", "Write report", "No priority"]


@pytest.mark.asyncio
async def test_sort_newest_ignores_positions(db_session):
    from tasktrack.services.todo_service import reorder_todos

    older = await create_todo(db_session, "Older")
    await create_todo(db_session, "Newer")
    await reorder_todos(db_session, [{"id": older.id, "position": 0}])

    assert await _titles(db_session) == ["Older", "Newer"]
    assert await _titles(db_session, sort="newest") == ["Newer", "Older"]
