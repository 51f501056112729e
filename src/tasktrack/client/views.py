"""Plain-text rendering of store state: list rows, notices and the stats line."""

from datetime import date

from tasktrack.client.state import DeleteNotice, TodoStore
from tasktrack.client.types import Todo, TodoStats

PRIORITY_MARKS = {"high": "🔥", "medium": "", "low": "↓"}


def is_overdue(todo: Todo, today: date | None = None) -> bool:
    if todo["completed"] or not todo.get("due_date"):
        return False
    return date.fromisoformat(todo["due_date"]) < (today or date.today())


def render_todo(todo: Todo, *, selected: bool = False, today: date | None = None) -> str:
    check = "✅" if todo["completed"] else "⬜"
    pick = "▶ " if selected else ""
    mark = PRIORITY_MARKS.get(todo.get("priority") or "", "")
    line = f"{pick}{check} #{todo['id']} {mark}{todo['title']}"
    if todo.get("due_date"):
        label = "overdue" if is_overdue(todo, today) else "due"
        line += f" ({label} {todo['due_date']})"
    tags = todo.get("tags") or []
    if tags:
        line += " " + " ".join(f"#{tag['name']}" for tag in tags)
    return line


def render_notice(notice: DeleteNotice) -> str:
    return f"{notice.message} · [undo {notice.id}]"


def render_stats(stats: TodoStats) -> str:
    total = stats["total"]
    percentage = round(stats["completed"] / total * 100) if total else 0
    text = f"{percentage}% · {stats['completed']} of {total} completed"
    if stats["overdue"]:
        text += f" · {stats['overdue']} overdue"
    return text


def render_list(store: TodoStore, today: date | None = None) -> str:
    lines = []
    if store.error:
        lines.append(f"! {store.error}")
    if store.loading and not store.todos:
        lines.append("Loading todos...")
    elif not store.todos:
        lines.append("No todos yet.")
    else:
        lines.extend(
            render_todo(t, selected=t["id"] in store.selected, today=today) for t in store.todos
        )
    lines.extend(render_notice(n) for n in store.notices.values())
    return "\n".join(lines)
