from tasktrack.models.database import Base, init_db, get_session
from tasktrack.models.todo import PRIORITIES, Subtask, Todo
from tasktrack.models.tag import Tag, TodoTag

__all__ = [
    "Base",
    "init_db",
    "get_session",
    "PRIORITIES",
    "Todo",
    "Subtask",
    "Tag",
    "TodoTag",
]
