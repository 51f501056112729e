from datetime import datetime

from sqlalchemy import ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tasktrack.models.database import Base

DEFAULT_TAG_COLOR = "#6366f1"
MAX_TAG_NAME_LENGTH = 50


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(MAX_TAG_NAME_LENGTH), unique=True)
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_TAG_COLOR)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())


class TodoTag(Base):
    __tablename__ = "todo_tags"

    todo_id: Mapped[int] = mapped_column(ForeignKey("todos.id", ondelete="CASCADE"), primary_key=True)
    tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)
