from sqlmodel import SQLModel, Field
from sqlalchemy import Index
from typing import Optional
from config import table_name

TASKS_TABLE = table_name()


class TaskItem(SQLModel, table=True):
    """Storage item for a task: one row per task, keyed by id"""
    __tablename__ = TASKS_TABLE
    # Secondary index used for listing a user's tasks, newest first
    __table_args__ = (
        Index(f"ix_{TASKS_TABLE}_user_id_created_at", "user_id", "created_at"),
    )

    id: str = Field(primary_key=True, max_length=64)
    user_id: str = Field(max_length=255)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: str = Field(max_length=32)
    priority: str = Field(max_length=32)
    # ISO-8601 strings, UTC
    due_date: Optional[str] = None
    created_at: str
    updated_at: str
