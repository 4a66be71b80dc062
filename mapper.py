from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from schemas import Task, TaskUpdate

TIMESTAMP_FIELDS = ("due_date", "created_at", "updated_at")


def to_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Fixed-width UTC ISO-8601 so stored timestamps sort as strings"""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def to_item(task: Task) -> dict:
    """Task value to storage item"""
    item = task.model_dump(mode="json")
    for field in TIMESTAMP_FIELDS:
        item[field] = to_timestamp(getattr(task, field))
    return item


def from_item(item: Mapping[str, Any]) -> Task:
    """Storage item to task value; items are only ever written by to_item"""
    return Task.model_validate(dict(item))


def to_item_changes(changes: TaskUpdate, updated_at: datetime) -> dict:
    """Partial storage item holding only the supplied fields plus updated_at"""
    item = changes.model_dump(mode="json", exclude_unset=True)
    if "due_date" in item:
        item["due_date"] = to_timestamp(changes.due_date)
    item["updated_at"] = to_timestamp(updated_at)
    return item
