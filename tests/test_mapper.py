from datetime import datetime, timedelta, timezone

from mapper import from_item, to_item, to_item_changes
from schemas import Task, TaskPriority, TaskStatus, validate_create, validate_update, new_task


def make_task(**overrides):
    values = dict(
        id="task-1",
        user_id="default-user",
        title="Write report",
        description="",
        status=TaskStatus.IN_PROGRESS,
        priority=TaskPriority.URGENT,
        due_date=datetime(2025, 3, 1, tzinfo=timezone.utc),
        created_at=datetime(2025, 2, 1, 8, 0, tzinfo=timezone.utc),
        updated_at=datetime(2025, 2, 2, 8, 0, 0, 500, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return Task(**values)


def test_round_trip():
    for task in (make_task(), make_task(due_date=None, description=None), new_task(validate_create({"title": "t"}))):
        assert from_item(to_item(task)) == task


def test_item_uses_storage_columns_and_plain_values():
    item = to_item(make_task())

    assert set(item) == {
        "id", "user_id", "title", "description", "status",
        "priority", "due_date", "created_at", "updated_at",
    }
    assert item["status"] == "in-progress"
    assert item["priority"] == "urgent"
    assert item["created_at"] == "2025-02-01T08:00:00.000000+00:00"


def test_timestamps_are_stored_in_utc():
    offset = timezone(timedelta(hours=2))
    item = to_item(make_task(created_at=datetime(2025, 2, 1, 10, 0, tzinfo=offset)))

    assert item["created_at"] == "2025-02-01T08:00:00.000000+00:00"


def test_changes_hold_only_supplied_fields():
    now = datetime(2025, 5, 5, 12, 0, tzinfo=timezone.utc)
    changes = to_item_changes(validate_update({"status": "completed", "dueDate": None}), now)

    assert changes == {
        "status": "completed",
        "due_date": None,
        "updated_at": "2025-05-05T12:00:00.000000+00:00",
    }
