import logging
from typing import List, Optional
from sqlalchemy import delete, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from errors import AlreadyExistsError, NotFoundError
from models import TaskItem

logger = logging.getLogger(__name__)

FILTER_COLUMNS = ("status", "priority")
MUTABLE_COLUMNS = ("title", "description", "status", "priority", "due_date", "updated_at")

tasks_table = TaskItem.__table__


def _filter_conditions(filters: Optional[dict]) -> list:
    """Equality conditions for the supported filters, ANDed by the caller"""
    conditions = []
    for name in FILTER_COLUMNS:
        value = (filters or {}).get(name)
        if value:
            conditions.append(getattr(TaskItem, name) == value)
    return conditions


def _check_columns(changes: dict) -> None:
    unknown = set(changes) - set(MUTABLE_COLUMNS)
    if unknown:
        raise ValueError(f"Cannot update columns: {sorted(unknown)}")


class TaskRepository:
    """
    Task storage with existence-conditioned writes

    Every write is a single statement whose condition on the key is evaluated
    by the database together with the write. Only condition failures are
    translated into domain errors; anything else the driver raises propagates.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def create(self, item: dict) -> dict:
        """
        Insert an item if no item with its id exists

        Raises:
            AlreadyExistsError: If the id is taken
        """
        with Session(self.engine) as session:
            session.add(TaskItem(**item))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                # Only a primary key clash is a conflict
                if session.get(TaskItem, item["id"]) is not None:
                    raise AlreadyExistsError() from exc
                raise
        logger.debug("Created item %s", item["id"])
        return item

    def get_by_id(self, task_id: str) -> Optional[dict]:
        """Item for the id, or None when absent"""
        with Session(self.engine) as session:
            row = session.get(TaskItem, task_id)
            return row.model_dump() if row is not None else None

    def get_by_user_id(self, user_id: str, filters: Optional[dict] = None) -> List[dict]:
        """
        Items owned by a user, newest first

        Args:
            user_id: Secondary index key
            filters: Optional status/priority equality filters

        Returns:
            List of items
        """
        query = (
            select(TaskItem)
            .where(TaskItem.user_id == user_id, *_filter_conditions(filters))
            .order_by(TaskItem.created_at.desc(), TaskItem.id.desc())
        )
        with Session(self.engine) as session:
            return [row.model_dump() for row in session.exec(query).all()]

    def update(self, task_id: str, changes: dict) -> dict:
        """
        Apply a partial update to an existing item

        Returns:
            The item after the update

        Raises:
            NotFoundError: If no item has the id
        """
        _check_columns(changes)
        statement = (
            update(tasks_table)
            .where(tasks_table.c.id == task_id)
            .values(**changes)
            .returning(*tasks_table.columns)
        )
        with self.engine.begin() as conn:
            row = conn.execute(statement).mappings().first()
            if row is None:
                raise NotFoundError()
        return dict(row)

    def delete(self, task_id: str) -> dict:
        """
        Remove an existing item

        Returns:
            The item as it was before removal

        Raises:
            NotFoundError: If no item has the id
        """
        statement = (
            delete(tasks_table)
            .where(tasks_table.c.id == task_id)
            .returning(*tasks_table.columns)
        )
        with self.engine.begin() as conn:
            row = conn.execute(statement).mappings().first()
            if row is None:
                raise NotFoundError()
        return dict(row)
