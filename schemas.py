from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, Any, List, NewType
from datetime import date, datetime, timezone
from enum import Enum
from uuid import uuid4
from errors import ValidationError

DEFAULT_USER_ID = "default-user"

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000

# Request body that has been decoded but not yet validated
RawPayload = NewType("RawPayload", dict)


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python and in storage"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class RequestModel(BaseModel):
    """Client input; only the camelCase names are accepted"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_alias=True,
        validate_by_name=False,
        str_strip_whitespace=True,
        extra="ignore",
    )


def parse_due_date(value: Any) -> Optional[datetime]:
    """
    Accept an ISO-8601 date or datetime

    Date-only values become midnight UTC, naive datetimes are taken as UTC,
    aware ones are converted to UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValueError("must be a valid ISO-8601 date")
    else:
        raise ValueError("must be a valid ISO-8601 date")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        raise ValueError("must be a valid ISO-8601 date")


DueDate = Annotated[Optional[datetime], BeforeValidator(parse_due_date)]


class TaskCreate(RequestModel):
    """Schema for creating a new task"""
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: DueDate = None
    user_id: str = Field(DEFAULT_USER_ID, min_length=1)


class TaskUpdate(RequestModel):
    """Schema for updating a task; only explicitly supplied fields are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: DueDate = None

    @field_validator("title", "description", "status", "priority", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Only dueDate can be cleared
        if value is None:
            raise ValueError("must not be null")
        return value

    def is_empty(self) -> bool:
        return not self.model_fields_set


class Task(CamelModel):
    """Normalized task value used by handlers, mapper and repository"""
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskFilters(RequestModel):
    """Query filters for listing tasks"""
    user_id: str = Field(DEFAULT_USER_ID, min_length=1)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None


class TaskList(CamelModel):
    tasks: List[Task]
    count: int
    filters: TaskFilters


class DeletedTask(CamelModel):
    message: str
    deleted_task: Task


class ErrorBody(BaseModel):
    message: str
    details: Optional[List[dict]] = None
    timestamp: str


class ApiResponse(BaseModel):
    """Standard API response wrapper"""
    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorBody] = None
    timestamp: Optional[str] = None


def new_task_id() -> str:
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_task(data: TaskCreate) -> Task:
    """Assign identity and timestamps to a validated create request"""
    now = utc_now()
    return Task(
        id=new_task_id(),
        created_at=now,
        updated_at=now,
        **data.model_dump(),
    )


def _violations(exc: PydanticValidationError) -> List[dict]:
    details = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        # For a missing field pydantic reports the whole payload as input
        value = None if err["type"] == "missing" else err.get("input")
        details.append({"field": field, "message": err["msg"], "value": value})
    return details


def _validate(model: type, payload: RawPayload):
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(_violations(exc)) from exc


def validate_create(payload: RawPayload) -> TaskCreate:
    """
    Validate a create request, collecting every violation

    Raises:
        ValidationError: One detail entry per violated field
    """
    return _validate(TaskCreate, payload)


def validate_update(payload: RawPayload) -> TaskUpdate:
    """
    Validate an update request; every field is optional

    An empty result means no recognized field was supplied, callers reject
    that separately.

    Raises:
        ValidationError: One detail entry per violated field
    """
    return _validate(TaskUpdate, payload)


def validate_filters(params: dict) -> TaskFilters:
    """Validate list filters, dropping empty values"""
    return _validate(TaskFilters, RawPayload({k: v for k, v in params.items() if v not in (None, "")}))
