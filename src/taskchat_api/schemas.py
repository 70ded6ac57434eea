from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as RecordValidationError
from pydantic.alias_generators import to_camel

from .errors import StoreError, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _missing(*values: Optional[str]) -> bool:
    return any(not v for v in values)


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Body of a task creation request.

    Fields are optional at the schema level so that a missing field surfaces
    through ``require_fields`` with the fixed 400 message.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Task description")

    def require_fields(self) -> None:
        """Raise ValidationError unless both title and description are non-empty."""
        if _missing(self.title, self.description):
            raise ValidationError("Title and description are required")


# PUBLIC_INTERFACE
class TaskUpdate(TaskCreate):
    """
    Body of a task update request.

    Every update overwrites all three fields: an omitted status is written
    as False, not left unchanged.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "description": "Milk, eggs, bread, and paper towels",
                "status": True,
            }
        }
    )

    status: Optional[bool] = Field(default=None, description="Completion status flag")

    def resolved_status(self) -> bool:
        return self.status or False


@dataclass(frozen=True)
class TaskListParams:
    """
    Query parameters for listing tasks.
    """
    sort_by: Optional[str] = None
    order: str = "desc"
    search: Optional[str] = None


# PUBLIC_INTERFACE
class ChatMessageCreate(BaseModel):
    """Body of a chat post request."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"username": "alice", "message": "hello"}}
    )

    username: Optional[str] = Field(default=None, description="Sender display name")
    message: Optional[str] = Field(default=None, description="Message text")

    def require_fields(self) -> None:
        if _missing(self.username, self.message):
            raise ValidationError("Username and message are required")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class TaskOut(_CamelModel):
    """
    Schema returned by the API for a task.
    """

    id: str = Field(..., description="Store-assigned document id")
    title: Optional[str] = Field(default=None, description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Task description")
    status: bool = Field(default=False, description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")


# PUBLIC_INTERFACE
class ChatMessageOut(_CamelModel):
    """Schema returned by the API for a chat message."""

    id: str = Field(..., description="Push key generated by the realtime store")
    username: Optional[str] = None
    message: Optional[str] = None
    timestamp: int = Field(..., description="Epoch milliseconds at post time")


class MessageResponse(BaseModel):
    message: str


class CreatedResponse(BaseModel):
    message: str
    id: str = Field(..., description="Store-assigned identifier of the new record")


class TaskListResponse(BaseModel):
    tasks: List[TaskOut]


class ChatListResponse(BaseModel):
    messages: List[ChatMessageOut]


class ErrorResponse(BaseModel):
    """
    Body of every error response. ``error`` is only present for store failures.
    """
    message: str
    error: Optional[Dict[str, Any]] = None


# PUBLIC_INTERFACE
def parse_records(model: Type[ModelT], records: Iterable[Dict[str, Any]]) -> List[ModelT]:
    """
    Convert raw store records into output models.

    Other writers share the stores, so a record that cannot be read as
    ``model`` is reported as a StoreError rather than escaping the handler.
    """
    try:
        return [model(**record) for record in records]
    except RecordValidationError as exc:
        raise StoreError(exc) from exc
