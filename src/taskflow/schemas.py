"""Pydantic models validating caller payloads at the controller boundary."""

from __future__ import annotations

from typing import Any, Optional, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ValidationError
from .model import TaskPriority, TaskStatus

_M = TypeVar("_M", bound=BaseModel)


def _non_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must be non-empty")
    return value


class TaskCreate(BaseModel):
    """Fields accepted when creating a task."""

    model_config = ConfigDict(extra="forbid")

    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    assigned_to: str = Field(min_length=1)
    created_by: str = Field(min_length=1)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        _non_blank(value)
        return value.strip()


class TaskPatch(BaseModel):
    """Partial update of an existing task.  Identity fields are not patchable."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None

    @field_validator("title", "assigned_to")
    @classmethod
    def _reject_blank(cls, value: Optional[str]) -> Optional[str]:
        value = _non_blank(value)
        return value.strip() if value is not None else None

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class UserRegistration(BaseModel):
    model_config = ConfigDict(extra="forbid")

    display_name: str
    contact_address: str
    avatar_ref: Optional[str] = None

    @field_validator("display_name", "contact_address")
    @classmethod
    def _strip(cls, value: str) -> str:
        _non_blank(value)
        return value.strip()


def parse_payload(model_cls: type[_M], data: Any) -> _M:
    """Validate *data* against *model_cls*, raising the board's ValidationError."""
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except pydantic.ValidationError as exc:
        messages = [
            f"{'.'.join(str(p) for p in err['loc']) or model_cls.__name__}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ValidationError("; ".join(messages), messages) from exc
