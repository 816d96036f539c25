from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import DEFAULT_FOLDER_COLOR, parse_timestamp

# Shared type for incoming due_date which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Normalize due_date input into a datetime (naive allowed). Dates and
    date-only strings become midnight; an empty form field means no date.
    """
    if value is None or isinstance(value, (date, str)):
        try:
            return parse_timestamp(value)
        except ValueError as e:
            raise ValueError(
                "Invalid due_date format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
            ) from e
    raise ValueError("Invalid type for due_date; expected date, datetime, or ISO8601 string.")


def _clean_title(v: str) -> str:
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


def _clean_folder_id(v: Optional[str]) -> Optional[str]:
    # An empty select value means "no category"
    if v is None or not v.strip():
        return None
    return v.strip()


def _clean_color(v: str) -> str:
    s = v.strip()
    if not _COLOR_RE.match(s):
        raise ValueError("color must be a hex color token like '#4ECDC4'")
    return s.upper()


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item. New todos always start uncompleted.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Read chapter 4",
                "description": "Linear algebra, eigenvalues",
                "due_date": "2025-02-01T18:00:00",
                "folder_id": "2f0c8c0e-9f2d-4c55-a7c3-1d2b9c0e4a11",
            }
        }
    )

    title: str = Field(..., description="Short title for the todo item", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time of the todo item. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    folder_id: Optional[str] = Field(default=None, description="Folder (category) id, or null for none")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _clean_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        """
        Normalize due_date from str/date/datetime to datetime.
        """
        return _parse_due_date(v)

    @field_validator("folder_id")
    @classmethod
    def validate_folder_id(cls, v: Optional[str]) -> Optional[str]:
        return _clean_folder_id(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated, and an
    explicit null clears description, due_date or folder_id.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Read chapter 4 and 5",
                "completed": True,
                "due_date": "2025-02-02T09:30:00",
                "folder_id": None,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time of the todo item. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    folder_id: Optional[str] = Field(default=None, description="Folder (category) id, or null for none")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        if v is None:
            return v
        return _clean_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return _parse_due_date(v)

    @field_validator("folder_id")
    @classmethod
    def validate_folder_id(cls, v: Optional[str]) -> Optional[str]:
        return _clean_folder_id(v)

    def changes(self) -> dict:
        """Fields the client actually sent; title and completed are never nulled."""
        data = self.model_dump(exclude_unset=True)
        for key in ("title", "completed"):
            if key in data and data[key] is None:
                del data[key]
        return data


# PUBLIC_INTERFACE
class TodoToggle(BaseModel):
    """Body of the toggle endpoint."""

    completed: bool = Field(..., description="New completion status")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "b3f1c1de-2a0e-4d4b-9a55-0f2bb1f3c9a7",
                "title": "Read chapter 4",
                "description": "Linear algebra, eigenvalues",
                "completed": False,
                "due_date": "2025-02-01T18:00:00",
                "folder_id": None,
                "user_id": "guest_5c9e0d7f4b3a4a4f8f5f0e6f2d1c0b9a",
                "created_at": "2025-01-25T10:15:30.123456+00:00",
                "updated_at": "2025-01-26T09:00:00.000001+00:00",
                "origin": "remote",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")
    due_date: Optional[datetime] = Field(
        default=None, description="Due date/time of the todo item as an ISO8601 datetime"
    )
    folder_id: Optional[str] = Field(default=None, description="Folder (category) id")
    user_id: str = Field(..., description="Owner id")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    origin: Literal["remote", "local"] = Field(default="remote", description="Store the record was read from")


class TodoList(BaseModel):
    """
    List response with the completion counters shown next to the list.
    """

    items: List[TodoOut] = Field(..., description="Local entries first, then remote entries")
    pending: int = Field(..., description="Number of uncompleted items")
    completed: int = Field(..., description="Number of completed items")


# PUBLIC_INTERFACE
class FolderCreate(BaseModel):
    """Schema for creating a Folder (category)."""

    model_config = ConfigDict(json_schema_extra={"example": {"name": "Mathematics", "color": "#4ECDC4"}})

    name: str = Field(..., description="Folder name", min_length=1, max_length=100)
    color: str = Field(default=DEFAULT_FOLDER_COLOR, description="Hex color token")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("Folder name is required")
        return s

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _clean_color(v)


# PUBLIC_INTERFACE
class FolderUpdate(BaseModel):
    """Partial update of a Folder."""

    name: Optional[str] = Field(default=None, description="Folder name", min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, description="Hex color token")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        s = v.strip()
        if not s:
            raise ValueError("Folder name is required")
        return s

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_color(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


# PUBLIC_INTERFACE
class FolderOut(BaseModel):
    """Schema returned by the API for a Folder."""

    id: str
    name: str
    color: str
    user_id: str
    created_at: datetime
    updated_at: datetime
    origin: Literal["remote", "local"] = "remote"


class SessionOut(BaseModel):
    """The owner id resolved for the current request."""

    owner_id: str = Field(..., description="Authenticated user id or guest id")
    guest: bool = Field(..., description="True when the owner is a generated guest identity")


class StatsOut(BaseModel):
    total: int
    pending: int
    completed: int
    dated: int
