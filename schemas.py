"""
API Schemas for the Task Tracker

Pydantic models describing what the HTTP API accepts and returns. Field names
are snake_case in Python and camelCase on the wire (dueDate, createdAt, ...).
The database tables live in backend/models.py.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Tasks
class TaskPayload(_CamelModel):
    """
    Body of POST /api/tasks and PUT /api/tasks/{id}

    Read-only fields a client echoes back (id, createdAt, updatedAt) are
    accepted and ignored.
    """
    title: str = Field(..., min_length=1, max_length=255, description="Short task title")
    description: Optional[str] = Field(None, description="Free-form details")
    status: Optional[TaskStatus] = Field(None, description="Defaults to TODO on create; kept on update when omitted")
    priority: Optional[TaskPriority] = Field(None, description="Defaults to MEDIUM on create; kept on update when omitted")
    due_date: Optional[datetime] = Field(None, description="ISO-8601 timestamp")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required")
        return v


class TaskOut(_CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    updated_at: datetime
    due_date: Optional[datetime] = None


# Auth
class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., description="Unique email")
    password: str = Field(..., min_length=6, max_length=72, description="Plain password; stored as a bcrypt hash")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # bcrypt only looks at the first 72 bytes
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    token: str
    email: EmailStr
    name: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Dict[str, str]] = None
