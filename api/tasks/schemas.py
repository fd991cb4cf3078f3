"""
Task request schemas.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

TaskStatus = Literal["pending", "in_progress", "completed", "cancelled"]
TaskPriority = Literal["urgent", "high", "medium", "low"]

OPEN_STATUSES = ("pending", "in_progress")

# Lower rank sorts first; anything else ranks after "medium".
PRIORITY_RANK = {"urgent": 1, "high": 2, "medium": 3}
DEFAULT_PRIORITY_RANK = 4


class TaskBase(BaseModel):
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    company_id: int | None = Field(default=None, ge=1)
    assigned_to: int | None = Field(default=None, ge=1)


class TaskCreate(TaskBase):
    title: str = Field(..., min_length=1, max_length=255)


class TaskUpdate(TaskBase):
    title: str | None = Field(default=None, min_length=1, max_length=255)
