from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


TeacherStatus = Literal["active", "inactive", "on_leave"]


class TeacherBase(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str | None = None
    specialization: str | None = None
    hire_date: date | None = None
    status: TeacherStatus = "active"


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    phone: str | None = None
    specialization: str | None = None
    hire_date: date | None = None
    status: TeacherStatus | None = None


class TeacherOut(TeacherBase):
    model_config = ConfigDict(from_attributes=True)

    teacher_id: int
    created_at: datetime | None = None
