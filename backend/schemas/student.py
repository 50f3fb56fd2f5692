from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


StudentStatus = Literal["active", "inactive", "graduated"]


class StudentBase(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    class_id: int | None = None
    enrollment_date: date | None = None
    status: StudentStatus = "active"


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    class_id: int | None = None
    enrollment_date: date | None = None
    status: StudentStatus | None = None


class StudentOut(StudentBase):
    model_config = ConfigDict(from_attributes=True)

    student_id: int
    class_name: str | None = None
    created_at: datetime | None = None
