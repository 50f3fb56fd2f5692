from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ClassSectionBase(BaseModel):
    class_name: str = Field(min_length=1)
    year_level: int = Field(ge=1, le=13)
    room_number: str | None = None


class ClassSectionCreate(ClassSectionBase):
    pass


class ClassSectionUpdate(BaseModel):
    class_name: str | None = Field(default=None, min_length=1)
    year_level: int | None = Field(default=None, ge=1, le=13)
    room_number: str | None = None


class ClassSectionOut(ClassSectionBase):
    model_config = ConfigDict(from_attributes=True)

    class_id: int
    student_count: int = 0
    created_at: datetime | None = None
