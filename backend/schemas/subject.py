from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SubjectCreate(BaseModel):
    subject_name: str = Field(min_length=1)
    subject_code: str = Field(min_length=1)
    description: str | None = None


class SubjectOut(SubjectCreate):
    model_config = ConfigDict(from_attributes=True)

    subject_id: int
    created_at: datetime | None = None
