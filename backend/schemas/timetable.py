from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class TimetableEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    timetable_id: int
    class_id: int
    day_of_week: str
    start_time: str
    end_time: str
    subject_id: int
    teacher_id: int

    subject: str | None = None
    teacher: str | None = None
    class_name: str | None = None


class GridCellOut(BaseModel):
    day: str
    slot: str
    entry: TimetableEntryOut | None = None


class GridRowOut(BaseModel):
    slot: str
    cells: list[GridCellOut]


class WeeklyGridOut(BaseModel):
    days: list[str]
    slots: list[str]
    rows: list[GridRowOut]
    filled: int


class TimetableSlotPut(BaseModel):
    # Fields are optional at the schema level so that missing values surface as
    # the workflow's own validation codes rather than a generic 422.
    day_of_week: str = ""
    start_time: str = ""
    subject_id: int | None = None
    teacher_id: int | None = None
    mode: Literal["inline", "alert"] = "inline"


class TimetableSaveOut(BaseModel):
    ok: bool = True
    entry: TimetableEntryOut | None = None
    grid: WeeklyGridOut
