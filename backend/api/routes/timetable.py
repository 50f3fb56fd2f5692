from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.deps import require_admin
from core.config import settings
from core.database import get_db
from models.class_section import ClassSection
from models.subject import Subject
from models.teacher import Teacher
from schemas.timetable import (
    GridCellOut,
    GridRowOut,
    TimetableEntryOut,
    TimetableSaveOut,
    TimetableSlotPut,
    WeeklyGridOut,
)
from services.schedule_workflow import FailureDisplay, ScheduleEditWorkflow, ScheduleValidationError
from services.timetable_grid import WeeklyGrid, build_grid
from services.timetable_store import ScheduledEntry, TimetableStore


router = APIRouter()


def _entry_out(entry: ScheduledEntry | None) -> TimetableEntryOut | None:
    if entry is None:
        return None
    return TimetableEntryOut.model_validate(entry)


def _grid_out(grid: WeeklyGrid) -> WeeklyGridOut:
    rows = [
        GridRowOut(
            slot=slot,
            cells=[GridCellOut(day=c.day, slot=c.slot, entry=_entry_out(c.entry)) for c in cells],
        )
        for slot, cells in grid.rows()
    ]
    return WeeklyGridOut(days=list(grid.days), slots=list(grid.slots), rows=rows, filled=grid.filled_count())


def _require_class(db: Session, class_id: int) -> ClassSection:
    cls = db.get(ClassSection, class_id)
    if cls is None:
        raise HTTPException(status_code=404, detail="CLASS_NOT_FOUND")
    return cls


@router.get("/class/{class_id}", response_model=WeeklyGridOut)
def get_class_timetable(class_id: int, db: Session = Depends(get_db)) -> WeeklyGridOut:
    _require_class(db, class_id)
    entries = TimetableStore(db).fetch_for_class(class_id)
    return _grid_out(build_grid(entries, settings.schedule_days, settings.schedule_slots))


@router.get("/class/{class_id}/entries", response_model=list[TimetableEntryOut])
def list_class_entries(class_id: int, db: Session = Depends(get_db)) -> list[TimetableEntryOut]:
    _require_class(db, class_id)
    return [_entry_out(e) for e in TimetableStore(db).fetch_for_class(class_id)]


@router.get("/teacher/{teacher_id}", response_model=WeeklyGridOut)
def get_teacher_timetable(teacher_id: int, db: Session = Depends(get_db)) -> WeeklyGridOut:
    if db.get(Teacher, teacher_id) is None:
        raise HTTPException(status_code=404, detail="TEACHER_NOT_FOUND")
    entries = TimetableStore(db).fetch_for_teacher(teacher_id)
    return _grid_out(build_grid(entries, settings.schedule_days, settings.teacher_schedule_slots))


@router.put("/class/{class_id}", response_model=TimetableSaveOut)
def save_class_timetable_slot(
    class_id: int,
    payload: TimetableSlotPut,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> TimetableSaveOut:
    _require_class(db, class_id)

    if payload.subject_id is not None and db.get(Subject, payload.subject_id) is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")
    if payload.teacher_id is not None and db.get(Teacher, payload.teacher_id) is None:
        raise HTTPException(status_code=404, detail="TEACHER_NOT_FOUND")

    workflow = ScheduleEditWorkflow(
        store=TimetableStore(db),
        class_id=class_id,
        days=settings.schedule_days,
        slots=settings.schedule_slots,
        display=FailureDisplay(payload.mode),
    )
    workflow.open_form()
    workflow.update_form(
        day_of_week=payload.day_of_week,
        start_time=payload.start_time,
        subject_id=payload.subject_id,
        teacher_id=payload.teacher_id,
    )

    if not workflow.submit():
        err = workflow.error
        if isinstance(err, ScheduleValidationError):
            raise HTTPException(
                status_code=400,
                detail={
                    "code": "INVALID_TIMETABLE_ENTRY",
                    "errors": err.errors,
                    "display": workflow.display.value,
                },
            )
        raise HTTPException(
            status_code=500,
            detail={
                "code": "STORAGE_ERROR",
                "message": str(err),
                "display": workflow.display.value,
                "saved": _entry_out(workflow.saved).model_dump() if workflow.saved is not None else None,
            },
        )

    return TimetableSaveOut(entry=_entry_out(workflow.saved), grid=_grid_out(workflow.grid))


@router.delete("/{timetable_id}")
def delete_timetable_entry(
    timetable_id: int,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    if not TimetableStore(db).delete(timetable_id):
        raise HTTPException(status_code=404, detail="TIMETABLE_ENTRY_NOT_FOUND")
    return {"ok": True}
