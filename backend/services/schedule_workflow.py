from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Sequence

from core.timeutil import compute_end_time, normalize_to_minute_precision
from services.timetable_grid import WeeklyGrid, build_grid
from services.timetable_store import ScheduledEntry, StorageError, TimetableStore


logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    IDLE = "idle"
    FORM_OPEN = "form_open"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class FailureDisplay(str, Enum):
    INLINE = "inline"  # structured add/edit form
    ALERT = "alert"  # quick-add modal


class ScheduleValidationError(ValueError):
    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class InvalidTransitionError(RuntimeError):
    pass


@dataclass
class ScheduleForm:
    day_of_week: str = ""
    start_time: str = ""
    subject_id: int | None = None
    teacher_id: int | None = None


def _as_id(value) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def validate_form(form: ScheduleForm, *, days: Sequence[str], slots: Sequence[str]) -> tuple[int, int]:
    """Check the form and return the (subject_id, teacher_id) pair as ints."""

    errors: list[str] = []

    day = (form.day_of_week or "").strip()
    start = (form.start_time or "").strip()

    if not day:
        errors.append("DAY_REQUIRED")
    elif day not in days:
        errors.append("UNKNOWN_DAY")

    if not start:
        errors.append("START_TIME_REQUIRED")
    else:
        try:
            compute_end_time(start)
        except ValueError:
            errors.append("INVALID_START_TIME")
        else:
            if normalize_to_minute_precision(start) not in {normalize_to_minute_precision(s) for s in slots}:
                errors.append("UNKNOWN_SLOT")

    subject_id = _as_id(form.subject_id)
    if form.subject_id in (None, ""):
        errors.append("SUBJECT_REQUIRED")
    elif subject_id is None:
        errors.append("SUBJECT_INVALID")

    teacher_id = _as_id(form.teacher_id)
    if form.teacher_id in (None, ""):
        errors.append("TEACHER_REQUIRED")
    elif teacher_id is None:
        errors.append("TEACHER_INVALID")

    if errors:
        raise ScheduleValidationError(errors)
    return subject_id, teacher_id


@dataclass
class ScheduleEditWorkflow:
    """Drives open form -> validate -> upsert -> refresh for one class's timetable.

    A failed submit passes through FAILED and lands back in FORM_OPEN with the
    form untouched, so the caller can correct it and submit again.
    """

    store: TimetableStore
    class_id: int
    days: Sequence[str]
    slots: Sequence[str]
    subject_ids: Sequence[int] = ()
    teacher_ids: Sequence[int] = ()
    display: FailureDisplay = FailureDisplay.INLINE

    state: WorkflowState = WorkflowState.IDLE
    form: ScheduleForm = field(default_factory=ScheduleForm)
    entries: list[ScheduledEntry] = field(default_factory=list)
    grid: WeeklyGrid | None = None
    error: Exception | None = None
    saved: ScheduledEntry | None = None
    history: list[WorkflowState] = field(default_factory=list)

    def _transition(self, state: WorkflowState) -> None:
        logger.debug("schedule workflow class=%s: %s -> %s", self.class_id, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def refresh(self) -> WeeklyGrid:
        self.entries = self.store.fetch_for_class(self.class_id)
        self.grid = build_grid(self.entries, self.days, self.slots)
        return self.grid

    def open_form(self, cell: tuple[str, str] | None = None) -> ScheduleForm:
        if self.state not in (WorkflowState.IDLE, WorkflowState.FORM_OPEN):
            raise InvalidTransitionError(f"cannot open form while {self.state.value}")

        form = ScheduleForm(
            day_of_week=self.days[0] if self.days else "",
            start_time=normalize_to_minute_precision(self.slots[0]) if self.slots else "",
            subject_id=self.subject_ids[0] if self.subject_ids else None,
            teacher_id=self.teacher_ids[0] if self.teacher_ids else None,
        )
        if cell is not None:
            day, slot = cell
            form.day_of_week = day
            form.start_time = normalize_to_minute_precision(slot)
            existing = self.grid.cell(day, slot) if self.grid is not None else None
            if existing is not None:
                form.subject_id = existing.subject_id
                form.teacher_id = existing.teacher_id

        self.form = form
        self.error = None
        self._transition(WorkflowState.FORM_OPEN)
        return form

    def update_form(self, **fields) -> ScheduleForm:
        if self.state != WorkflowState.FORM_OPEN:
            raise InvalidTransitionError("form is not open")
        known = set(asdict(self.form))
        unknown = set(fields) - known
        if unknown:
            raise TypeError(f"unknown form fields: {', '.join(sorted(unknown))}")
        for k, v in fields.items():
            setattr(self.form, k, v)
        return self.form

    def submit(self) -> bool:
        if self.state != WorkflowState.FORM_OPEN:
            raise InvalidTransitionError("form is not open")

        self._transition(WorkflowState.SUBMITTING)
        self.saved = None
        try:
            subject_id, teacher_id = validate_form(self.form, days=self.days, slots=self.slots)
            self.saved = self.store.upsert(
                class_id=self.class_id,
                day_of_week=self.form.day_of_week.strip(),
                start_time=normalize_to_minute_precision(self.form.start_time),
                subject_id=subject_id,
                teacher_id=teacher_id,
            )
        except (ScheduleValidationError, StorageError) as exc:
            return self._fail(exc)

        try:
            self.refresh()
        except StorageError as exc:
            # The upsert is committed; ``saved`` stays set for the caller.
            return self._fail(StorageError(f"entry saved but reloading the timetable failed: {exc}"))

        self.error = None
        self._transition(WorkflowState.SUCCESS)
        self._transition(WorkflowState.IDLE)
        return True

    def _fail(self, exc: Exception) -> bool:
        self.error = exc
        logger.info("schedule submit failed for class=%s (%s): %s", self.class_id, self.display.value, exc)
        self._transition(WorkflowState.FAILED)
        self._transition(WorkflowState.FORM_OPEN)
        return False

    def cancel(self) -> None:
        if self.state == WorkflowState.SUBMITTING:
            raise InvalidTransitionError("cannot cancel while submitting")
        self.error = None
        self._transition(WorkflowState.IDLE)

    @property
    def error_codes(self) -> list[str]:
        if isinstance(self.error, ScheduleValidationError):
            return list(self.error.errors)
        return []
