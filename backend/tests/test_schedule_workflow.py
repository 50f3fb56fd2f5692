import pytest

from core.timeutil import compute_end_time
from services.schedule_workflow import (
    FailureDisplay,
    InvalidTransitionError,
    ScheduleEditWorkflow,
    WorkflowState,
)
from services.timetable_store import ScheduledEntry, StorageError, TimetableStore

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
SLOTS = ["09:00", "10:00", "11:00"]


class RecordingStore:
    """Stands in for TimetableStore and records every upsert it is asked to do."""

    def __init__(self, fail_with=None):
        self.entries = []
        self.upserts = []
        self.fetches = 0
        self.fail_with = fail_with

    def fetch_for_class(self, class_id):
        self.fetches += 1
        return [e for e in self.entries if e.class_id == class_id]

    def upsert(self, *, class_id, day_of_week, start_time, subject_id, teacher_id):
        self.upserts.append(dict(class_id=class_id, day_of_week=day_of_week, start_time=start_time,
                                 subject_id=subject_id, teacher_id=teacher_id))
        if self.fail_with is not None:
            raise self.fail_with
        self.entries = [
            e for e in self.entries
            if (e.class_id, e.day_of_week, e.start_time[:5]) != (class_id, day_of_week, start_time)
        ]
        entry = ScheduledEntry(
            timetable_id=len(self.upserts),
            class_id=class_id,
            day_of_week=day_of_week,
            start_time=f"{start_time}:00",
            end_time=f"{compute_end_time(start_time)}:00",
            subject_id=subject_id,
            teacher_id=teacher_id,
        )
        self.entries.append(entry)
        return entry


def _workflow(store, **kwargs):
    return ScheduleEditWorkflow(
        store=store,
        class_id=1,
        days=DAYS,
        slots=SLOTS,
        subject_ids=[5, 6],
        teacher_ids=[2, 3],
        **kwargs,
    )


def test_open_form_uses_first_available_defaults():
    wf = _workflow(RecordingStore())
    form = wf.open_form()

    assert wf.state == WorkflowState.FORM_OPEN
    assert (form.day_of_week, form.start_time, form.subject_id, form.teacher_id) == ("Monday", "09:00", 5, 2)


def test_successful_submit_refreshes_grid_and_returns_to_idle():
    store = RecordingStore()
    wf = _workflow(store)
    wf.open_form()
    wf.update_form(day_of_week="Tuesday", start_time="10:00", subject_id=6, teacher_id=3)

    assert wf.submit() is True
    assert wf.state == WorkflowState.IDLE
    assert wf.history[-4:] == [
        WorkflowState.FORM_OPEN,
        WorkflowState.SUBMITTING,
        WorkflowState.SUCCESS,
        WorkflowState.IDLE,
    ]
    assert store.fetches == 1
    assert wf.grid.cell("Tuesday", "10:00").subject_id == 6
    assert wf.saved.end_time == "11:00:00"


def test_empty_subject_is_rejected_without_touching_storage():
    store = RecordingStore()
    wf = _workflow(store)
    wf.open_form()
    wf.update_form(subject_id=None)

    assert wf.submit() is False
    assert wf.error_codes == ["SUBJECT_REQUIRED"]
    assert store.upserts == []
    assert wf.state == WorkflowState.FORM_OPEN
    assert WorkflowState.FAILED in wf.history


def test_validation_collects_every_problem():
    wf = _workflow(RecordingStore())
    wf.open_form()
    wf.update_form(day_of_week="Sunday", start_time="08:00", subject_id="", teacher_id=None)

    assert wf.submit() is False
    assert wf.error_codes == ["UNKNOWN_DAY", "UNKNOWN_SLOT", "SUBJECT_REQUIRED", "TEACHER_REQUIRED"]


def test_missing_day_and_malformed_time():
    wf = _workflow(RecordingStore())
    wf.open_form()
    wf.update_form(day_of_week="  ", start_time="9am")

    assert wf.submit() is False
    assert wf.error_codes == ["DAY_REQUIRED", "INVALID_START_TIME"]


def test_storage_failure_keeps_input_for_retry():
    store = RecordingStore(fail_with=StorageError("connection reset by peer"))
    wf = _workflow(store, display=FailureDisplay.ALERT)
    wf.open_form()
    wf.update_form(day_of_week="Friday", start_time="11:00", subject_id=6, teacher_id=3)

    assert wf.submit() is False
    assert isinstance(wf.error, StorageError)
    assert wf.error_codes == []
    assert wf.state == WorkflowState.FORM_OPEN
    assert (wf.form.day_of_week, wf.form.start_time, wf.form.subject_id) == ("Friday", "11:00", 6)

    store.fail_with = None
    assert wf.submit() is True
    assert wf.error is None
    assert len(store.upserts) == 2


def test_open_form_on_filled_cell_prefills_its_values():
    store = RecordingStore()
    wf = _workflow(store)
    wf.open_form()
    wf.update_form(day_of_week="Wednesday", start_time="11:00", subject_id=6, teacher_id=3)
    wf.submit()

    form = wf.open_form(cell=("Wednesday", "11:00"))
    assert (form.day_of_week, form.start_time, form.subject_id, form.teacher_id) == ("Wednesday", "11:00", 6, 3)

    wf.cancel()
    form = wf.open_form(cell=("Thursday", "09:00"))
    assert (form.day_of_week, form.subject_id) == ("Thursday", 5)


def test_submit_requires_open_form():
    wf = _workflow(RecordingStore())
    with pytest.raises(InvalidTransitionError):
        wf.submit()
    with pytest.raises(InvalidTransitionError):
        wf.update_form(subject_id=1)


def test_update_form_rejects_unknown_fields():
    wf = _workflow(RecordingStore())
    wf.open_form()
    with pytest.raises(TypeError):
        wf.update_form(room="B12")


def test_workflow_against_real_store(db_session, school):
    wf = ScheduleEditWorkflow(
        store=TimetableStore(db_session),
        class_id=school["class_id"],
        days=DAYS,
        slots=SLOTS,
        subject_ids=[school["math_id"]],
        teacher_ids=[school["ada_id"]],
    )
    wf.open_form()
    assert wf.submit() is True
    assert wf.grid.cell("Monday", "09:00").subject == "Math"
    assert wf.grid.filled_count() == 1


@pytest.mark.parametrize("bad", ["  ", "abc", True])
def test_non_numeric_ids_fail_validation_and_reopen_the_form(bad):
    store = RecordingStore()
    wf = _workflow(store)
    wf.open_form()
    wf.update_form(subject_id=bad, teacher_id=bad)

    assert wf.submit() is False
    assert wf.error_codes == ["SUBJECT_INVALID", "TEACHER_INVALID"]
    assert wf.state == WorkflowState.FORM_OPEN
    assert store.upserts == []


def test_numeric_strings_are_saved_as_ints():
    store = RecordingStore()
    wf = _workflow(store)
    wf.open_form()
    wf.update_form(subject_id="6", teacher_id=" 3 ")

    assert wf.submit() is True
    assert (store.upserts[0]["subject_id"], store.upserts[0]["teacher_id"]) == (6, 3)


def test_reload_failure_after_save_keeps_the_saved_entry():
    class ReloadFails(RecordingStore):
        def fetch_for_class(self, class_id):
            raise StorageError("connection reset by peer")

    store = ReloadFails()
    wf = _workflow(store)
    wf.open_form()
    wf.update_form(day_of_week="Monday", start_time="10:00", subject_id=5, teacher_id=2)

    assert wf.submit() is False
    assert wf.state == WorkflowState.FORM_OPEN
    assert isinstance(wf.error, StorageError)
    assert "entry saved" in str(wf.error)
    assert wf.saved is not None and wf.saved.start_time == "10:00:00"
    assert len(store.entries) == 1


def test_trailing_junk_after_start_time_is_invalid():
    wf = _workflow(RecordingStore())
    wf.open_form()
    wf.update_form(start_time="09:00garbage")

    assert wf.submit() is False
    assert wf.error_codes == ["INVALID_START_TIME"]
