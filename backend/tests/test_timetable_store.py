import pytest
from sqlalchemy import func, select

from models.timetable_entry import TimetableEntry
from services.timetable_store import StorageError, TimetableStore


def _count(db_session):
    return db_session.execute(select(func.count()).select_from(TimetableEntry)).scalar_one()


def test_upsert_inserts_with_computed_end_time(db_session, school):
    store = TimetableStore(db_session)
    saved = store.upsert(
        class_id=school["class_id"],
        day_of_week="Monday",
        start_time="09:00",
        subject_id=school["math_id"],
        teacher_id=school["ada_id"],
    )

    assert saved.start_time == "09:00:00"
    assert saved.end_time == "10:00:00"
    assert saved.subject == "Math"
    assert saved.teacher == "Ada Lovelace"
    assert _count(db_session) == 1


def test_upsert_on_existing_key_updates_in_place(db_session, school):
    store = TimetableStore(db_session)
    first = store.upsert(
        class_id=school["class_id"],
        day_of_week="Monday",
        start_time="09:00",
        subject_id=school["math_id"],
        teacher_id=school["ada_id"],
    )
    second = store.upsert(
        class_id=school["class_id"],
        day_of_week="Monday",
        start_time="09:00",
        subject_id=school["physics_id"],
        teacher_id=school["alan_id"],
    )

    assert _count(db_session) == 1
    assert second.timetable_id == first.timetable_id
    assert second.subject_id == school["physics_id"]
    assert second.teacher == "Alan Turing"


def test_different_start_times_are_different_entries(db_session, school):
    store = TimetableStore(db_session)
    for start in ("09:00", "10:00"):
        store.upsert(
            class_id=school["class_id"],
            day_of_week="Monday",
            start_time=start,
            subject_id=school["math_id"],
            teacher_id=school["ada_id"],
        )
    assert _count(db_session) == 2


def test_fetch_for_teacher_resolves_class_name(db_session, school):
    store = TimetableStore(db_session)
    store.upsert(
        class_id=school["class_id"],
        day_of_week="Wednesday",
        start_time="11:00",
        subject_id=school["physics_id"],
        teacher_id=school["alan_id"],
    )

    entries = store.fetch_for_teacher(school["alan_id"])
    assert len(entries) == 1
    assert entries[0].class_name == "7A"
    assert entries[0].subject == "Physics"
    assert entries[0].teacher is None
    assert store.fetch_for_teacher(school["ada_id"]) == []


def test_insert_that_loses_the_race_updates_the_winner(db_session, school, monkeypatch):
    store = TimetableStore(db_session)
    winner = store.upsert(
        class_id=school["class_id"],
        day_of_week="Friday",
        start_time="14:00",
        subject_id=school["math_id"],
        teacher_id=school["ada_id"],
    )

    # Simulate a concurrent writer: the first lookup misses the row that already exists.
    real_lookup = store._find_by_natural_key
    calls = []

    def stale_lookup(*args):
        calls.append(args)
        if len(calls) == 1:
            return None
        return real_lookup(*args)

    monkeypatch.setattr(store, "_find_by_natural_key", stale_lookup)

    saved = store.upsert(
        class_id=school["class_id"],
        day_of_week="Friday",
        start_time="14:00",
        subject_id=school["physics_id"],
        teacher_id=school["alan_id"],
    )

    assert len(calls) == 2
    assert _count(db_session) == 1
    assert saved.timetable_id == winner.timetable_id
    assert saved.subject == "Physics"


def test_storage_failure_surfaces_driver_message(db_session, school):
    store = TimetableStore(db_session)
    with pytest.raises(StorageError) as excinfo:
        store.upsert(
            class_id=school["class_id"],
            day_of_week="Monday",
            start_time="09:00",
            subject_id=999,
            teacher_id=school["ada_id"],
        )
    assert "FOREIGN KEY" in str(excinfo.value)
    assert _count(db_session) == 0


def test_delete(db_session, school):
    store = TimetableStore(db_session)
    saved = store.upsert(
        class_id=school["class_id"],
        day_of_week="Monday",
        start_time="09:00",
        subject_id=school["math_id"],
        teacher_id=school["ada_id"],
    )
    assert store.delete(saved.timetable_id) is True
    assert store.delete(saved.timetable_id) is False
    assert store.get(saved.timetable_id) is None
