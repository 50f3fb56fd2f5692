from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.timeutil import compute_end_time, format_time_of_day, parse_time_of_day
from models.class_section import ClassSection
from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry


logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"


class StorageError(RuntimeError):
    """A read or write against the timetable tables failed; carries the driver's message."""


def _storage_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


@dataclass(frozen=True)
class ScheduledEntry:
    """One timetable row with its display-time joins resolved."""

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


def _entry_from_row(row, *, with_teacher: bool, with_class: bool) -> ScheduledEntry:
    entry: TimetableEntry = row.TimetableEntry
    teacher_name = None
    if with_teacher:
        if row.first_name is not None:
            teacher_name = f"{row.first_name} {row.last_name}"
        else:
            teacher_name = UNKNOWN_NAME
    class_name = None
    if with_class:
        class_name = row.class_name if row.class_name is not None else UNKNOWN_NAME
    return ScheduledEntry(
        timetable_id=int(entry.timetable_id),
        class_id=int(entry.class_id),
        day_of_week=str(entry.day_of_week),
        start_time=format_time_of_day(entry.start_time),
        end_time=format_time_of_day(entry.end_time),
        subject_id=int(entry.subject_id),
        teacher_id=int(entry.teacher_id),
        subject=row.subject_name,
        teacher=teacher_name,
        class_name=class_name,
    )


class TimetableStore:
    """Timetable rows for one database session.

    Reads are resolved in a single joined query. ``upsert`` keys on the
    (class_id, day_of_week, start_time) natural key; the table's unique
    constraint makes a lost insert race fall back to the update branch.
    """

    def __init__(self, db: Session):
        self.db = db

    def _class_query(self):
        return (
            select(TimetableEntry, Subject.subject_name, Teacher.first_name, Teacher.last_name)
            .select_from(TimetableEntry)
            .outerjoin(Subject, Subject.subject_id == TimetableEntry.subject_id)
            .outerjoin(Teacher, Teacher.teacher_id == TimetableEntry.teacher_id)
        )

    def fetch_for_class(self, class_id: int) -> list[ScheduledEntry]:
        q = self._class_query().where(TimetableEntry.class_id == class_id).order_by(TimetableEntry.timetable_id)
        try:
            rows = self.db.execute(q).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch timetable for class %s", class_id, exc_info=exc)
            raise StorageError(_storage_message(exc)) from exc
        return [_entry_from_row(r, with_teacher=True, with_class=False) for r in rows]

    def fetch_for_teacher(self, teacher_id: int) -> list[ScheduledEntry]:
        q = (
            select(TimetableEntry, Subject.subject_name, ClassSection.class_name)
            .select_from(TimetableEntry)
            .outerjoin(Subject, Subject.subject_id == TimetableEntry.subject_id)
            .outerjoin(ClassSection, ClassSection.class_id == TimetableEntry.class_id)
            .where(TimetableEntry.teacher_id == teacher_id)
            .order_by(TimetableEntry.timetable_id)
        )
        try:
            rows = self.db.execute(q).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch timetable for teacher %s", teacher_id, exc_info=exc)
            raise StorageError(_storage_message(exc)) from exc
        return [_entry_from_row(r, with_teacher=False, with_class=True) for r in rows]

    def get(self, timetable_id: int) -> ScheduledEntry | None:
        q = self._class_query().where(TimetableEntry.timetable_id == timetable_id)
        try:
            row = self.db.execute(q).first()
        except SQLAlchemyError as exc:
            raise StorageError(_storage_message(exc)) from exc
        if row is None:
            return None
        return _entry_from_row(row, with_teacher=True, with_class=False)

    def _find_by_natural_key(self, class_id: int, day_of_week: str, start: time) -> TimetableEntry | None:
        q = (
            select(TimetableEntry)
            .where(TimetableEntry.class_id == class_id)
            .where(TimetableEntry.day_of_week == day_of_week)
            .where(TimetableEntry.start_time == start)
        )
        return self.db.execute(q).scalars().first()

    def upsert(
        self,
        *,
        class_id: int,
        day_of_week: str,
        start_time: str,
        subject_id: int,
        teacher_id: int,
    ) -> ScheduledEntry:
        start = parse_time_of_day(start_time)
        end = parse_time_of_day(compute_end_time(start_time))

        try:
            row = self._find_by_natural_key(class_id, day_of_week, start)
            if row is None:
                row = TimetableEntry(
                    class_id=class_id,
                    day_of_week=day_of_week,
                    start_time=start,
                    end_time=end,
                    subject_id=subject_id,
                    teacher_id=teacher_id,
                )
                self.db.add(row)
                try:
                    self.db.commit()
                    logger.info("Inserted timetable entry class=%s %s %s", class_id, day_of_week, start_time)
                except IntegrityError:
                    # Another writer took the key between lookup and insert; update theirs instead.
                    self.db.rollback()
                    row = self._find_by_natural_key(class_id, day_of_week, start)
                    if row is None:
                        raise
                    row.subject_id = subject_id
                    row.teacher_id = teacher_id
                    row.end_time = end
                    self.db.commit()
                    logger.warning(
                        "Insert lost race for class=%s %s %s; updated existing entry %s",
                        class_id,
                        day_of_week,
                        start_time,
                        row.timetable_id,
                    )
            else:
                row.subject_id = subject_id
                row.teacher_id = teacher_id
                row.end_time = end
                self.db.commit()
                logger.info("Updated timetable entry %s in place", row.timetable_id)
            timetable_id = int(row.timetable_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Timetable upsert failed for class=%s", class_id, exc_info=exc)
            raise StorageError(_storage_message(exc)) from exc

        saved = self.get(timetable_id)
        if saved is None:
            raise StorageError(f"timetable entry {timetable_id} vanished after save")
        return saved

    def delete(self, timetable_id: int) -> bool:
        try:
            row = self.db.get(TimetableEntry, timetable_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(_storage_message(exc)) from exc
        logger.info("Deleted timetable entry %s", timetable_id)
        return True
