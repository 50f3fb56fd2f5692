from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.class_section import ClassSection
from models.student import Student
from schemas.student import StudentCreate, StudentOut, StudentUpdate


router = APIRouter()


def _student_query():
    return select(Student, ClassSection.class_name).outerjoin(ClassSection, ClassSection.class_id == Student.class_id)


def _to_out(student: Student, class_name: str | None) -> StudentOut:
    out = StudentOut.model_validate(student)
    out.class_name = class_name
    return out


def _load(db: Session, student_id: int) -> StudentOut:
    row = db.execute(_student_query().where(Student.student_id == student_id)).first()
    if row is None:
        raise HTTPException(status_code=404, detail="STUDENT_NOT_FOUND")
    return _to_out(row.Student, row.class_name)


def _check_class(db: Session, class_id: int | None) -> None:
    if class_id is not None and db.get(ClassSection, class_id) is None:
        raise HTTPException(status_code=404, detail="CLASS_NOT_FOUND")


@router.get("/", response_model=list[StudentOut])
def list_students(
    class_id: int | None = Query(default=None),
    search: str | None = Query(default=None, min_length=1),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    q = _student_query().order_by(Student.student_id.desc())
    if class_id is not None:
        q = q.where(Student.class_id == class_id)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(
            or_(
                Student.first_name.ilike(like),
                Student.last_name.ilike(like),
                Student.email.ilike(like),
            )
        )
    return [_to_out(r.Student, r.class_name) for r in db.execute(q).all()]


@router.get("/{student_id}", response_model=StudentOut)
def get_student(student_id: int, db: Session = Depends(get_db)) -> StudentOut:
    return _load(db, student_id)


@router.post("/", response_model=StudentOut, status_code=201)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)) -> StudentOut:
    _check_class(db, payload.class_id)
    student = Student(**payload.model_dump())
    db.add(student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="STUDENT_EMAIL_ALREADY_EXISTS")
    return _load(db, student.student_id)


@router.put("/{student_id}", response_model=StudentOut)
def update_student(student_id: int, payload: StudentUpdate, db: Session = Depends(get_db)) -> StudentOut:
    student = db.get(Student, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="STUDENT_NOT_FOUND")

    updates = payload.model_dump(exclude_unset=True)
    if "class_id" in updates:
        _check_class(db, updates["class_id"])
    for k, v in updates.items():
        setattr(student, k, v)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    return _load(db, student_id)


@router.delete("/{student_id}")
def delete_student(student_id: int, db: Session = Depends(get_db)) -> dict:
    student = db.get(Student, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="STUDENT_NOT_FOUND")
    db.delete(student)
    db.commit()
    return {"ok": True}
