from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.class_section import ClassSection
from models.student import Student
from schemas.class_section import ClassSectionCreate, ClassSectionOut, ClassSectionUpdate


router = APIRouter()


def _with_counts():
    # One grouped query instead of a count per class.
    counts = (
        select(Student.class_id.label("class_id"), func.count(Student.student_id).label("n"))
        .group_by(Student.class_id)
        .subquery()
    )
    return (
        select(ClassSection, func.coalesce(counts.c.n, 0).label("student_count"))
        .outerjoin(counts, counts.c.class_id == ClassSection.class_id)
    )


def _to_out(cls: ClassSection, student_count: int) -> ClassSectionOut:
    out = ClassSectionOut.model_validate(cls)
    out.student_count = int(student_count)
    return out


def _load(db: Session, class_id: int) -> ClassSectionOut:
    row = db.execute(_with_counts().where(ClassSection.class_id == class_id)).first()
    if row is None:
        raise HTTPException(status_code=404, detail="CLASS_NOT_FOUND")
    return _to_out(row.ClassSection, row.student_count)


@router.get("/", response_model=list[ClassSectionOut])
def list_classes(db: Session = Depends(get_db)) -> list[ClassSectionOut]:
    q = _with_counts().order_by(ClassSection.year_level.asc(), ClassSection.class_name.asc())
    return [_to_out(r.ClassSection, r.student_count) for r in db.execute(q).all()]


@router.get("/{class_id}", response_model=ClassSectionOut)
def get_class(class_id: int, db: Session = Depends(get_db)) -> ClassSectionOut:
    return _load(db, class_id)


@router.post("/", response_model=ClassSectionOut, status_code=201)
def create_class(payload: ClassSectionCreate, db: Session = Depends(get_db)) -> ClassSectionOut:
    cls = ClassSection(**payload.model_dump())
    db.add(cls)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CLASS_ALREADY_EXISTS")
    return _load(db, cls.class_id)


@router.put("/{class_id}", response_model=ClassSectionOut)
def update_class(class_id: int, payload: ClassSectionUpdate, db: Session = Depends(get_db)) -> ClassSectionOut:
    cls = db.get(ClassSection, class_id)
    if cls is None:
        raise HTTPException(status_code=404, detail="CLASS_NOT_FOUND")
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(cls, k, v)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    return _load(db, class_id)


@router.delete("/{class_id}")
def delete_class(class_id: int, db: Session = Depends(get_db)) -> dict:
    cls = db.get(ClassSection, class_id)
    if cls is None:
        raise HTTPException(status_code=404, detail="CLASS_NOT_FOUND")
    db.delete(cls)
    db.commit()
    return {"ok": True}
