from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.teacher import Teacher
from schemas.teacher import TeacherCreate, TeacherOut, TeacherUpdate


router = APIRouter()


def _get_teacher(db: Session, teacher_id: int) -> Teacher:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=404, detail="TEACHER_NOT_FOUND")
    return teacher


@router.get("/", response_model=list[TeacherOut])
def list_teachers(db: Session = Depends(get_db)) -> list[TeacherOut]:
    q = select(Teacher).order_by(Teacher.teacher_id.desc())
    return db.execute(q).scalars().all()


@router.get("/{teacher_id}", response_model=TeacherOut)
def get_teacher(teacher_id: int, db: Session = Depends(get_db)) -> TeacherOut:
    return _get_teacher(db, teacher_id)


@router.post("/", response_model=TeacherOut, status_code=201)
def create_teacher(payload: TeacherCreate, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = Teacher(**payload.model_dump())
    db.add(teacher)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="TEACHER_EMAIL_ALREADY_EXISTS")
    db.refresh(teacher)
    return teacher


@router.put("/{teacher_id}", response_model=TeacherOut)
def update_teacher(teacher_id: int, payload: TeacherUpdate, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = _get_teacher(db, teacher_id)
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(teacher, k, v)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(teacher)
    return teacher


@router.delete("/{teacher_id}")
def delete_teacher(teacher_id: int, db: Session = Depends(get_db)) -> dict:
    teacher = _get_teacher(db, teacher_id)
    db.delete(teacher)
    db.commit()
    return {"ok": True}
