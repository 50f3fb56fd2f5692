from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.subject import Subject
from schemas.subject import SubjectCreate, SubjectOut


router = APIRouter()


@router.get("/", response_model=list[SubjectOut])
def list_subjects(db: Session = Depends(get_db)) -> list[SubjectOut]:
    q = select(Subject).order_by(Subject.subject_name.asc())
    return db.execute(q).scalars().all()


@router.post("/", response_model=SubjectOut, status_code=201)
def create_subject(payload: SubjectCreate, db: Session = Depends(get_db)) -> SubjectOut:
    data = payload.model_dump()
    data["subject_code"] = data["subject_code"].strip().upper()
    subject = Subject(**data)
    db.add(subject)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="SUBJECT_CODE_ALREADY_EXISTS")
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}")
def delete_subject(subject_id: int, db: Session = Depends(get_db)) -> dict:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")
    db.delete(subject)
    db.commit()
    return {"ok": True}
