from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import require_admin, require_staff
from api.routes import auth, classes, preferences, students, subjects, teachers, timetable


api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Reads of the timetable are open to teachers; the timetable router guards its own writes.
api_router.include_router(timetable.router, prefix="/timetable", tags=["timetable"], dependencies=[Depends(require_staff)])
api_router.include_router(preferences.router, prefix="/preferences", tags=["preferences"], dependencies=[Depends(require_staff)])

_protected = [Depends(require_admin)]
api_router.include_router(students.router, prefix="/students", tags=["students"], dependencies=_protected)
api_router.include_router(teachers.router, prefix="/teachers", tags=["teachers"], dependencies=_protected)
api_router.include_router(classes.router, prefix="/classes", tags=["classes"], dependencies=_protected)
api_router.include_router(subjects.router, prefix="/subjects", tags=["subjects"], dependencies=_protected)
