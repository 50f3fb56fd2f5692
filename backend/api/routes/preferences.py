from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.deps import get_preferences
from core.database import get_db
from schemas.preference import PreferenceIn, PreferenceOut
from services.preferences import PreferenceStore, UnknownPreferenceError


router = APIRouter()


@router.get("/{key}", response_model=PreferenceOut)
def get_preference(
    key: str,
    db: Session = Depends(get_db),
    prefs: PreferenceStore = Depends(get_preferences),
) -> PreferenceOut:
    try:
        value = prefs.get(db, key)
    except UnknownPreferenceError:
        raise HTTPException(status_code=404, detail="PREFERENCE_NOT_FOUND")
    return PreferenceOut(key=key, value=value)


@router.put("/{key}", response_model=PreferenceOut)
def put_preference(
    key: str,
    payload: PreferenceIn,
    db: Session = Depends(get_db),
    prefs: PreferenceStore = Depends(get_preferences),
) -> PreferenceOut:
    try:
        value = prefs.set(db, key, payload.value)
    except UnknownPreferenceError:
        raise HTTPException(status_code=404, detail="PREFERENCE_NOT_FOUND")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail={"code": "INVALID_PREFERENCE", "message": str(exc)})
    return PreferenceOut(key=key, value=value)
