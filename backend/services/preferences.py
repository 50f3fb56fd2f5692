from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.preference import Preference
from services.timetable_store import StorageError


logger = logging.getLogger(__name__)


def _validate_theme(value: Any) -> str:
    v = str(value or "").strip().lower()
    if v not in {"light", "dark"}:
        raise ValueError("theme must be 'light' or 'dark'")
    return v


def _validate_flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError("value must be true or false")
    return value


_VALIDATORS: dict[str, Callable[[Any], Any]] = {
    "theme": _validate_theme,
    "email_notifications": _validate_flag,
    "push_notifications": _validate_flag,
}


class UnknownPreferenceError(LookupError):
    pass


def _require_known(key: str) -> Callable[[Any], Any]:
    validator = _VALIDATORS.get(key)
    if validator is None:
        raise UnknownPreferenceError(key)
    return validator


class PreferenceStore:
    """Process-wide settings, loaded once from ``app_preferences`` and written through on change."""

    def __init__(self, defaults: dict[str, Any] | None = None):
        self._defaults = dict(defaults or {})
        self._values: dict[str, Any] = {}
        self._loaded = False
        self._lock = threading.Lock()

    def load(self, db: Session) -> None:
        try:
            rows = db.execute(select(Preference)).scalars().all()
        except SQLAlchemyError as exc:
            raise StorageError(str(getattr(exc, "orig", None) or exc)) from exc
        with self._lock:
            self._values = {r.key: r.value_json for r in rows if r.key in _VALIDATORS}
            self._loaded = True
        logger.info("Loaded %d stored preferences", len(rows))

    def clear(self) -> None:
        with self._lock:
            self._values = {}
            self._loaded = False

    def get(self, db: Session, key: str) -> Any:
        _require_known(key)
        if not self._loaded:
            self.load(db)
        with self._lock:
            if key in self._values:
                return self._values[key]
        return self._defaults.get(key)

    def set(self, db: Session, key: str, value: Any) -> Any:
        value = _require_known(key)(value)

        try:
            row = db.get(Preference, key)
            if row is None:
                db.add(Preference(key=key, value_json=value))
            else:
                row.value_json = value
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError(str(getattr(exc, "orig", None) or exc)) from exc

        with self._lock:
            self._values[key] = value
        logger.info("Preference %s saved", key)
        return value
