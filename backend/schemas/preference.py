from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class PreferenceIn(BaseModel):
    value: Any


class PreferenceOut(BaseModel):
    key: str
    value: Any
