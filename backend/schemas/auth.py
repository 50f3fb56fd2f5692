from __future__ import annotations

from pydantic import BaseModel


class IdentityOut(BaseModel):
    user_id: str
    email: str | None = None
    role: str | None = None
    full_name: str = ""
