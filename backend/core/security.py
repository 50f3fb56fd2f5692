from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt

from core.config import settings


ROLE_ADMIN = "admin"
ROLE_TEACHER = "teacher"


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str | None
    role: str | None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


def create_access_token(
    *,
    user_id: str,
    email: str,
    role: str,
    first_name: str | None = None,
    last_name: str | None = None,
    expires_minutes: int = 60,
) -> str:
    """Mint a token shaped like a Supabase session token (local tooling and tests)."""

    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "aud": settings.jwt_audience,
        # Supabase's top-level role is the Postgres role; the app role lives in user_metadata.
        "role": "authenticated",
        "user_metadata": {"role": role, "first_name": first_name, "last_name": last_name},
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
    )


def identity_from_payload(payload: dict[str, Any]) -> Identity:
    meta = payload.get("user_metadata") or {}
    role = meta.get("role")
    return Identity(
        user_id=str(payload["sub"]),
        email=payload.get("email"),
        role=str(role).strip().lower() if role else None,
        first_name=meta.get("first_name"),
        last_name=meta.get("last_name"),
    )
