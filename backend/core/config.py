from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[1]

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BACKEND_DIR / ".env", env_file_encoding="utf-8")

    database_url: str = Field(validation_alias=AliasChoices("database_url", "DATABASE_URL", "SUPABASE_DB_URL"))

    # Auth (tokens are issued by Supabase; we only verify them)
    jwt_secret_key: str = Field(
        validation_alias=AliasChoices(
            "jwt_secret_key",
            "supabase_jwt_secret",
            "SUPABASE_JWT_SECRET",
            "JWT_SECRET_KEY",
            "JWT_SECRET",
        )
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias=AliasChoices("jwt_algorithm", "JWT_ALGORITHM"))
    jwt_audience: str = Field(
        default="authenticated",
        validation_alias=AliasChoices("jwt_audience", "JWT_AUDIENCE"),
    )

    # Runtime
    environment: str = Field(default="development", validation_alias=AliasChoices("environment", "ENVIRONMENT"))
    frontend_origin: str = Field(
        default="http://localhost:5173",
        validation_alias=AliasChoices("frontend_origin", "FRONTEND_ORIGIN"),
    )
    auto_create_schema: bool = Field(
        default=True,
        validation_alias=AliasChoices("auto_create_schema", "AUTO_CREATE_SCHEMA"),
    )

    # Weekly grid layout
    schedule_days: list[str] = Field(
        default_factory=lambda: list(WEEKDAYS),
        validation_alias=AliasChoices("schedule_days", "SCHEDULE_DAYS"),
    )
    schedule_slots: list[str] = Field(
        default_factory=lambda: ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00"],
        validation_alias=AliasChoices("schedule_slots", "SCHEDULE_SLOTS"),
    )
    teacher_schedule_slots: list[str] = Field(
        default_factory=lambda: ["08:00", "09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00"],
        validation_alias=AliasChoices("teacher_schedule_slots", "TEACHER_SCHEDULE_SLOTS"),
    )

    default_theme: str = Field(default="light", validation_alias=AliasChoices("default_theme", "DEFAULT_THEME"))

    @field_validator("frontend_origin")
    @classmethod
    def _normalize_frontend_origin(cls, v: str) -> str:
        # Starlette CORS expects the Origin to match exactly (no trailing slash).
        return v.strip().rstrip("/")

    @field_validator("schedule_days")
    @classmethod
    def _validate_schedule_days(cls, v: list[str]) -> list[str]:
        days = [d.strip().capitalize() for d in v if d and d.strip()]
        unknown = [d for d in days if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"SCHEDULE_DAYS contains unknown days: {', '.join(unknown)}")
        return days

    @field_validator("schedule_slots", "teacher_schedule_slots")
    @classmethod
    def _normalize_slots(cls, v: list[str]) -> list[str]:
        # Slot labels may be given as "09:00:00" (Postgres time text); the grid keys on "HH:MM".
        slots = [s.strip()[:5] for s in v if s and s.strip()]
        if len(set(slots)) != len(slots):
            raise ValueError("slot labels must be unique")
        return slots

    @field_validator("default_theme")
    @classmethod
    def _normalize_default_theme(cls, v: str) -> str:
        v = (v or "light").strip().lower()
        if v not in {"light", "dark"}:
            raise ValueError("DEFAULT_THEME must be 'light' or 'dark'")
        return v


settings = Settings()
