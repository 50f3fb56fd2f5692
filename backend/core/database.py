from __future__ import annotations

import logging
import time
from typing import Iterable

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from core.config import settings


logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Raised when the database is temporarily unreachable (transient connectivity failure)."""


_RETRY_DELAYS_SECONDS: list[float] = [0.2, 0.5, 1.0]

_TRANSIENT_MARKERS = (
    # DNS resolution
    "getaddrinfo failed",
    "could not translate host name",
    "name or service not known",
    # Connection refused / reset / closed
    "connection refused",
    "actively refused",
    "connection reset",
    "server closed the connection unexpectedly",
    # Timeouts
    "timeout",
    "timed out",
)


def _iter_exception_messages(exc: BaseException) -> Iterable[str]:
    seen: set[int] = set()
    cur: BaseException | None = exc
    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        msg = str(cur)
        if msg:
            yield msg
        cur = getattr(cur, "__cause__", None) or getattr(cur, "__context__", None)


def is_transient_db_connectivity_error(exc: BaseException) -> bool:
    """Heuristically detect transient DB connectivity failures (DNS/timeouts/refused).

    Constraint, validation and SQL errors are never transient.
    """

    joined = "\n".join(m.lower() for m in _iter_exception_messages(exc))
    return any(marker in joined for marker in _TRANSIENT_MARKERS)


def normalize_database_url(raw: str) -> str:
    url = raw.strip()
    # Supabase hands out plain postgres:// URLs; SQLAlchemy wants an explicit driver.
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url.removeprefix("postgresql://")
    elif url.startswith("postgres://"):
        url = "postgresql+psycopg2://" + url.removeprefix("postgres://")
    elif url.startswith("postgresql+psycopg://"):
        url = "postgresql+psycopg2://" + url.removeprefix("postgresql+psycopg://")
    return url


def get_engine(database_url: str | None = None) -> Engine:
    url = normalize_database_url(database_url or settings.database_url)
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        return create_engine(url, connect_args={"check_same_thread": False})

    connect_args: dict[str, object] = {"connect_timeout": 3}
    host = (parsed.host or "").lower()
    if host.endswith("supabase.com") or host.endswith("supabase.co"):
        if "sslmode" not in (parsed.query or {}):
            connect_args["sslmode"] = "require"

    # pool_pre_ping handles stale pooled connections; connect_timeout keeps outages from hanging requests.
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


ENGINE = get_engine()
SessionLocal = sessionmaker(bind=ENGINE, autoflush=False, autocommit=False)


def get_db():
    last_exc: BaseException | None = None

    for attempt in range(len(_RETRY_DELAYS_SECONDS) + 1):
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        except OperationalError as exc:
            last_exc = exc
            db.close()
            if not is_transient_db_connectivity_error(exc) or attempt >= len(_RETRY_DELAYS_SECONDS):
                break
            logger.info("Database ping failed (attempt %d), retrying", attempt + 1)
            time.sleep(_RETRY_DELAYS_SECONDS[attempt])
            continue

        # The endpoint's own exceptions must propagate as-is, not become 503s.
        try:
            yield db
        finally:
            db.close()
        return

    raise DatabaseUnavailableError("Database temporarily unavailable") from last_exc


def ping_database(engine: Engine | None = None) -> bool:
    try:
        with (engine or ENGINE).connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Database health check failed: %s", exc)
        return False
    return True
