from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from models import Base


logger = logging.getLogger(__name__)


def ensure_schema(engine: Engine) -> list[str]:
    """Create any missing tables. Idempotent; existing tables are left untouched.

    Returns the names of the tables that were created.
    """

    existing = set(inspect(engine).get_table_names())
    missing = [t.name for t in Base.metadata.sorted_tables if t.name not in existing]
    if not missing:
        logger.debug("Schema up to date")
        return []

    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Created tables: %s", ", ".join(missing))
    return missing
