"""Enforce one timetable entry per (class_id, day_of_week, start_time).

Databases created before the constraint existed may hold duplicate rows for a
key. Those are collapsed first, keeping the lowest timetable_id (the row the
weekly grid already shows). Safe to run multiple times.

Run:
  python backend/migrations/add_timetable_natural_key.py --yes
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this script from any working directory.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import text


STATEMENTS = [
    """
    DELETE FROM timetable t
    USING timetable keep
    WHERE t.class_id = keep.class_id
      AND t.day_of_week = keep.day_of_week
      AND t.start_time = keep.start_time
      AND t.timetable_id > keep.timetable_id;
    """,
    """
    DO $$
    BEGIN
      IF NOT EXISTS (
        SELECT 1 FROM pg_constraint WHERE conname = 'uq_timetable_class_day_start'
      ) THEN
        ALTER TABLE timetable
        ADD CONSTRAINT uq_timetable_class_day_start UNIQUE (class_id, day_of_week, start_time);
      END IF;
    END $$;
    """,
]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Enforce the timetable natural key.")
    parser.add_argument("--yes", action="store_true", help="Actually apply changes")
    args = parser.parse_args(argv)

    if not args.yes:
        print("Dry run. Re-run with --yes to apply.")
        for s in STATEMENTS:
            print("---")
            print(s.strip())
        return 0

    from core.database import ENGINE

    with ENGINE.begin() as conn:
        for s in STATEMENTS:
            conn.execute(text(s))

    print("OK: timetable natural key enforced.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
