import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.sourceflow.db import create_schema, seed_reference_data  # noqa: E402
from scripts._db_utils import script_session  # noqa: E402


def seed_only(*, database_url: str | None = None) -> dict[str, int]:
    """
    Seed statuses and the demo customer in an idempotent way.
    Existing rows are never modified.
    """
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///sourceflow.db").strip()
    with script_session(db_url) as s:
        inserted = seed_reference_data(s)
    print(f"Seeded reference data: statuses={inserted['statuses']} customers={inserted['customers']}")
    return inserted


def init_all(*, database_url: str | None = None) -> dict[str, int]:
    """Create missing tables, then seed."""
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///sourceflow.db").strip()
    with script_session(db_url) as s:
        create_schema(s.get_bind())
    print("Tables ensured (create if absent).")
    return seed_only(database_url=db_url)


def main() -> None:
    init_all(database_url=None)


if __name__ == "__main__":
    main()
