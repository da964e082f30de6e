from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy.orm import Session

from app.sourceflow.db import make_engine, make_sessionmaker


@contextmanager
def script_session(db_url: str):
    """Commit-or-rollback session on a throwaway engine (FK pragma included for SQLite)."""
    engine = make_engine(db_url)
    sm = make_sessionmaker(engine)
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()
