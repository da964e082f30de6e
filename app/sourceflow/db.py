from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Generator
from datetime import datetime

from flask import Flask, g
from sqlalchemy import create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.sourceflow.models import DEFAULT_STATUSES, DEMO_CUSTOMER, Base, Customer, Status


def make_engine(db_url: str) -> Engine:
    is_postgres = db_url.startswith("postgres")
    engine_kwargs: dict[str, object] = {
        "future": True,
        "pool_pre_ping": True,
    }
    if is_postgres:
        engine_kwargs.update(
            {
                "pool_recycle": 1800,
                "pool_size": 5,
                "max_overflow": 10,
                "pool_timeout": 30,
            }
        )
    engine = create_engine(db_url, **engine_kwargs)
    if db_url.startswith("sqlite"):
        # SQLite ships with FK enforcement off; request_notes relies on ON DELETE CASCADE.
        @event.listens_for(engine, "connect")
        def _sqlite_fk_on(dbapi_connection, connection_record):  # type: ignore[no-redef]
            cur = dbapi_connection.cursor()
            cur.execute("PRAGMA foreign_keys = ON")
            cur.close()

    return engine


def make_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def init_db(app: Flask) -> None:
    engine = make_engine(app.config["DATABASE_URL"])
    if app.config.get("ENV") != "production":
        @event.listens_for(engine, "checkout")
        def _receive_checkout(dbapi_connection, connection_record, connection_proxy):  # type: ignore[no-redef]
            app.logger.debug("DB connection checkout from pool")
    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = make_sessionmaker(engine)


def create_schema(engine: Engine) -> None:
    """Create every table that does not exist yet. Existing tables are left alone."""
    Base.metadata.create_all(bind=engine, checkfirst=True)


def seed_reference_data(s: Session) -> dict[str, int]:
    """
    Idempotent seed: the status workflow and the demo customer.
    Only fills empty tables; never touches existing rows.
    Returns how many rows were inserted per table.
    """
    inserted = {"statuses": 0, "customers": 0}

    if not s.scalar(select(func.count()).select_from(Status)):
        for status_id, status_name in DEFAULT_STATUSES:
            s.add(Status(status_id=status_id, status_name=status_name))
            inserted["statuses"] += 1

    if not s.scalar(select(func.count()).select_from(Customer)):
        s.add(Customer(created_at=datetime.utcnow(), **DEMO_CUSTOMER))
        inserted["customers"] += 1

    s.flush()
    return inserted


def db_session(app: Flask | None = None) -> Session:
    """
    Request-scoped session. Use inside request handlers.
    """
    if hasattr(g, "db_session") and g.db_session is not None:
        return g.db_session
    if app is None:
        from flask import current_app

        app = current_app
    sm = app.extensions["sqlalchemy_sessionmaker"]
    g.db_session = sm()  # type: ignore[assignment]
    return g.db_session


def teardown_db_session(_exc: BaseException | None) -> None:
    s: Session | None = getattr(g, "db_session", None)
    if s is not None:
        s.close()
        g.db_session = None


@contextmanager
def session_scope(app: Flask) -> Generator[Session, None, None]:
    """
    Non-request helper for startup, scripts and tests: yields a session and commits/rolls back.
    """
    sm = app.extensions["sqlalchemy_sessionmaker"]
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
