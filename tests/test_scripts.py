"""Tests for the init/release/start scripts."""
import pytest
from sqlalchemy import create_engine, inspect

from scripts import init_db, start
from scripts.release import run_release


def _tables(db_url):
    engine = create_engine(db_url)
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_init_all_creates_tables_and_seeds(tmp_path):
    db_url = f"sqlite:///{tmp_path/'init.db'}"
    assert init_db.init_all(database_url=db_url) == {"statuses": 4, "customers": 1}
    assert {"customers", "statuses", "requests", "request_notes"} <= _tables(db_url)

    # Second run: tables exist already, nothing to seed.
    assert init_db.init_all(database_url=db_url) == {"statuses": 0, "customers": 0}


def test_release_runs_migrations_then_seed(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'release.db'}"
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("ENV", "test")
    run_release()
    assert {"customers", "statuses", "requests", "request_notes", "alembic_version"} <= _tables(db_url)
    assert init_db.seed_only(database_url=db_url) == {"statuses": 0, "customers": 0}


def test_release_requires_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        run_release()


def test_parse_port():
    assert start.parse_port(None) == 8080
    assert start.parse_port("  ") == 8080
    assert start.parse_port("5500") == 5500
    for bad in ("0", "70000", "http"):
        with pytest.raises(ValueError):
            start.parse_port(bad)


def test_gunicorn_argv_targets_wsgi_app():
    argv = start.gunicorn_argv(9000)
    assert argv[0] == "gunicorn"
    assert "app.sourceflow.wsgi:app" in argv
    assert "0.0.0.0:9000" in argv
