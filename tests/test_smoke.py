from datetime import datetime

import pytest

from app.sourceflow import create_app


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("CSRF_ENABLED", "1")
    monkeypatch.delenv("AUTO_INIT_DB", raising=False)
    return create_app()


@pytest.fixture()
def client(app):
    return app.test_client()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_root_redirects_to_requests(client):
    r = client.get("/", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/requests")


def test_empty_list_renders(client):
    r = client.get("/requests")
    assert r.status_code == 200
    assert b"No requests yet." in r.data
    assert "<title>Requests — SourceFlow</title>" in r.get_data(as_text=True)


def test_unknown_path_is_404(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert b"Not found" in r.data


def test_post_without_csrf_token_rejected(client):
    r = client.post("/requests", data={"item_name": "Loafers"})
    assert r.status_code == 400
    assert b"CSRF token missing or invalid." in r.data

    # Nothing was stored.
    r = client.get("/requests")
    assert b"No requests yet." in r.data


def test_post_with_csrf_token_accepted(client):
    client.get("/requests/new")
    with client.session_transaction() as sess:
        token = sess["csrf_token"]

    r = client.post("/requests", data={"item_name": "Loafers", "csrf_token": token}, follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/requests/1")


def test_form_renders_csrf_field(client):
    r = client.get("/requests/new")
    assert r.status_code == 200
    assert b'name="csrf_token"' in r.data


def test_production_requires_secret_key(tmp_path, monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("SECRET_KEY", "change-me")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'prod.db'}")
    with pytest.raises(RuntimeError):
        create_app()


def test_template_filters(app):
    money = app.jinja_env.filters["money"]
    assert money(None) == ""
    assert money(450.0) == "450"
    assert money(99.5) == "99.5"
    assert money(99.999) == "99.999"
    assert money("12") == "12"

    number = app.jinja_env.filters["number"]
    assert number(None) == ""
    assert number(12.345) == "12.345"
    assert float(number(0.1 + 0.2)) == 0.1 + 0.2
    assert number(" 7 ") == "7"

    dateformat = app.jinja_env.filters["dateformat"]
    assert dateformat(None) == "—"
    assert dateformat(datetime(2026, 3, 7, 9, 5, 42)) == "2026-03-07 09:05"
    assert dateformat(datetime(2026, 3, 7, 9, 5), "%d/%m/%Y") == "07/03/2026"
