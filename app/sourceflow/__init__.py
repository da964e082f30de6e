import logging

from flask import Flask, render_template, request
from dotenv import load_dotenv

from app.sourceflow.config import load_config
from app.sourceflow.db import create_schema, init_db, seed_reference_data, session_scope, teardown_db_session
from app.sourceflow.modules.sourcing_requests.admin import bp as sourcing_requests_bp
from app.sourceflow.routes import bp as routes_bp


def create_app(overrides: dict | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL") or "INFO")

    from app.sourceflow.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d %H:%M") -> str:
        if value is None:
            return "—"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.template_filter("number")
    def _number_filter(value) -> str:
        # Never rounds: the text must parse back to the stored value when a form is re-posted.
        if value is None or value == "":
            return ""
        if isinstance(value, str):
            return value.strip()
        if float(value).is_integer():
            return str(int(value))
        return repr(float(value))

    @app.template_filter("money")
    def _money_filter(value) -> str:
        # Shows the stored amount as-is; whole pounds drop the trailing ".0".
        return _number_filter(value)

    @app.before_request
    def _csrf_guard():
        if not app.config.get("CSRF_ENABLED"):
            return None
        if request.path.startswith(("/static/", "/health", "/healthz")):
            return None
        if request.method in ("POST", "PUT", "PATCH", "DELETE") and not validate_csrf(request):
            app.logger.warning("CSRF check failed: %s %s", request.method, request.path)
            return render_template("errors/400.html", title="Bad request", message="CSRF token missing or invalid."), 400
        return None

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    if app.config.get("AUTO_INIT_DB"):
        create_schema(app.extensions["sqlalchemy_engine"])
        with session_scope(app) as s:
            inserted = seed_reference_data(s)
        if any(inserted.values()):
            app.logger.info("Seeded reference data: %s", inserted)

    app.register_blueprint(routes_bp)
    app.register_blueprint(sourcing_requests_bp)

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(400)
    def _err_400(e):  # type: ignore[no-redef]
        return render_template("errors/400.html", title="Bad request", message=e.description), 400

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html", title="Not found", message=e.description), 404

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 on %s %s", request.method, request.path)
        return render_template("errors/500.html", title="Server error"), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
