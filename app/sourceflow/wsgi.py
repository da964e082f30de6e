"""WSGI entrypoint for gunicorn: `gunicorn app.sourceflow.wsgi:app`."""

import os

from app.sourceflow import create_app

app = create_app()


if __name__ == "__main__":
    # Local run only; production goes through scripts/start.py (gunicorn).
    app.run(host="127.0.0.1", port=int(os.environ.get("PORT", 5500)), debug=app.config.get("ENV") == "development")
