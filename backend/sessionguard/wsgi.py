"""WSGI entrypoint (``gunicorn -c backend/gunicorn.conf.py sessionguard.wsgi:app``)."""

from __future__ import annotations

from sessionguard import create_app

app = create_app()
