"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Apply :class:`werkzeug.middleware.proxy_fix.ProxyFix` when enabled.

    Parameters
    ----------
    app: flask.Flask
        Application whose WSGI pipeline should respect upstream proxy headers.

    Notes
    -----
    Controlled by ``USE_PROXYFIX`` (default ``True``). ``PROXY_FIX_X_FOR``
    sets how many ``X-Forwarded-For`` hops are trusted; session tokens record
    the resulting ``request.remote_addr`` as their IP address.
    """
    if app.config.get("USE_PROXYFIX", True):
        hops = int(app.config.get("PROXY_FIX_X_FOR", 1))
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=1, x_host=1, x_prefix=1)
