import os

# Bind & workers (several workers require REDIS_URL: the in-memory store is per process)
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 30
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# ProxyFix in the app handles X-Forwarded-For
forwarded_allow_ips = "*"
proxy_protocol = False

wsgi_app = "sessionguard.wsgi:app"
