"""Gunicorn configuration file.

Runs the application factory; every worker builds its own Keycloak client,
so service account tokens are never shared across processes.

Environment:
    BIND             listen address (default 0.0.0.0:8080)
    WEB_CONCURRENCY  worker processes (default 2)
    GUNICORN_TIMEOUT worker timeout in seconds (default 30)
    LOG_LEVEL        gunicorn and application log level (default info)
"""
import os

wsgi_app = "backend_resources.flask_app:create_app()"

bind = os.environ.get("BIND", "0.0.0.0:8080")
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))

loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    realm = os.environ.get("KEYCLOAK_REALM", "itm")
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"
    worker.log.info(f"Worker {worker.pid} ready (realm={realm}, demo_mode={demo_mode})")
    if demo_mode:
        worker.log.warning("DEMO_MODE=true: demo Keycloak credentials in use")
