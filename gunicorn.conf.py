"""Gunicorn configuration for the identity sync service.

Run with:
    gunicorn -c gunicorn.conf.py app.wsgi:app
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
# Requests block on IdP round trips; threads keep one slow upstream from stalling a worker
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Reports whether Docker secrets are mounted; settings.py reads them from
    /run/secrets with environment variables as fallback.
    """
    from pathlib import Path
    secrets_dir = Path("/run/secrets")
    if secrets_dir.exists() and secrets_dir.is_dir():
        secret_files = [p for p in secrets_dir.glob("*") if p.is_file()]
        if secret_files:
            worker.log.info(f"Found {len(secret_files)} secrets in /run/secrets")
            return
    worker.log.info("No /run/secrets mount; settings fall back to environment variables")
